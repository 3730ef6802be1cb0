"""
Generic importer for quality measures.

Given a measure definition (property name -> description with
``standard_categories``) and a parsed HITSP C32 document, returns every entry
of the property's categories as ExtractedRecords:

    importer = MeasureImporter()
    result = importer.parse(measure["measure"], document)
    result["encounters"]  # -> list[ExtractedRecord]

Records are concatenated in category declaration order, and within a category
in document order. Category names outside StandardCategory are dropped unless
strict mode is enabled.
"""

import logging
from types import MappingProxyType
from typing import Any, Iterable, Mapping

from lxml import etree

from src.exceptions import ConfigurationError
from src.import_.measure.categories import (
    C32_LOCATION_QUERIES,
    LocationQuery,
    StandardCategory,
)
from src.import_.measure.records import ExtractedRecord
from src.import_.measure.section_importer import CategoryExtractor
from src.settings import settings

logger = logging.getLogger(__name__)

MeasureResult = dict[str, list[ExtractedRecord]]


class MeasureImporter:
    """Extracts the data a measure needs from C32 documents."""

    def __init__(
        self,
        location_queries: Mapping[
            StandardCategory, LocationQuery
        ] = C32_LOCATION_QUERIES,
        strict_categories: bool | None = None,
    ):
        """
        Build the category -> extractor table.

        Args:
            location_queries: Location query for every standard category
            strict_categories: Raise on unknown category names instead of
                dropping them. Defaults to settings.strict_categories.

        Raises:
            ConfigurationError: If a category has no query or a query is
                not valid XPath
        """
        missing = [c.value for c in StandardCategory if c not in location_queries]
        if missing:
            raise ConfigurationError(
                f"No location query configured for categories: {', '.join(missing)}"
            )

        self._extractors: Mapping[StandardCategory, CategoryExtractor] = (
            MappingProxyType(
                {
                    category: CategoryExtractor.from_query(location_queries[category])
                    for category in StandardCategory
                }
            )
        )
        self.strict_categories = (
            settings.strict_categories
            if strict_categories is None
            else strict_categories
        )

    @property
    def extractors(self) -> Mapping[StandardCategory, CategoryExtractor]:
        """Read-only category -> extractor table."""
        return self._extractors

    def extractor_for(
        self, category: str | StandardCategory
    ) -> CategoryExtractor | None:
        """Return the extractor for a category name, or None if unknown."""
        standard_category = StandardCategory.lookup(category)
        if standard_category is None:
            return None
        return self._extractors[standard_category]

    def parse(
        self,
        definition: Mapping[str, Mapping[str, Any]],
        document: etree._ElementTree | etree._Element,
    ) -> MeasureResult:
        """
        Extract the records for every property of a measure definition.

        Args:
            definition: Mapping of property name to its description
            document: Parsed C32 document with the cda namespace

        Returns:
            Mapping of property name to its records. Every property of the
            definition is present, even when it has no records.

        Raises:
            ConfigurationError: In strict mode, for an unknown category name
            QueryError: If a location query fails against the document
        """
        measure_info: MeasureResult = {}

        for property_name, description in definition.items():
            extractors = self._extractors_for_categories(
                property_name, description.get("standard_categories") or []
            )

            records: list[ExtractedRecord] = []
            for extractor in extractors:
                records.extend(extractor.extract(document, description))
            measure_info[property_name] = records

        logger.debug(
            "Parsed %d measure properties (%d records)",
            len(measure_info),
            sum(len(r) for r in measure_info.values()),
        )
        return measure_info

    def parse_measure(
        self,
        measure: Mapping[str, Any],
        document: etree._ElementTree | etree._Element,
    ) -> MeasureResult:
        """Parse a full measure JSON whose properties live under "measure"."""
        if "measure" not in measure:
            raise ConfigurationError("Measure definition has no 'measure' properties")
        return self.parse(measure["measure"], document)

    def _extractors_for_categories(
        self, property_name: str, standard_categories: Iterable[str]
    ) -> list[CategoryExtractor]:
        """Resolve category names in declared order."""
        extractors: list[CategoryExtractor] = []

        for category in standard_categories:
            extractor = self.extractor_for(category)
            if extractor is not None:
                extractors.append(extractor)
            elif self.strict_categories:
                raise ConfigurationError(
                    f"Unknown category {category!r} for property {property_name!r}"
                )
            else:
                logger.debug(
                    "Dropping unknown category %r for property %r",
                    category,
                    property_name,
                )

        return extractors
