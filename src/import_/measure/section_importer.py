"""
Category extractor for HITSP C32 documents.

A CategoryExtractor finds every entry of one category with its entry XPath and
turns each into an ExtractedRecord. When a code XPath is configured the code is
read from the node it selects, relative to the entry; entries for which it
selects nothing are skipped. Otherwise the entry's own ``code`` child is used.

Matching rules are passed through untouched: records are not filtered here.
Consumers filter with ``src.import_.measure.matching.filter_records``.
"""

import logging
from datetime import datetime
from typing import Any, Mapping

from lxml import etree

from src.exceptions import QueryError
from src.import_.measure.categories import NAMESPACES, LocationQuery
from src.import_.measure.records import (
    ExtractedRecord,
    code_system_name,
    parse_hl7_timestamp,
)

logger = logging.getLogger(__name__)


class CategoryExtractor:
    """Extracts the entries of a single category from a C32 document."""

    def __init__(
        self,
        entry_xpath: str,
        code_xpath: str | None = None,
        namespaces: Mapping[str, str] = NAMESPACES,
    ):
        """
        Compile the location query.

        Raises:
            ConfigurationError: If either expression is not valid XPath
        """
        self.query = LocationQuery(entry_xpath, code_xpath, dict(namespaces))
        self._entry_xpath, self._code_xpath = self.query.compile()
        self._ns = {**NAMESPACES, **namespaces}

    @classmethod
    def from_query(cls, query: LocationQuery) -> "CategoryExtractor":
        """Create an extractor from a LocationQuery."""
        return cls(query.entry_xpath, query.code_xpath, query.namespaces)

    def __repr__(self) -> str:
        return (
            f"CategoryExtractor(entry_xpath={self.query.entry_xpath!r}, "
            f"code_xpath={self.query.code_xpath!r})"
        )

    def extract(
        self,
        document: etree._ElementTree | etree._Element,
        matching_rules: Mapping[str, Any] | None = None,
    ) -> list[ExtractedRecord]:
        """
        Extract one record per matched entry, in document order.

        Args:
            document: Parsed C32 document or element to search
            matching_rules: Property description the records are extracted
                for; not applied here

        Returns:
            List of ExtractedRecord

        Raises:
            QueryError: If a query fails to evaluate or selects non-elements
        """
        records: list[ExtractedRecord] = []

        for entry in self._evaluate(self._entry_xpath, document):
            source = self._code_source(entry)
            if source is None:
                continue
            records.append(self._build_record(entry, source))

        logger.debug(
            "Extracted %d records for %s", len(records), self.query.entry_xpath
        )
        return records

    def _evaluate(
        self, xpath: etree.XPath, node: etree._ElementTree | etree._Element
    ) -> list[etree._Element]:
        """Evaluate an XPath and require an element node-set."""
        try:
            result = xpath(node)
        except (etree.XPathError, TypeError, ValueError) as e:
            raise QueryError(f"Failed to evaluate {xpath.path!r}: {e}") from e

        if not isinstance(result, list):
            raise QueryError(
                f"XPath {xpath.path!r} returned {type(result).__name__}, "
                "expected a node-set"
            )

        elements = [item for item in result if isinstance(item, etree._Element)]
        if len(elements) != len(result):
            raise QueryError(f"XPath {xpath.path!r} selected non-element nodes")
        return elements

    def _code_source(self, entry: etree._Element) -> etree._Element | None:
        """Find the node holding the entry's code, or None to skip the entry."""
        if self._code_xpath is None:
            code = entry.find("cda:code", self._ns)
            return code if code is not None else entry

        matches = self._evaluate(self._code_xpath, entry)
        if not matches:
            return None
        return matches[0]

    def _build_record(
        self, entry: etree._Element, source: etree._Element
    ) -> ExtractedRecord:
        time, start_time, end_time = self._extract_times(entry)
        value, unit = self._extract_value(entry, source)

        status_elem = entry.find("cda:statusCode", self._ns)
        status = status_elem.get("code") if status_elem is not None else None

        return ExtractedRecord(
            codes=self._extract_codes(source),
            time=time,
            start_time=start_time,
            end_time=end_time,
            value=value,
            unit=unit,
            status=status,
            description=self._extract_description(source),
            entry_id=self._extract_id(entry),
        )

    def _extract_codes(self, source: etree._Element) -> dict[str, list[str]]:
        """Collect the source's code and its translations by code system."""
        codes: dict[str, list[str]] = {}

        # Without a code XPath and without a code child, the entry itself is
        # the source and has no code attributes
        candidates = [source] + source.findall("cda:translation", self._ns)
        for candidate in candidates:
            code = candidate.get("code")
            if not code:
                continue
            system = code_system_name(candidate.get("codeSystem"))
            system_codes = codes.setdefault(system, [])
            if code not in system_codes:
                system_codes.append(code)

        return codes

    def _extract_times(
        self, entry: etree._Element
    ) -> tuple[datetime | None, datetime | None, datetime | None]:
        effective_time = entry.find("cda:effectiveTime", self._ns)
        if effective_time is None:
            return None, None, None

        time = parse_hl7_timestamp(effective_time.get("value"))

        start_time = None
        low = effective_time.find("cda:low", self._ns)
        if low is not None and low.get("nullFlavor") is None:
            start_time = parse_hl7_timestamp(low.get("value"))

        end_time = None
        high = effective_time.find("cda:high", self._ns)
        if high is not None and high.get("nullFlavor") is None:
            end_time = parse_hl7_timestamp(high.get("value"))

        return time, start_time, end_time

    def _extract_value(
        self, entry: etree._Element, source: etree._Element
    ) -> tuple[str | None, str | None]:
        value_elem = entry.find("cda:value", self._ns)
        # Conditions use the value element as their code
        if value_elem is None or value_elem is source:
            return None, None
        return value_elem.get("value"), value_elem.get("unit")

    def _extract_description(self, source: etree._Element) -> str | None:
        display = source.get("displayName")
        if display:
            return display

        original_text = source.findtext("cda:originalText", namespaces=self._ns)
        if original_text and original_text.strip():
            return original_text.strip()
        return None

    def _extract_id(self, entry: etree._Element) -> str | None:
        id_elem = entry.find("cda:id", self._ns)
        if id_elem is None:
            return None

        root = id_elem.get("root")
        extension = id_elem.get("extension")
        if root and extension:
            return f"{root}^{extension}"
        return root or extension
