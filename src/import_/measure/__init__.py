"""
Measure data extraction from HITSP C32 documents.

This module handles:
- Mapping standard categories to the C32 locations of their entries
- Extracting normalized records for each category
- Assembling the records a measure definition asks for, per property
- Filtering records against a property's matching rules
"""

from src.import_.measure.categories import (
    C32_LOCATION_QUERIES,
    NAMESPACES,
    LocationQuery,
    StandardCategory,
)
from src.import_.measure.generic_importer import MeasureImporter, MeasureResult
from src.import_.measure.matching import MatchingRules, filter_records
from src.import_.measure.records import ExtractedRecord
from src.import_.measure.section_importer import CategoryExtractor

__all__ = [
    "C32_LOCATION_QUERIES",
    "NAMESPACES",
    "CategoryExtractor",
    "ExtractedRecord",
    "LocationQuery",
    "MatchingRules",
    "MeasureImporter",
    "MeasureResult",
    "StandardCategory",
    "filter_records",
]
