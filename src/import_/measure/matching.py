"""
Record-level matching rules.

The extraction engine returns every entry of a property's categories. Measure
calculators narrow them down with the rest of the property description: the
accepted codes per code system and an optional effective time window.
"""

from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.import_.measure.records import ExtractedRecord


class MatchingRules(BaseModel):
    """Matching criteria read from a measure property description."""

    model_config = ConfigDict(extra="allow", frozen=True)

    standard_categories: list[str] = Field(
        default_factory=list,
        description="Categories the property draws its records from",
    )
    codes: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Accepted codes keyed by code system name",
    )
    effective_start: datetime | None = Field(
        default=None,
        description="Records before this time do not match",
    )
    effective_end: datetime | None = Field(
        default=None,
        description="Records after this time do not match",
    )

    @model_validator(mode="after")
    def validate_window(self) -> "MatchingRules":
        """Ensure the effective window is not inverted."""
        if (
            self.effective_start is not None
            and self.effective_end is not None
            and _as_naive_utc(self.effective_start) > _as_naive_utc(self.effective_end)
        ):
            raise ValueError("effective_start must not be after effective_end")
        return self

    @classmethod
    def from_description(
        cls, description: "Mapping[str, Any] | MatchingRules"
    ) -> "MatchingRules":
        """Build rules from a property description."""
        if isinstance(description, MatchingRules):
            return description
        return cls.model_validate(dict(description))

    def matches(self, record: ExtractedRecord) -> bool:
        """Check a record against the code and date criteria."""
        return self._matches_codes(record) and self._matches_window(record)

    def _matches_codes(self, record: ExtractedRecord) -> bool:
        if not self.codes:
            return True
        return any(
            record.has_code(system, code)
            for system, codes in self.codes.items()
            for code in codes
        )

    def _matches_window(self, record: ExtractedRecord) -> bool:
        if self.effective_start is None and self.effective_end is None:
            return True

        if record.reference_time is None:
            return False

        reference_time = _as_naive_utc(record.reference_time)
        if (
            self.effective_start is not None
            and reference_time < _as_naive_utc(self.effective_start)
        ):
            return False
        if (
            self.effective_end is not None
            and reference_time > _as_naive_utc(self.effective_end)
        ):
            return False
        return True


def _as_naive_utc(value: datetime) -> datetime:
    """Normalize to naive UTC so aware and naive times can be compared."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def filter_records(
    records: Iterable[ExtractedRecord],
    description: Mapping[str, Any] | MatchingRules,
) -> list[ExtractedRecord]:
    """
    Keep the records that satisfy a property's matching rules.

    Args:
        records: Records extracted for the property
        description: Property description or already-built MatchingRules

    Returns:
        Matching records, in their original order
    """
    rules = MatchingRules.from_description(description)
    return [record for record in records if rules.matches(record)]
