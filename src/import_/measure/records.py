"""
Normalized records produced by the extraction engine.

One ExtractedRecord is produced per matched C32 entry. Codes are grouped by
code system name (the names measure definitions use), and HL7 timestamps are
converted to datetimes.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

# Code system OIDs to the names used in measure definitions
CODE_SYSTEMS = {
    "2.16.840.1.113883.6.1": "LOINC",
    "2.16.840.1.113883.6.96": "SNOMED-CT",
    "2.16.840.1.113883.6.88": "RxNorm",
    "2.16.840.1.113883.6.12": "CPT",
    "2.16.840.1.113883.6.103": "ICD-9-CM",
    "2.16.840.1.113883.6.104": "ICD-9-PCS",
    "2.16.840.1.113883.6.90": "ICD-10-CM",
    "2.16.840.1.113883.6.4": "ICD-10-PCS",
    "2.16.840.1.113883.6.285": "HCPCS",
    "2.16.840.1.113883.6.59": "CVX",
}

UNKNOWN_CODE_SYSTEM = "Unknown"

# HL7 TS: YYYY[MM[DD[HH[MM[SS]]]]][.ffff][+/-ZZZZ]
HL7_TIMESTAMP_PATTERN = re.compile(
    r"^(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?(?:\.(\d{1,6}))?([+-]\d{4})?$"
)


@dataclass(frozen=True)
class ExtractedRecord:
    """A single clinical fact extracted from a C32 entry."""

    codes: dict[str, list[str]] = field(default_factory=dict)
    time: datetime | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    value: str | None = None
    unit: str | None = None
    status: str | None = None
    description: str | None = None
    entry_id: str | None = None

    def __hash__(self) -> int:
        # codes is a dict, so the generated frozen hash cannot be used
        return hash(
            (
                frozenset(
                    (system, tuple(codes)) for system, codes in self.codes.items()
                ),
                self.time,
                self.start_time,
                self.end_time,
                self.value,
                self.unit,
                self.status,
                self.description,
                self.entry_id,
            )
        )

    @property
    def reference_time(self) -> datetime | None:
        """Point in time used when comparing the record against date bounds."""
        if self.time is not None:
            return self.time
        if self.start_time is not None:
            return self.start_time
        return self.end_time

    def has_code(self, system: str, code: str) -> bool:
        """Check whether the record carries ``code`` in ``system``."""
        return code in self.codes.get(system, [])


def code_system_name(oid: str | None) -> str:
    """Map a code system OID to its name, keeping unknown OIDs verbatim."""
    if not oid:
        return UNKNOWN_CODE_SYSTEM
    return CODE_SYSTEMS.get(oid, oid)


def parse_hl7_timestamp(value: str | None) -> datetime | None:
    """
    Parse an HL7 v3 TS value.

    Args:
        value: Timestamp such as "20100315" or "20100315143000-0500"

    Returns:
        datetime (timezone-aware when an offset is given), or None if the
        value is missing or malformed
    """
    if not value:
        return None

    match = HL7_TIMESTAMP_PATTERN.match(value.strip())
    if not match:
        return None

    year, month, day, hour, minute, second, fraction, offset = match.groups()

    try:
        tzinfo = None
        if offset:
            sign = -1 if offset[0] == "-" else 1
            # timezone() rejects offsets of 24 hours or more
            tzinfo = timezone(
                sign * timedelta(hours=int(offset[1:3]), minutes=int(offset[3:5]))
            )

        return datetime(
            int(year),
            int(month or 1),
            int(day or 1),
            int(hour or 0),
            int(minute or 0),
            int(second or 0),
            int(fraction.ljust(6, "0")) if fraction else 0,
            tzinfo=tzinfo,
        )
    except ValueError:
        return None
