"""
Standard categories and the C32 locations their entries are found at.

Each standard category used by measure definitions maps to exactly one
LocationQuery. The entry XPath finds candidate entries anywhere in a HITSP C32
document; the optional code XPath is evaluated relative to each entry when the
clinically meaningful code is not on the entry's own ``code`` child:

- Medications carry their code on
  consumable/manufacturedProduct/manufacturedMaterial/code
- Conditions carry their code on the observation's ``value`` element
"""

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from lxml import etree

from src.exceptions import ConfigurationError

# C-CDA namespace
CDA_NS = "urn:hl7-org:v3"
NAMESPACES = {"cda": CDA_NS}


class StandardCategory(str, Enum):
    """Standard categories a measure property can draw data from."""

    ENCOUNTER = "encounter"
    PROCEDURE = "procedure"
    LABORATORY_TEST = "laboratory_test"
    PHYSICAL_EXAM = "physical_exam"
    MEDICATION = "medication"
    DIAGNOSIS_CONDITION_PROBLEM = "diagnosis_condition_problem"

    @classmethod
    def lookup(cls, name: "str | StandardCategory") -> "StandardCategory | None":
        """Return the category for a name, or None if it is not a standard one."""
        try:
            return cls(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class LocationQuery:
    """XPath pair locating a category's entries and, optionally, their code."""

    entry_xpath: str
    code_xpath: str | None = None
    namespaces: Mapping[str, str] = field(
        default_factory=lambda: MappingProxyType(dict(NAMESPACES))
    )

    def compile(self) -> tuple[etree.XPath, etree.XPath | None]:
        """
        Compile both expressions.

        Returns:
            Tuple of (entry XPath, code XPath or None)

        Raises:
            ConfigurationError: If either expression is not valid XPath
        """
        entry = _compile_xpath(self.entry_xpath, self.namespaces)
        code = (
            _compile_xpath(self.code_xpath, self.namespaces)
            if self.code_xpath is not None
            else None
        )
        return entry, code


def _compile_xpath(expression: str, namespaces: Mapping[str, str]) -> etree.XPath:
    try:
        return etree.XPath(expression, namespaces=dict(namespaces))
    except etree.XPathError as e:
        raise ConfigurationError(f"Invalid XPath {expression!r}: {e}") from e


# HITSP C32 / C83 section and entry templateIds
ENCOUNTERS_SECTION_TEMPLATE = "2.16.840.1.113883.3.88.11.83.127"
PROCEDURE_ENTRY_TEMPLATE = "2.16.840.1.113883.10.20.1.29"
RESULT_ENTRY_TEMPLATE = "2.16.840.1.113883.3.88.11.83.15"
VITAL_SIGN_ENTRY_TEMPLATE = "2.16.840.1.113883.3.88.11.83.14"
MEDICATIONS_SECTION_TEMPLATE = "2.16.840.1.113883.3.88.11.83.112"
CONDITIONS_SECTION_TEMPLATE = "2.16.840.1.113883.3.88.11.83.103"

C32_LOCATION_QUERIES: Mapping[StandardCategory, LocationQuery] = MappingProxyType(
    {
        StandardCategory.ENCOUNTER: LocationQuery(
            f"//cda:section[cda:templateId/@root='{ENCOUNTERS_SECTION_TEMPLATE}']"
            "/cda:entry/cda:encounter"
        ),
        StandardCategory.PROCEDURE: LocationQuery(
            f"//cda:procedure[cda:templateId/@root='{PROCEDURE_ENTRY_TEMPLATE}']"
        ),
        StandardCategory.LABORATORY_TEST: LocationQuery(
            f"//cda:observation[cda:templateId/@root='{RESULT_ENTRY_TEMPLATE}']"
        ),
        StandardCategory.PHYSICAL_EXAM: LocationQuery(
            f"//cda:observation[cda:templateId/@root='{VITAL_SIGN_ENTRY_TEMPLATE}']"
        ),
        StandardCategory.MEDICATION: LocationQuery(
            f"//cda:section[cda:templateId/@root='{MEDICATIONS_SECTION_TEMPLATE}']"
            "/cda:entry/cda:substanceAdministration",
            "./cda:consumable/cda:manufacturedProduct/cda:manufacturedMaterial/cda:code",
        ),
        StandardCategory.DIAGNOSIS_CONDITION_PROBLEM: LocationQuery(
            f"//cda:section[cda:templateId/@root='{CONDITIONS_SECTION_TEMPLATE}']"
            "/cda:entry/cda:act/cda:entryRelationship/cda:observation",
            "./cda:value",
        ),
    }
)
