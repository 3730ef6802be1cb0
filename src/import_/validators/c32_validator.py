"""
HITSP C32 document validator.

Uses defusedxml for secure XML parsing to prevent XXE attacks.
"""

from dataclasses import dataclass
from xml.etree.ElementTree import Element

import defusedxml.ElementTree as ET
from defusedxml import DefusedXmlException

from src.exceptions import ValidationError

# C-CDA namespace
CDA_NS = "urn:hl7-org:v3"
NAMESPACES = {"cda": CDA_NS}

# HITSP C32 Summary Documents Using HL7 CCD
C32_TEMPLATE_ID = "2.16.840.1.113883.3.88.11.32.1"


@dataclass
class C32ValidationResult:
    """Result of C32 validation."""

    is_valid: bool
    template_ids: list[str]
    patient_name: str | None = None
    errors: list[str] | None = None


def validate_c32(xml_content: str | bytes) -> C32ValidationResult:
    """
    Validate a HITSP C32 document.

    Args:
        xml_content: The C32 XML content

    Returns:
        C32ValidationResult with validation status and document metadata

    Raises:
        ValidationError: If the document is not valid XML, uses forbidden
            constructs (DTDs, entities) or is not a ClinicalDocument
    """
    errors: list[str] = []

    # Parse XML securely
    try:
        root = ET.fromstring(xml_content, forbid_dtd=True)
    except ET.ParseError as e:
        raise ValidationError(f"Invalid XML: {e}") from e
    except DefusedXmlException as e:
        raise ValidationError(f"Forbidden XML construct: {e}") from e

    if root.tag != f"{{{CDA_NS}}}ClinicalDocument":
        raise ValidationError(
            "Document is not a valid C32: missing ClinicalDocument root element "
            f"in namespace {CDA_NS}"
        )

    template_ids = [
        oid
        for oid in (t.get("root") for t in root.findall("cda:templateId", NAMESPACES))
        if oid
    ]
    if C32_TEMPLATE_ID not in template_ids:
        errors.append(f"Missing HITSP C32 templateId {C32_TEMPLATE_ID}")

    if root.find(".//cda:structuredBody", NAMESPACES) is None:
        errors.append("Missing structuredBody element")

    return C32ValidationResult(
        is_valid=len(errors) == 0,
        template_ids=template_ids,
        patient_name=_extract_patient_name(root),
        errors=errors if errors else None,
    )


def _extract_patient_name(root: Element) -> str | None:
    """Extract the patient name from the recordTarget."""
    name_elem = root.find(
        ".//cda:recordTarget/cda:patientRole/cda:patient/cda:name", NAMESPACES
    )
    if name_elem is None:
        return None

    given = name_elem.findtext("cda:given", default="", namespaces=NAMESPACES)
    family = name_elem.findtext("cda:family", default="", namespaces=NAMESPACES)

    if given or family:
        return f"{given} {family}".strip()

    return None
