"""
Loading of HITSP C32 documents into queryable trees.

Documents are first validated with defusedxml, then parsed with lxml (whose
XPath support the extraction engine needs) using a parser that neither
resolves entities nor touches the network.
"""

import logging

from lxml import etree

from src.exceptions import ValidationError
from src.import_.validators.c32_validator import validate_c32
from src.settings import settings

logger = logging.getLogger(__name__)


def load_document(xml_content: str | bytes) -> etree._ElementTree:
    """
    Validate and parse a C32 document.

    Args:
        xml_content: The C32 XML content

    Returns:
        Parsed document; query it with the ``cda`` namespace prefix

    Raises:
        ValidationError: If the document is too large, not well-formed or
            not a ClinicalDocument
    """
    content = (
        xml_content.encode("utf-8") if isinstance(xml_content, str) else xml_content
    )
    if len(content) > settings.max_document_bytes:
        raise ValidationError(
            f"Document of {len(content)} bytes exceeds maximum size of "
            f"{settings.max_document_bytes} bytes"
        )

    validation = validate_c32(content)
    for error in validation.errors or []:
        logger.warning("C32 validation: %s", error)

    parser = etree.XMLParser(
        resolve_entities=False, no_network=True, huge_tree=False
    )
    try:
        root = etree.fromstring(content, parser)
    except etree.XMLSyntaxError as e:
        raise ValidationError(f"Invalid XML: {e}") from e

    return etree.ElementTree(root)
