"""Post-processing for word-processing documents (.docx)."""

import logging
import re
from pathlib import Path

from ..models import ExtractionRecord, OutputFormat, PostProcessorResult
from .base import OoxmlHandler
from .ooxml import (
    CONTENT_TYPES_PART,
    R_NAMESPACE,
    W_NAMESPACE,
    OoxmlPackage,
    ensure_namespace,
    escape_xml,
    has_paragraph,
    next_relationship_id,
    part_number,
)

logger = logging.getLogger(__name__)

DOCUMENT_PART = "word/document.xml"
DOCUMENT_RELS_PART = "word/_rels/document.xml.rels"
HEADER_PART_PATTERN = re.compile(r"^word/header\d+\.xml$")

HEADER_RELATIONSHIP_TYPE = (
    "http://schemas.openxmlformats.org/officeDocument/2006/relationships/header"
)
HEADER_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.header+xml"

SECTION_PROPERTIES_PATTERN = re.compile(r"<w:sectPr(\s[^>]*?)?(/?)>")


def classification_paragraph(text: str) -> str:
    """Centred bold paragraph carrying the classification."""
    return (
        '<w:p><w:pPr><w:jc w:val="center"/></w:pPr>'
        "<w:r><w:rPr><w:b/></w:rPr>"
        f'<w:t xml:space="preserve">{escape_xml(text)}</w:t></w:r></w:p>'
    )


def new_header_part(text: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
        f'<w:hdr xmlns:w="{W_NAMESPACE}" xmlns:r="{R_NAMESPACE}">'
        f"{classification_paragraph(text)}</w:hdr>"
    )


class DocumentHandler(OoxmlHandler):
    """Adds the classification header and patches document properties."""

    format = OutputFormat.DOCUMENT

    def process(self, path: Path, record: ExtractionRecord) -> PostProcessorResult:
        package = self.open_package(path)
        modifications: list[str] = []
        warnings: list[str] = []
        metadata = record.metadata

        if metadata.classification:
            mods, warns = self.add_classification_header(package, metadata.classification)
            modifications.extend(mods)
            warnings.extend(warns)

        mods, warns = self.patch_core_properties(package, metadata)
        modifications.extend(mods)
        warnings.extend(warns)

        logger.info(f"Post-processed document {path}: {len(modifications)} modification(s)")
        return self.finish(package, modifications, warnings)

    def add_classification_header(
        self, package: OoxmlPackage, classification: str
    ) -> tuple[list[str], list[str]]:
        """
        Append the classification to every header part.

        Existing header content is kept. A document without headers gets a new
        default header wired into the relationships, content types and the
        final section properties.
        """
        modifications: list[str] = []
        warnings: list[str] = []

        headers = sorted(
            (n for n in package.names() if HEADER_PART_PATTERN.match(n)), key=part_number
        )
        if not headers:
            warnings.append("No header part found in document; creating one for classification")
            return self._create_header(package, classification, modifications, warnings)

        for name in headers:
            xml = package.read_text(name)
            if has_paragraph(xml, "w", classification):
                logger.debug(f"{name} already carries the classification")
                continue
            close = xml.rfind("</w:hdr>")
            if close == -1:
                warnings.append(f"Could not find header element in {name}")
                continue
            xml = xml[:close] + classification_paragraph(classification) + xml[close:]
            package.write_text(name, xml)
            modifications.append(f"Appended classification to {name}: {classification}")

        return modifications, warnings

    def _create_header(
        self,
        package: OoxmlPackage,
        classification: str,
        modifications: list[str],
        warnings: list[str],
    ) -> tuple[list[str], list[str]]:
        rels = package.read_text(DOCUMENT_RELS_PART)
        document = package.read_text(DOCUMENT_PART)
        if rels is None or document is None or "</Relationships>" not in rels:
            warnings.append("Document relationships not found; classification header not added")
            return modifications, warnings

        header_name = "word/header1.xml"
        rel_id = next_relationship_id(rels)
        relationship = (
            f'<Relationship Id="{rel_id}" Type="{HEADER_RELATIONSHIP_TYPE}" Target="header1.xml"/>'
        )
        reference = f'<w:headerReference w:type="default" r:id="{rel_id}"/>'

        matches = list(SECTION_PROPERTIES_PATTERN.finditer(document))
        if matches:
            last = matches[-1]
            attrs = last.group(1) or ""
            if last.group(2):
                replacement = f"<w:sectPr{attrs}>{reference}</w:sectPr>"
            else:
                replacement = f"<w:sectPr{attrs}>{reference}"
            document = document[: last.start()] + replacement + document[last.end():]
        elif "</w:body>" in document:
            document = document.replace("</w:body>", f"<w:sectPr>{reference}</w:sectPr></w:body>", 1)
        else:
            warnings.append("Document body not found; classification header not added")
            return modifications, warnings

        document = ensure_namespace(document, "w:document", "r", R_NAMESPACE)

        package.write_text(header_name, new_header_part(classification))
        package.write_text(
            DOCUMENT_RELS_PART, rels.replace("</Relationships>", relationship + "</Relationships>", 1)
        )
        package.write_text(DOCUMENT_PART, document)

        content_types = package.read_text(CONTENT_TYPES_PART)
        if content_types is None or "</Types>" not in content_types:
            warnings.append("Content types part not found; header may not be recognized")
        elif f'PartName="/{header_name}"' not in content_types:
            override = f'<Override PartName="/{header_name}" ContentType="{HEADER_CONTENT_TYPE}"/>'
            package.write_text(
                CONTENT_TYPES_PART, content_types.replace("</Types>", override + "</Types>", 1)
            )

        modifications.append(f"Created {header_name} with classification: {classification}")
        return modifications, warnings
