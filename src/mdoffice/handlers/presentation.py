"""Post-processing for presentations (.pptx)."""

import logging
import re
from pathlib import Path
from typing import Optional

from ..models import ExtractionRecord, OutputFormat, PostProcessorResult
from .base import OoxmlHandler
from .ooxml import OoxmlPackage, escape_xml, has_paragraph, part_number

logger = logging.getLogger(__name__)

SLIDE_PART_PATTERN = re.compile(r"^ppt/slides/slide\d+\.xml$")
SHAPE_PATTERN = re.compile(r"<p:sp(?:\s[^>]*)?>.*?</p:sp>", re.DOTALL)
FOOTER_PLACEHOLDER_PATTERN = re.compile(r'<p:ph\b[^>]*\btype="ftr"')
SHAPE_ID_PATTERN = re.compile(r'<p:cNvPr\b[^>]*\bid="(\d+)"')

# Footer box along the bottom of a 10in x 7.5in slide, in EMUs
FOOTER_OFFSET = (3124200, 6356350)
FOOTER_EXTENT = (2895600, 365125)


def footer_paragraph(text: str) -> str:
    return (
        '<a:p><a:pPr algn="ctr"/><a:r><a:rPr lang="en-US" b="1"/>'
        f"<a:t>{escape_xml(text)}</a:t></a:r></a:p>"
    )


def footer_shape(text: str, shape_id: int) -> str:
    """A footer placeholder shape holding ``text``."""
    return (
        f'<p:sp><p:nvSpPr><p:cNvPr id="{shape_id}" name="Footer Placeholder {shape_id}"/>'
        '<p:cNvSpPr><a:spLocks noGrp="1"/></p:cNvSpPr>'
        '<p:nvPr><p:ph type="ftr" sz="quarter" idx="11"/></p:nvPr></p:nvSpPr>'
        f'<p:spPr><a:xfrm><a:off x="{FOOTER_OFFSET[0]}" y="{FOOTER_OFFSET[1]}"/>'
        f'<a:ext cx="{FOOTER_EXTENT[0]}" cy="{FOOTER_EXTENT[1]}"/></a:xfrm></p:spPr>'
        f"<p:txBody><a:bodyPr/><a:lstStyle/>{footer_paragraph(text)}</p:txBody></p:sp>"
    )


class PresentationHandler(OoxmlHandler):
    """Adds the classification to slide footers and patches document properties."""

    format = OutputFormat.PRESENTATION

    def process(self, path: Path, record: ExtractionRecord) -> PostProcessorResult:
        package = self.open_package(path)
        modifications: list[str] = []
        warnings: list[str] = []
        metadata = record.metadata

        if metadata.classification:
            mods, warns = self.add_classification_footers(package, metadata.classification)
            modifications.extend(mods)
            warnings.extend(warns)

        mods, warns = self.patch_core_properties(package, metadata)
        modifications.extend(mods)
        warnings.extend(warns)

        logger.info(f"Post-processed presentation {path}: {len(modifications)} modification(s)")
        return self.finish(package, modifications, warnings)

    def add_classification_footers(
        self, package: OoxmlPackage, classification: str
    ) -> tuple[list[str], list[str]]:
        """Append the classification to each slide's footer placeholder."""
        modifications: list[str] = []
        warnings: list[str] = []

        slides = sorted(
            (n for n in package.names() if SLIDE_PART_PATTERN.match(n)), key=part_number
        )
        if not slides:
            warnings.append("No slides found in presentation")
            return modifications, warnings

        patched = 0
        already = 0
        for name in slides:
            xml = package.read_text(name)
            footer = self._footer_shape(xml)
            if footer is not None and has_paragraph(footer.group(0), "a", classification):
                already += 1
                continue
            if footer is not None:
                updated = self._append_to_footer(xml, footer, classification)
            else:
                updated = self._add_footer_shape(xml, classification)
            if updated is None:
                warnings.append(f"Could not add classification footer to {name}")
                continue
            package.write_text(name, updated)
            patched += 1

        if patched:
            modifications.append(f"Added classification to {patched} slide footer(s): {classification}")
        elif not already:
            warnings.append("Could not add classification to slide footers")
        return modifications, warnings

    def _footer_shape(self, xml: str) -> Optional[re.Match]:
        """The first shape holding a footer placeholder."""
        for match in SHAPE_PATTERN.finditer(xml):
            if FOOTER_PLACEHOLDER_PATTERN.search(match.group(0)):
                return match
        return None

    def _append_to_footer(self, xml: str, footer: re.Match, text: str) -> str:
        """Append a paragraph to an existing footer placeholder, keeping its text."""
        shape = footer.group(0)
        if "</p:txBody>" in shape:
            updated = shape.replace("</p:txBody>", footer_paragraph(text) + "</p:txBody>", 1)
        else:
            body = f"<p:txBody><a:bodyPr/><a:lstStyle/>{footer_paragraph(text)}</p:txBody>"
            updated = shape[: -len("</p:sp>")] + body + "</p:sp>"
        return xml[: footer.start()] + updated + xml[footer.end():]

    def _add_footer_shape(self, xml: str, text: str) -> Optional[str]:
        if "</p:spTree>" not in xml:
            return None
        ids = [int(i) for i in SHAPE_ID_PATTERN.findall(xml)]
        shape = footer_shape(text, max(ids, default=1) + 1)
        return xml.replace("</p:spTree>", shape + "</p:spTree>", 1)
