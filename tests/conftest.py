"""Pytest configuration and shared fixtures."""

import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import pytest
from openpyxl import Workbook

from mdoffice.models import ExtractionRecord, FormulaLocation, NormalizedMetadata
from mdoffice.placeholders import encode

CORE_PROPERTIES = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<cp:coreProperties '
    'xmlns:cp="http://schemas.openxmlformats.org/package/2006/metadata/core-properties" '
    'xmlns:dc="http://purl.org/dc/elements/1.1/" '
    'xmlns:dcterms="http://purl.org/dc/terms/" '
    'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance">'
    "<dc:title>Pandoc Title</dc:title>"
    "</cp:coreProperties>"
)

CONTENT_TYPES = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">'
    '<Default Extension="xml" ContentType="application/xml"/>'
    "</Types>"
)

DOCUMENT_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<w:document xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
    "<w:body><w:p><w:r><w:t>Hello</w:t></w:r></w:p>"
    '<w:sectPr><w:pgSz w:w="12240" w:h="15840"/></w:sectPr>'
    "</w:body></w:document>"
)

DOCUMENT_RELS = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
    '<Relationship Id="rId1" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/styles" Target="styles.xml"/>'
    '<Relationship Id="rId2" Type="http://schemas.openxmlformats.org/officeDocument/2006/relationships/settings" Target="settings.xml"/>'
    "</Relationships>"
)

HEADER_XML = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<w:hdr xmlns:w="http://schemas.openxmlformats.org/wordprocessingml/2006/main">'
    "<w:p><w:r><w:t>Existing header</w:t></w:r></w:p>"
    "</w:hdr>"
)

SLIDE_WITH_FOOTER = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
    "<p:cSld><p:spTree>"
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
    '<p:sp><p:nvSpPr><p:cNvPr id="2" name="Title 1"/><p:cNvSpPr/>'
    '<p:nvPr><p:ph type="title"/></p:nvPr></p:nvSpPr>'
    "<p:txBody><a:bodyPr/><a:p><a:r><a:t>Slide title</a:t></a:r></a:p></p:txBody></p:sp>"
    '<p:sp><p:nvSpPr><p:cNvPr id="3" name="Footer 2"/><p:cNvSpPr/>'
    '<p:nvPr><p:ph type="ftr" sz="quarter" idx="11"/></p:nvPr></p:nvSpPr>'
    "<p:txBody><a:bodyPr/><a:p><a:r><a:t>Acme Corp</a:t></a:r></a:p></p:txBody></p:sp>"
    "</p:spTree></p:cSld></p:sld>"
)

SLIDE_WITHOUT_FOOTER = (
    '<?xml version="1.0" encoding="UTF-8" standalone="yes"?>\n'
    '<p:sld xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:p="http://schemas.openxmlformats.org/presentationml/2006/main">'
    "<p:cSld><p:spTree>"
    '<p:nvGrpSpPr><p:cNvPr id="1" name=""/><p:cNvGrpSpPr/><p:nvPr/></p:nvGrpSpPr>'
    '<p:sp><p:nvSpPr><p:cNvPr id="4" name="Title 1"/><p:cNvSpPr/>'
    '<p:nvPr><p:ph type="title"/></p:nvPr></p:nvSpPr>'
    "<p:txBody><a:bodyPr/><a:p><a:r><a:t>Second</a:t></a:r></a:p></p:txBody></p:sp>"
    "</p:spTree></p:cSld></p:sld>"
)

FIXED_NOW = datetime(2024, 3, 1, 12, 30, 0, tzinfo=timezone.utc)


def write_zip(path: Path, parts: dict[str, str]) -> Path:
    with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
        for name, content in parts.items():
            zf.writestr(name, content)
    return path


def read_part(path: Path, name: str) -> Optional[str]:
    with zipfile.ZipFile(path) as zf:
        if name not in zf.namelist():
            return None
        return zf.read(name).decode("utf-8")


@pytest.fixture
def read_zip_part():
    """Read one part of a zip container as text (None if absent)."""
    return read_part


@pytest.fixture
def fixed_clock():
    """Clock returning a fixed UTC time."""
    return lambda: FIXED_NOW


@pytest.fixture
def make_docx(tmp_path: Path):
    """Build a minimal .docx container."""

    def _make(with_header: bool = True, with_core: bool = True, name: str = "out.docx") -> Path:
        parts = {
            "[Content_Types].xml": CONTENT_TYPES,
            "word/document.xml": DOCUMENT_XML,
            "word/_rels/document.xml.rels": DOCUMENT_RELS,
        }
        if with_header:
            parts["word/header1.xml"] = HEADER_XML
        if with_core:
            parts["docProps/core.xml"] = CORE_PROPERTIES
        return write_zip(tmp_path / name, parts)

    return _make


@pytest.fixture
def make_pptx(tmp_path: Path):
    """Build a minimal .pptx container from slide XML strings."""

    def _make(slides: Optional[list[str]] = None, name: str = "out.pptx") -> Path:
        if slides is None:
            slides = [SLIDE_WITH_FOOTER, SLIDE_WITHOUT_FOOTER]
        parts = {
            "[Content_Types].xml": CONTENT_TYPES,
            "docProps/core.xml": CORE_PROPERTIES,
        }
        for i, slide in enumerate(slides, start=1):
            parts[f"ppt/slides/slide{i}.xml"] = slide
        return write_zip(tmp_path / name, parts)

    return _make


@pytest.fixture
def make_xlsx(tmp_path: Path):
    """Build a workbook from {sheet title: rows}."""

    def _make(sheets: dict[str, list[list]], name: str = "out.xlsx") -> Path:
        workbook = Workbook()
        workbook.remove(workbook.active)
        for title, rows in sheets.items():
            sheet = workbook.create_sheet(title)
            for row in rows:
                sheet.append(row)
        path = tmp_path / name
        workbook.save(path)
        return path

    return _make


@pytest.fixture
def make_location():
    """Build a FormulaLocation with its canonical placeholder."""

    def _make(table_index: int, row: int, column: int, formula: str) -> FormulaLocation:
        return FormulaLocation(
            table_index=table_index,
            row=row,
            column=column,
            formula=formula,
            placeholder=encode(table_index, row, column),
        )

    return _make


@pytest.fixture
def classified_record() -> ExtractionRecord:
    """Record carrying a classification and the usual document properties."""
    metadata = NormalizedMetadata(
        title="Quarterly Report",
        author="Jane Analyst",
        classification="CONFIDENTIAL",
        keywords=["finance", "q1"],
    )
    return ExtractionRecord(transformed_text="", metadata=metadata)


@pytest.fixture
def slide_xml() -> dict[str, str]:
    """Slide parts with and without a footer placeholder."""
    return {"footer": SLIDE_WITH_FOOTER, "plain": SLIDE_WITHOUT_FOOTER}
