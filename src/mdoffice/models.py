"""Data models shared by the pre-processor, post-processor and converter."""

import datetime as dt
from enum import Enum
from pathlib import Path
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .config import settings
from .formulas.references import cell_for


class OutputFormat(str, Enum):
    """Office container formats produced by the pipeline."""

    SPREADSHEET = "spreadsheet"  # .xlsx
    DOCUMENT = "document"  # .docx
    PRESENTATION = "presentation"  # .pptx

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    @classmethod
    def parse(cls, value: Union["OutputFormat", str]) -> "OutputFormat":
        """Accept a format name or a file extension ("xlsx", ".docx")."""
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower().lstrip(".")
        for fmt, ext in _EXTENSIONS.items():
            if key in (fmt.value, ext):
                return fmt
        raise ValueError(f"Unsupported format: {value}")


_EXTENSIONS = {
    OutputFormat.SPREADSHEET: "xlsx",
    OutputFormat.DOCUMENT: "docx",
    OutputFormat.PRESENTATION: "pptx",
}


def table_sheet_name(table_index: int) -> str:
    """Worksheet title for a 0-based table ordinal: "Table 1", "Table 2", ..."""
    return f"Table {table_index + 1}"


class FormulaLocation(BaseModel):
    """A formula extracted from a table cell and the placeholder replacing it."""

    model_config = ConfigDict(frozen=True)

    table_index: int = Field(ge=0)  # 0-based table ordinal in the document
    row: int = Field(ge=0)  # 0-based, header row is 0, separator not counted
    column: int = Field(ge=0)  # 0-based
    formula: str  # Body without "{=" and "}"
    placeholder: str

    @property
    def cell(self) -> str:
        """A1 coordinate when the table is laid out with its header on row 1."""
        return cell_for(self.row, self.column)

    @property
    def sheet(self) -> str:
        """Worksheet the spreadsheet engine writes this formula's table to."""
        return table_sheet_name(self.table_index)


class NormalizedMetadata(BaseModel):
    """Document properties recognized in the front matter block."""

    model_config = ConfigDict(extra="ignore")

    title: str = Field(default_factory=lambda: settings.default_title)
    author: Optional[str] = None
    date: Optional[str] = None
    classification: Optional[str] = None
    subject: Optional[str] = None  # Mirrors classification unless set
    keywords: list[str] = Field(default_factory=list)
    section_breaks: Literal["auto", "all", "none"] = "auto"
    slide_breaks: Literal["h1", "h2", "hr"] = "h2"
    date_format: Optional[Literal["DD/MM/YYYY", "MM/DD/YYYY", "YYYY-MM-DD"]] = None
    generator: str = Field(default_factory=lambda: settings.generator)

    version: Optional[str] = None
    status: Optional[Literal["draft", "review", "approved", "final"]] = None
    description: Optional[str] = None
    document_type: Optional[Literal["document", "email", "reference", "note", "system"]] = None

    @field_validator("title", mode="before")
    @classmethod
    def _default_blank_title(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return settings.default_title
        return value

    @field_validator("date", mode="before")
    @classmethod
    def _date_to_iso(cls, value):
        # YAML turns 2024-01-15 into a date object
        if isinstance(value, (dt.date, dt.datetime)):
            return value.isoformat()
        return value

    @field_validator("version", mode="before")
    @classmethod
    def _version_to_str(cls, value):
        # "version: 1.0" arrives as a float
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("keywords", mode="before")
    @classmethod
    def _split_keywords(cls, value):
        if value is None:
            return []
        if isinstance(value, str):
            return [k.strip() for k in value.split(",") if k.strip()]
        return value

    @model_validator(mode="after")
    def _mirror_classification(self) -> "NormalizedMetadata":
        if self.classification and not self.subject:
            self.subject = self.classification
        return self

    @property
    def slide_level(self) -> Optional[int]:
        """Pandoc slide level implied by ``slide_breaks``."""
        return {"h1": 1, "h2": 2}.get(self.slide_breaks)


class PreProcessOptions(BaseModel):
    """Options for the pre-processor."""

    validate_formulas: bool = True
    preserve_line_endings: bool = False


class ExtractionRecord(BaseModel):
    """Everything the post-processor needs to finish a converted document."""

    transformed_text: str
    formulas: list[FormulaLocation] = Field(default_factory=list)
    metadata: NormalizedMetadata = Field(default_factory=NormalizedMetadata)
    table_count: int = 0
    warnings: list[str] = Field(default_factory=list)

    def formula_for(self, placeholder: str) -> Optional[FormulaLocation]:
        """Look up the location recorded for a placeholder token."""
        for location in self.formulas:
            if location.placeholder == placeholder:
                return location
        return None


class PostProcessOptions(BaseModel):
    """Options for the post-processor."""

    format: Union[OutputFormat, str]
    extraction_record: ExtractionRecord
    output_path: Path


class PostProcessorResult(BaseModel):
    """Outcome of post-processing one artifact."""

    success: bool
    output_path: str
    modifications: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
