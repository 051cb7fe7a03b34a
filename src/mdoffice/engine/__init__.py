"""Conversion engines: Pandoc for documents and presentations, openpyxl for spreadsheets."""

from .pandoc import (
    MARKDOWN_INPUT,
    PandocExecutor,
    PandocInstallation,
    PandocOptions,
    PandocResult,
    build_arguments,
    version_at_least,
)
from .resources import filter_path, filters_dir, template_path
from .workbook import TableWorkbookWriter, WorkbookSummary

__all__ = [
    "MARKDOWN_INPUT",
    "PandocExecutor",
    "PandocInstallation",
    "PandocOptions",
    "PandocResult",
    "build_arguments",
    "version_at_least",
    "filter_path",
    "filters_dir",
    "template_path",
    "TableWorkbookWriter",
    "WorkbookSummary",
]
