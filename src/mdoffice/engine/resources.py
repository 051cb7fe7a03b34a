"""Lookup of Lua filters and reference documents handed to Pandoc."""

from pathlib import Path
from typing import Optional

from ..config import settings

BUNDLED_FILTERS_DIR = Path(__file__).resolve().parent.parent / "filters"

METADATA_INJECT_FILTER = "metadata-inject.lua"
SECTION_BREAKS_FILTER = "section-breaks.lua"
SLIDE_BREAKS_FILTER = "slide-breaks.lua"

REFERENCE_TEMPLATES = {
    "docx": "reference.docx",
    "pptx": "reference.pptx",
}


def filters_dir() -> Path:
    """MDOFFICE_FILTERS_DIR if set, otherwise the filters shipped with the package."""
    return settings.filters_dir or BUNDLED_FILTERS_DIR


def filter_path(name: str) -> Path:
    return filters_dir() / name


def template_path(name: str) -> Optional[Path]:
    """Path of a reference document, or None when no templates directory is configured."""
    if settings.templates_dir is None:
        return None
    return settings.templates_dir / name
