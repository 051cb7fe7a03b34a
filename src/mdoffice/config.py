"""Configuration management for mdoffice."""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv()


def _optional_path(name: str) -> Optional[Path]:
    """Read an optional directory path from an environment variable."""
    value = os.getenv(name)
    if value:
        return Path(value).resolve()
    return None


class Settings(BaseModel):
    """Application settings."""

    # Pandoc executable (None means look it up on PATH)
    pandoc_path: Optional[str] = os.getenv("PANDOC_PATH") or None
    pandoc_timeout_seconds: float = float(os.getenv("PANDOC_TIMEOUT_SECONDS", "30"))
    pandoc_min_version: str = os.getenv("PANDOC_MIN_VERSION", "3.0")

    # Lua filters and reference documents handed to Pandoc
    filters_dir: Optional[Path] = _optional_path("MDOFFICE_FILTERS_DIR")
    templates_dir: Optional[Path] = _optional_path("MDOFFICE_TEMPLATES_DIR")

    # Metadata defaults
    generator: str = os.getenv("MDOFFICE_GENERATOR", "mdoffice")
    default_title: str = os.getenv("MDOFFICE_DEFAULT_TITLE", "Untitled Document")

    # Formula limits (8192 is the OOXML cell formula limit)
    max_formula_length: int = int(os.getenv("MAX_FORMULA_LENGTH", "8192"))

    log_level: str = os.getenv("LOG_LEVEL", "INFO")


settings = Settings()


def configure_logging(level: Optional[str] = None):
    """Configure root logging for library consumers that have not done so."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
