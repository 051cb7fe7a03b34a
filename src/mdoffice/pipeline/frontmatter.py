"""YAML front matter detection and metadata normalization."""

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from ..config import settings
from ..errors import PreProcessorError
from ..models import NormalizedMetadata

logger = logging.getLogger(__name__)

OPENING_DELIMITER = "---"
CLOSING_DELIMITERS = ("---", "...")

NO_FRONT_MATTER_WARNING = "No YAML front matter found. Consider adding metadata."


@dataclass
class FrontMatter:
    """A front matter block located at the top of a document."""

    data: Optional[dict[str, Any]]  # None when the document has no block
    body_line: int = 0  # Index of the first line after the block
    warnings: list[str] = field(default_factory=list)


def parse_front_matter(text: str) -> FrontMatter:
    """
    Locate and parse the front matter block.

    Args:
        text: Full document text with "\\n" line separators

    Returns:
        FrontMatter with the parsed mapping and where the body starts

    Raises:
        PreProcessorError: If the block is unterminated, is not valid YAML,
            or does not contain a mapping
    """
    lines = text.split("\n")
    first = lines[0].lstrip("\ufeff").rstrip("\r").strip() if lines else ""
    if first != OPENING_DELIMITER:
        return FrontMatter(data=None)

    closing = None
    for i in range(1, len(lines)):
        if lines[i].rstrip("\r").strip() in CLOSING_DELIMITERS:
            closing = i
            break

    if closing is None:
        raise PreProcessorError("Invalid YAML front matter", "Missing closing --- delimiter")

    block = "\n".join(line.rstrip("\r") for line in lines[1:closing])
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise PreProcessorError("Invalid YAML front matter", str(e)) from e

    warnings = []
    if data is None:
        data = {}
        warnings.append("Front matter block is empty")
    elif not isinstance(data, dict):
        raise PreProcessorError(
            "Invalid YAML front matter", "front matter must be a mapping of keys to values"
        )

    return FrontMatter(data=data, body_line=closing + 1, warnings=warnings)


def normalize_metadata(data: Optional[dict[str, Any]]) -> tuple[NormalizedMetadata, list[str]]:
    """
    Map raw front matter values onto NormalizedMetadata.

    Unknown keys are dropped with a warning; values of the wrong shape
    (a list title, an unsupported slide_breaks mode) are rejected.

    Returns:
        (metadata, warnings)

    Raises:
        PreProcessorError: If a recognized field has an invalid value
    """
    warnings: list[str] = []
    known = set(NormalizedMetadata.model_fields)
    values: dict[str, Any] = {}

    for key, value in (data or {}).items():
        name = str(key)
        if name not in known:
            warnings.append(f"Unrecognized metadata field ignored: {name}")
            continue
        if value is None or name == "generator":
            continue
        values[name] = value

    values["generator"] = settings.generator

    try:
        metadata = NormalizedMetadata(**values)
    except ValidationError as e:
        details = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise PreProcessorError("Invalid front matter", details) from e

    if data is not None and not values.get("title"):
        warnings.append(f"Front matter has no title; using '{metadata.title}'")

    logger.debug(f"Normalized metadata: {metadata.model_dump(exclude_none=True)}")
    return metadata, warnings
