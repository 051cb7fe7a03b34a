"""Base classes for format-specific post-processing handlers."""

import logging
import zipfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from ..errors import PostProcessorError
from ..models import ExtractionRecord, NormalizedMetadata, OutputFormat, PostProcessorResult
from .ooxml import CORE_PROPERTIES_PART, OoxmlPackage, update_xml_element

logger = logging.getLogger(__name__)


class OutputHandler(ABC):
    """Finishes one kind of engine output using the extraction record."""

    format: OutputFormat

    @abstractmethod
    def process(self, path: Path, record: ExtractionRecord) -> PostProcessorResult:
        """Patch the artifact at ``path`` in place."""
        pass


class OoxmlHandler(OutputHandler):
    """Shared behaviour for handlers that patch XML parts inside the zip."""

    def __init__(self, clock=None):
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def open_package(self, path: Path) -> OoxmlPackage:
        try:
            return OoxmlPackage.open(path)
        except (zipfile.BadZipFile, OSError) as e:
            raise PostProcessorError(
                f"Could not read {self.format.extension} container at {path}: {e}",
                self.format.value,
                str(path),
            ) from e

    def patch_core_properties(
        self, package: OoxmlPackage, metadata: NormalizedMetadata
    ) -> tuple[list[str], list[str]]:
        """
        Write title, creator, subject, keywords and the modified timestamp.

        Fields with no value are left alone rather than written empty.

        Returns:
            (modifications, warnings)
        """
        modifications: list[str] = []
        warnings: list[str] = []

        xml = package.read_text(CORE_PROPERTIES_PART)
        if xml is None:
            warnings.append(f"Document properties part not found: {CORE_PROPERTIES_PART}")
            return modifications, warnings

        keywords = ", ".join(metadata.keywords) if metadata.keywords else None
        fields = [
            ("dc:title", "title", metadata.title),
            ("dc:creator", "author", metadata.author),
            ("dc:subject", "subject", metadata.classification or metadata.subject),
            ("cp:keywords", "keywords", keywords),
        ]

        for tag, label, value in fields:
            if not value:
                continue
            prefix = tag.split(":")[0]
            if f"<{tag}" not in xml and f"xmlns:{prefix}=" not in xml:
                warnings.append(f"Cannot set {label}: namespace prefix '{prefix}' is not declared")
                continue
            xml, changed = update_xml_element(xml, tag, value)
            if changed:
                modifications.append(f"Set document {label}: {value}")
            else:
                warnings.append(f"Could not set document {label}")

        stamp = self._clock().strftime("%Y-%m-%dT%H:%M:%SZ")
        type_attr = ' xsi:type="dcterms:W3CDTF"' if "xmlns:xsi=" in xml else ""
        xml, changed = update_xml_element(xml, "dcterms:modified", stamp, attributes=type_attr)
        if changed:
            modifications.append(f"Set modified timestamp: {stamp}")
        else:
            warnings.append("Could not set modified timestamp")

        package.write_text(CORE_PROPERTIES_PART, xml)
        return modifications, warnings

    def finish(
        self,
        package: OoxmlPackage,
        modifications: list[str],
        warnings: list[str],
        path: Optional[Path] = None,
    ) -> PostProcessorResult:
        if package.modified:
            package.save()
        for warning in warnings:
            logger.warning(f"{package.path.name}: {warning}")
        return PostProcessorResult(
            success=True,
            output_path=str(path or package.path),
            modifications=modifications,
            warnings=warnings,
        )
