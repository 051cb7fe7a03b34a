"""Post-processing for spreadsheets (.xlsx): formula injection."""

import logging
import zipfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from ..errors import PostProcessorError
from ..formulas import FormulaValidator, find_reference_cycles
from ..models import ExtractionRecord, NormalizedMetadata, OutputFormat, PostProcessorResult
from ..placeholders import decode
from .base import OutputHandler

logger = logging.getLogger(__name__)


class SpreadsheetHandler(OutputHandler):
    """
    Replaces placeholder cells with live formulas.

    The engine writes each placeholder as a plain text cell. A cell gets
    ``"=" + formula`` only when its token has a recorded location and the cell
    is that location's own sheet and coordinate; a token found anywhere else
    came from the source text and is left untouched with a warning.
    """

    format = OutputFormat.SPREADSHEET

    def __init__(self, validator: Optional[FormulaValidator] = None, clock=None):
        self.validator = validator or FormulaValidator()
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def process(self, path: Path, record: ExtractionRecord) -> PostProcessorResult:
        try:
            workbook = load_workbook(path)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise PostProcessorError(
                f"Could not read xlsx workbook at {path}: {e}",
                self.format.value,
                str(path),
            ) from e

        modifications: list[str] = []
        warnings: list[str] = []
        found: set[str] = set()

        for sheet in workbook.worksheets:
            injected: dict[str, str] = {}
            for row in sheet.iter_rows():
                for cell in row:
                    if not isinstance(cell.value, str):
                        continue
                    token = cell.value.strip()
                    if decode(token) is None:
                        continue
                    location = record.formula_for(token)
                    if location is None:
                        warnings.append(
                            f"No formula recorded for placeholder {token} at "
                            f"{sheet.title}!{cell.coordinate}; left as text"
                        )
                        continue
                    if sheet.title != location.sheet or cell.coordinate != location.cell:
                        warnings.append(
                            f"Placeholder {token} at {sheet.title}!{cell.coordinate} is not at "
                            f"its formula's cell {location.sheet}!{location.cell}; left as text"
                        )
                        continue
                    cell.value = f"={location.formula}"
                    found.add(token)
                    injected[cell.coordinate] = location.formula
                    modifications.append(
                        f"Injected formula at {sheet.title}!{cell.coordinate}: {location.formula}"
                    )
                    logger.debug(f"Injected {location.formula!r} at {sheet.title}!{cell.coordinate}")
            warnings.extend(self._cycle_warnings(sheet.title, injected))

        for location in record.formulas:
            if location.placeholder not in found:
                warnings.append(f"Formula placeholder not found: {location.placeholder}")

        modifications.extend(self._set_properties(workbook, record.metadata))

        try:
            workbook.save(path)
        except OSError as e:
            raise PostProcessorError(
                f"Could not write xlsx workbook at {path}: {e}", self.format.value, str(path)
            ) from e

        for warning in warnings:
            logger.warning(f"{path.name}: {warning}")
        logger.info(f"Post-processed spreadsheet {path}: {len(found)} formula(s) injected")

        return PostProcessorResult(
            success=True,
            output_path=str(path),
            modifications=modifications,
            warnings=warnings,
        )

    def _cycle_warnings(self, sheet_title: str, injected: dict[str, str]) -> list[str]:
        if len(injected) < 2:
            return []
        references = {
            coordinate: self.validator.validate(formula).cell_references
            for coordinate, formula in injected.items()
        }
        warnings = []
        for cycle in find_reference_cycles(references):
            path = " -> ".join(cycle + [cycle[0]])
            warnings.append(f"Circular reference between formulas in {sheet_title}: {path}")
        return warnings

    def _set_properties(self, workbook, metadata: NormalizedMetadata) -> list[str]:
        """Copy metadata onto the workbook's core properties."""
        props = workbook.properties
        modifications = []

        subject = metadata.classification or metadata.subject
        keywords = ", ".join(metadata.keywords) if metadata.keywords else None
        for attr, label, value in (
            ("title", "title", metadata.title),
            ("creator", "author", metadata.author),
            ("subject", "subject", subject),
            ("keywords", "keywords", keywords),
        ):
            if value:
                setattr(props, attr, value)
                modifications.append(f"Set document {label}: {value}")

        # openpyxl stores naive datetimes as UTC
        stamp = self._clock().astimezone(timezone.utc).replace(tzinfo=None, microsecond=0)
        props.modified = stamp
        modifications.append(f"Set modified timestamp: {stamp.strftime('%Y-%m-%dT%H:%M:%SZ')}")
        return modifications
