"""Pre-processing of markdown before it is handed to the conversion engine.

The pre-processor swaps every table-cell formula for a placeholder token the
engine will carry through untouched, and collects the document metadata. It
changes nothing else: prose, headings, the front matter block and ordinary
cell content come out byte-identical (after line-ending normalization).
"""

import logging
import re
from typing import Optional

from ..formulas import FormulaValidator
from ..models import ExtractionRecord, FormulaLocation, NormalizedMetadata, PreProcessOptions
from ..placeholders import encode, find_placeholders
from .frontmatter import NO_FRONT_MATTER_WARNING, normalize_metadata, parse_front_matter
from .tables import cell_spans, find_tables

logger = logging.getLogger(__name__)

# {=<body>} inside a single cell
FORMULA_SPAN_PATTERN = re.compile(r"\{=([^{}\n]+)\}")


def normalize_line_endings(text: str) -> str:
    """Convert CRLF and lone CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


class PreProcessor:
    """Extract formulas and metadata from markdown for conversion."""

    def __init__(self, validator: Optional[FormulaValidator] = None):
        self.validator = validator or FormulaValidator()

    def process(
        self, raw_text: str, options: Optional[PreProcessOptions] = None
    ) -> ExtractionRecord:
        """
        Prepare a markdown document for the conversion engine.

        Args:
            raw_text: The markdown source, optionally starting with YAML front matter
            options: Validation and line-ending behaviour

        Returns:
            ExtractionRecord with the transformed text and everything extracted

        Raises:
            PreProcessorError: If the front matter block is malformed
        """
        options = options or PreProcessOptions()
        warnings: list[str] = []

        text = raw_text if options.preserve_line_endings else normalize_line_endings(raw_text)

        front_matter = parse_front_matter(text)
        if front_matter.data is None:
            warnings.append(NO_FRONT_MATTER_WARNING)
            metadata = NormalizedMetadata()
        else:
            warnings.extend(front_matter.warnings)
            metadata, metadata_warnings = normalize_metadata(front_matter.data)
            warnings.extend(metadata_warnings)

        for token in dict.fromkeys(token for token, _ in find_placeholders(text)):
            warnings.append(f"Document already contains placeholder text {token}; it is left as text")

        lines = text.split("\n")
        tables = find_tables(lines, start=front_matter.body_line)
        formulas: list[FormulaLocation] = []

        for table in tables:
            for row, line_index in enumerate(table.data_lines, start=1):
                new_line, row_formulas, row_warnings = self._process_row(
                    lines[line_index], table.index, row, options.validate_formulas
                )
                lines[line_index] = new_line
                formulas.extend(row_formulas)
                warnings.extend(row_warnings)

        logger.info(
            f"Pre-processed document: {len(tables)} table(s), {len(formulas)} formula(s), "
            f"{len(warnings)} warning(s)"
        )

        return ExtractionRecord(
            transformed_text="\n".join(lines),
            formulas=formulas,
            metadata=metadata,
            table_count=len(tables),
            warnings=warnings,
        )

    def _process_row(
        self, line: str, table_index: int, row: int, validate: bool
    ) -> tuple[str, list[FormulaLocation], list[str]]:
        """Replace the formula span of each cell in one data row."""
        formulas = []
        warnings = []
        replacements = []

        for column, (start, end) in enumerate(cell_spans(line)):
            matches = list(FORMULA_SPAN_PATTERN.finditer(line, start, end))
            if not matches:
                continue

            match = matches[0]
            placeholder = encode(table_index, row, column)
            location = FormulaLocation(
                table_index=table_index,
                row=row,
                column=column,
                formula=match.group(1).strip(),
                placeholder=placeholder,
            )
            formulas.append(location)
            replacements.append((match.start(), match.end(), placeholder))
            logger.debug(f"Extracted formula {location.formula!r} as {placeholder}")

            if len(matches) > 1:
                warnings.append(
                    f"Multiple formulas at table {table_index}, row {row}, column {column}: "
                    f"only the first was extracted"
                )

            if validate:
                warnings.extend(self._validation_warnings(location))

        for start, end, placeholder in reversed(replacements):
            line = line[:start] + placeholder + line[end:]

        return line, formulas, warnings

    def _validation_warnings(self, location: FormulaLocation) -> list[str]:
        result = self.validator.validate(location.formula, location)
        where = f"table {location.table_index}, row {location.row}, column {location.column}"
        warnings = []
        if not result.is_valid:
            warnings.append(f"Invalid formula at {where}: {', '.join(result.errors)}")
        for warning in result.warnings:
            warnings.append(f"Formula warning at {where}: {warning}")
        return warnings
