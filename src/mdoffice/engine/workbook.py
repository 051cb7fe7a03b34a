"""Writing the pipe tables of a markdown document to an xlsx workbook."""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from ..errors import ConversionError
from ..models import table_sheet_name
from ..pipeline.frontmatter import parse_front_matter
from ..pipeline.tables import find_tables, parse_row
from ..placeholders import decode

logger = logging.getLogger(__name__)

NUMBER_PATTERN = re.compile(r"^-?(?:\d+|\d{1,3}(?:,\d{3})+)(?:\.\d+)?$")
BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
CODE_PATTERN = re.compile(r"`([^`]+)`")

MAX_COLUMN_WIDTH = 60


@dataclass
class WorkbookSummary:
    """What the writer put into the workbook."""

    output_path: Path
    sheet_names: list[str] = field(default_factory=list)
    placeholder_count: int = 0

    @property
    def table_count(self) -> int:
        return len(self.sheet_names)


def coerce_value(text: str):
    """Numbers become int or float; everything else stays text."""
    if NUMBER_PATTERN.match(text):
        plain = text.replace(",", "")
        return float(plain) if "." in plain else int(plain)
    return text


def cell_text(text: str) -> str:
    """Drop inline bold and code markers from a cell."""
    if decode(text) is not None:
        return text
    return CODE_PATTERN.sub(r"\1", BOLD_PATTERN.sub(r"\1", text))


class TableWorkbookWriter:
    """
    Spreadsheet engine: one worksheet per pipe table.

    Sheets are named "Table 1", "Table 2", ... in document order. The header
    goes on row 1 in bold and stays frozen; data row N lands on row N + 1,
    so a placeholder for row N, column C sits at the cell its formula was
    written for. Placeholders are written as text for the post-processor.
    """

    def __init__(self, header_bold: bool = True, freeze_header: bool = True):
        self.header_bold = header_bold
        self.freeze_header = freeze_header

    def write(self, text: str, output_path: Path) -> WorkbookSummary:
        """
        Raises:
            ConversionError: If the document has no tables
        """
        output_path = Path(output_path)
        lines = text.split("\n")
        body_line = parse_front_matter(text).body_line
        tables = find_tables(lines, start=body_line)
        if not tables:
            raise ConversionError("No tables found in document", "xlsx", str(output_path))

        workbook = Workbook()
        workbook.remove(workbook.active)
        summary = WorkbookSummary(output_path=output_path)

        for table in tables:
            sheet_name = table_sheet_name(table.index)
            sheet = workbook.create_sheet(sheet_name)
            summary.sheet_names.append(sheet_name)
            widths: dict[int, int] = {}

            rows = [lines[table.start]] + [lines[i] for i in table.data_lines]
            for row_number, line in enumerate(rows, start=1):
                for column_number, raw in enumerate(parse_row(line), start=1):
                    value = cell_text(raw)
                    if not value:
                        continue
                    if decode(value) is not None:
                        summary.placeholder_count += 1
                    elif row_number > 1:
                        value = coerce_value(value)

                    cell = sheet.cell(row=row_number, column=column_number, value=value)
                    if isinstance(value, str) and value.startswith("="):
                        # Literal text, not a formula
                        cell.data_type = "s"
                    if row_number == 1 and self.header_bold:
                        cell.font = Font(bold=True)
                    widths[column_number] = max(widths.get(column_number, 0), len(str(value)))

            for column_number, width in widths.items():
                sheet.column_dimensions[get_column_letter(column_number)].width = min(
                    width + 2, MAX_COLUMN_WIDTH
                )
            if self.freeze_header:
                sheet.freeze_panes = "A2"
            logger.debug(f"Wrote {sheet_name} with {len(rows)} row(s)")

        output_path.parent.mkdir(parents=True, exist_ok=True)
        workbook.save(output_path)
        logger.info(
            f"Wrote {summary.table_count} table(s) to {output_path} "
            f"with {summary.placeholder_count} placeholder(s)"
        )
        return summary
