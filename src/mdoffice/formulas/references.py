"""A1-style cell reference utilities."""

import re
from dataclasses import dataclass
from typing import Optional

CELL_PATTERN = re.compile(r"^(\$)?([A-Z]{1,3})(\$)?([0-9]{1,7})$")


@dataclass
class CellReference:
    """A single parsed cell reference."""

    column: str
    row: int
    absolute_column: bool = False
    absolute_row: bool = False

    @property
    def column_index(self) -> int:
        return column_to_index(self.column)

    def __str__(self) -> str:
        col_prefix = "$" if self.absolute_column else ""
        row_prefix = "$" if self.absolute_row else ""
        return f"{col_prefix}{self.column}{row_prefix}{self.row}"


def column_to_index(column: str) -> int:
    """Convert a column letter to a 0-based index (A=0, Z=25, AA=26)."""
    index = 0
    for char in column.upper():
        index = index * 26 + (ord(char) - 64)
    return index - 1


def index_to_column(index: int) -> str:
    """Convert a 0-based index to a column letter (0=A, 25=Z, 26=AA)."""
    if index < 0:
        raise ValueError(f"Column index must be non-negative, got {index}")
    column = ""
    num = index + 1
    while num > 0:
        num, remainder = divmod(num - 1, 26)
        column = chr(65 + remainder) + column
    return column


def cell_for(row: int, column: int) -> str:
    """
    A1 coordinate of a table cell laid out with its header on row 1.

    Args:
        row: 0-based table row (header is 0)
        column: 0-based table column

    Returns:
        Coordinate such as "C2"
    """
    return f"{index_to_column(column)}{row + 1}"


def parse_cell_reference(ref: str) -> Optional[CellReference]:
    """Parse "A1" / "$A$1" into its components, or None if malformed."""
    match = CELL_PATTERN.match(ref)
    if not match:
        return None
    return CellReference(
        column=match.group(2),
        row=int(match.group(4)),
        absolute_column=match.group(1) == "$",
        absolute_row=match.group(3) == "$",
    )


def split_sheet(ref: str) -> tuple[Optional[str], str]:
    """Split "Sheet1!A1" into ("Sheet1", "A1"); unqualified refs get None."""
    if "!" not in ref:
        return None, ref
    sheet, local = ref.rsplit("!", 1)
    if sheet.startswith("'") and sheet.endswith("'"):
        sheet = sheet[1:-1].replace("''", "'")
    return sheet, local


def reference_bounds(ref: str) -> Optional[tuple[int, int, int, int]]:
    """
    Bounding box of a cell or range reference.

    Returns:
        (min_col, min_row, max_col, max_row) with 0-based columns and 1-based
        rows, or None when the reference cannot be parsed
    """
    _, local = split_sheet(ref)
    parts = local.split(":")
    if len(parts) > 2:
        return None
    cells = [parse_cell_reference(p) for p in parts]
    if any(c is None for c in cells):
        return None
    cols = [c.column_index for c in cells]
    rows = [c.row for c in cells]
    return min(cols), min(rows), max(cols), max(rows)


def reference_contains(ref: str, cell: str) -> bool:
    """Whether a cell or range reference covers ``cell`` (ignoring sheets)."""
    bounds = reference_bounds(ref)
    target = parse_cell_reference(cell)
    if bounds is None or target is None:
        return False
    min_col, min_row, max_col, max_row = bounds
    return min_col <= target.column_index <= max_col and min_row <= target.row <= max_row
