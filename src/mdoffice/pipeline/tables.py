"""Line-oriented detection of markdown pipe tables."""

import re
from dataclasses import dataclass

SEPARATOR_INNER_PATTERN = re.compile(r"^[\s|:\-]+$")
FENCE_PATTERN = re.compile(r"^\s{0,3}(`{3,}|~{3,})")


@dataclass
class TableRegion:
    """A pipe table: header line, separator line, then data lines."""

    index: int  # 0-based ordinal in the document
    start: int  # Line index of the header
    end: int  # Line index one past the last data row

    @property
    def separator_line(self) -> int:
        return self.start + 1

    @property
    def data_lines(self) -> range:
        return range(self.start + 2, self.end)


def is_table_line(line: str) -> bool:
    """Whether a line is a pipe-delimited table row."""
    stripped = line.strip()
    return len(stripped) >= 2 and stripped.startswith("|") and stripped.endswith("|")


def is_separator_line(line: str) -> bool:
    """Whether a table line is the |---|:---:| separator."""
    if not is_table_line(line):
        return False
    inner = line.strip()[1:-1]
    return bool(SEPARATOR_INNER_PATTERN.match(inner)) and "-" in inner


def find_tables(lines: list[str], start: int = 0) -> list[TableRegion]:
    """
    Find pipe tables in document order.

    Runs of pipe lines that do not open with a header and a separator are not
    tables. Lines inside fenced code blocks are skipped.
    """
    tables: list[TableRegion] = []
    fence = None
    run_start = None

    def close_run(end: int):
        if run_start is None:
            return
        if (
            end - run_start >= 2
            and not is_separator_line(lines[run_start])
            and is_separator_line(lines[run_start + 1])
        ):
            tables.append(TableRegion(index=len(tables), start=run_start, end=end))

    for i in range(start, len(lines)):
        line = lines[i]
        fence_match = FENCE_PATTERN.match(line)
        if fence:
            if fence_match and fence_match.group(1)[0] == fence[0] and len(fence_match.group(1)) >= len(fence):
                fence = None
            continue
        if fence_match:
            close_run(i)
            run_start = None
            fence = fence_match.group(1)
            continue

        if is_table_line(line):
            if run_start is None:
                run_start = i
        else:
            close_run(i)
            run_start = None

    close_run(len(lines))
    return tables


def cell_spans(line: str) -> list[tuple[int, int]]:
    """
    Character spans of each cell's content within a table line.

    Cells are separated by pipes not escaped with a backslash; the outer pipes
    are excluded.
    """
    first = line.index("|")
    last = line.rindex("|")
    spans = []
    cell_start = first + 1
    i = cell_start
    while i < last:
        char = line[i]
        if char == "\\":
            i += 2
            continue
        if char == "|":
            spans.append((cell_start, i))
            cell_start = i + 1
        i += 1
    spans.append((cell_start, last))
    return spans


def parse_row(line: str) -> list[str]:
    """Cell texts of a table line, trimmed and with escaped pipes restored."""
    return [line[s:e].strip().replace("\\|", "|") for s, e in cell_spans(line)]
