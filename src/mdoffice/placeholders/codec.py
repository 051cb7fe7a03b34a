"""Encoding and decoding of formula placeholder tokens.

A placeholder stands in for a formula while the document passes through the
external engine. Its format is a wire format shared by the pre- and
post-processor and must not change:

    __FORMULA_<table>_<row>_<column>__
"""

import re
from typing import Iterator, NamedTuple, Optional

# Largest value accepted on each axis
MAX_AXIS_VALUE = 9_999_999

_FIELD = r"(0|[1-9][0-9]{0,6})"

TOKEN_PATTERN = re.compile(rf"__FORMULA_{_FIELD}_{_FIELD}_{_FIELD}__")


class PlaceholderPosition(NamedTuple):
    """Position a placeholder token encodes."""

    table_index: int
    row: int
    column: int


def encode(table_index: int, row: int, column: int) -> str:
    """
    Build the placeholder token for a table cell.

    Raises:
        ValueError: If any value is not an integer in [0, MAX_AXIS_VALUE]
    """
    for name, value in (("table_index", table_index), ("row", row), ("column", column)):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"{name} must be an integer, got {value!r}")
        if value < 0 or value > MAX_AXIS_VALUE:
            raise ValueError(f"{name} must be between 0 and {MAX_AXIS_VALUE}, got {value}")
    return f"__FORMULA_{table_index}_{row}_{column}__"


def decode(token: str) -> Optional[PlaceholderPosition]:
    """Recover the position from a token, or None if ``token`` is not exactly one."""
    if not isinstance(token, str):
        return None
    match = TOKEN_PATTERN.fullmatch(token)
    if not match:
        return None
    return PlaceholderPosition(*(int(g) for g in match.groups()))


def find_placeholders(text: str) -> Iterator[tuple[str, PlaceholderPosition]]:
    """Yield every placeholder token embedded in ``text`` with its position."""
    for match in TOKEN_PATTERN.finditer(text):
        yield match.group(0), PlaceholderPosition(*(int(g) for g in match.groups()))
