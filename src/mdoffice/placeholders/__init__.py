"""Position-addressable placeholder tokens for formulas."""

from .codec import (
    MAX_AXIS_VALUE,
    TOKEN_PATTERN,
    PlaceholderPosition,
    decode,
    encode,
    find_placeholders,
)

__all__ = [
    "MAX_AXIS_VALUE",
    "TOKEN_PATTERN",
    "PlaceholderPosition",
    "decode",
    "encode",
    "find_placeholders",
]
