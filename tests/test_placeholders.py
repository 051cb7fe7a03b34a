"""Tests for the placeholder token codec."""

import pytest

from mdoffice.placeholders import (
    MAX_AXIS_VALUE,
    PlaceholderPosition,
    decode,
    encode,
    find_placeholders,
)


class TestEncode:
    """Test token generation."""

    def test_token_format(self):
        """Test the fixed token layout."""
        assert encode(0, 1, 1) == "__FORMULA_0_1_1__"
        assert encode(12, 345, 6) == "__FORMULA_12_345_6__"

    def test_round_trip_at_bounds(self):
        """Test decode recovers the triple at the edges of the range."""
        for triple in [(0, 0, 0), (MAX_AXIS_VALUE, MAX_AXIS_VALUE, MAX_AXIS_VALUE), (1_000_000, 7, 0)]:
            assert decode(encode(*triple)) == triple

    def test_supports_a_million_per_axis(self):
        """Test the documented maximum is at least 10^6."""
        assert MAX_AXIS_VALUE >= 1_000_000

    @pytest.mark.parametrize(
        "args",
        [(-1, 0, 0), (0, MAX_AXIS_VALUE + 1, 0), (0, 0, 1.5), (True, 0, 0), ("1", 0, 0)],
    )
    def test_rejects_invalid_values(self, args):
        """Test negative, oversized and non-integer values."""
        with pytest.raises(ValueError):
            encode(*args)


class TestDecode:
    """Test token parsing."""

    def test_returns_named_position(self):
        """Test the decoded fields are addressable by name."""
        position = decode("__FORMULA_3_4_5__")

        assert isinstance(position, PlaceholderPosition)
        assert position.table_index == 3
        assert position.row == 4
        assert position.column == 5

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "__FORMULA__",
            "__FORMULA_1_2__",
            "__FORMULA_1_2_3_4__",
            "__FORMULA_01_2_3__",
            "__FORMULA_-1_2_3__",
            "__formula_1_2_3__",
            " __FORMULA_1_2_3__",
            "x__FORMULA_1_2_3__",
            "__FORMULA_1_2_3__\n",
            "__FORMULA_12345678_0_0__",
            "snake_case_name__here",
        ],
    )
    def test_non_tokens_return_none(self, text):
        """Test anything other than exactly one token is rejected."""
        assert decode(text) is None

    def test_non_string_returns_none(self):
        """Test non-string input is not a token."""
        assert decode(None) is None
        assert decode(42) is None


class TestFindPlaceholders:
    """Test scanning text for embedded tokens."""

    def test_finds_all_tokens(self):
        """Test every token in a line is found in order."""
        text = "| __FORMULA_0_1_1__ | x | __FORMULA_0_1_3__ |"

        found = list(find_placeholders(text))

        assert [token for token, _ in found] == ["__FORMULA_0_1_1__", "__FORMULA_0_1_3__"]
        assert found[1][1] == (0, 1, 3)

    def test_ignores_prose(self):
        """Test ordinary underscores are not tokens."""
        assert list(find_placeholders("my__var and __init__")) == []
