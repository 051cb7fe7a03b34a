"""Tests for the table-to-workbook spreadsheet engine."""

import pytest
from openpyxl import load_workbook

from mdoffice.engine import TableWorkbookWriter
from mdoffice.engine.workbook import coerce_value
from mdoffice.errors import ConversionError

TEXT = """---
title: Sales
---
# Sales

| Region | Units | Total |
|--------|------:|------:|
| **North** | 1,200 | __FORMULA_0_1_2__ |
| South | 3.5 | __FORMULA_0_2_2__ |

| Note |
|------|
| =not a formula |
"""


class TestTableWorkbookWriter:
    """Test writing pipe tables to worksheets."""

    def test_one_sheet_per_table(self, tmp_path):
        """Test sheet naming and the summary."""
        path = tmp_path / "sales.xlsx"

        summary = TableWorkbookWriter().write(TEXT, path)

        assert summary.sheet_names == ["Table 1", "Table 2"]
        assert summary.table_count == 2
        assert summary.placeholder_count == 2
        assert load_workbook(path).sheetnames == ["Table 1", "Table 2"]

    def test_cell_layout(self, tmp_path):
        """Test header on row 1 and data row N on row N + 1."""
        path = tmp_path / "sales.xlsx"

        TableWorkbookWriter().write(TEXT, path)

        sheet = load_workbook(path)["Table 1"]
        assert sheet["A1"].value == "Region"
        assert sheet["A1"].font.bold is True
        assert sheet["A2"].value == "North"
        assert sheet["B2"].value == 1200
        assert sheet["B3"].value == 3.5
        assert sheet["C2"].value == "__FORMULA_0_1_2__"
        assert sheet["C3"].value == "__FORMULA_0_2_2__"
        assert sheet.freeze_panes == "A2"

    def test_equals_text_stays_text(self, tmp_path):
        """Test cell text starting with '=' is not turned into a formula."""
        path = tmp_path / "sales.xlsx"

        TableWorkbookWriter().write(TEXT, path)

        cell = load_workbook(path)["Table 2"]["A2"]
        assert cell.value == "=not a formula"
        assert cell.data_type == "s"

    def test_no_tables(self, tmp_path):
        """Test a document without tables cannot become a spreadsheet."""
        with pytest.raises(ConversionError, match="No tables found"):
            TableWorkbookWriter().write("# Just prose\n", tmp_path / "empty.xlsx")

        assert not (tmp_path / "empty.xlsx").exists()


class TestCoerceValue:
    """Test number coercion."""

    def test_numbers(self):
        """Test integers, decimals and thousands separators."""
        assert coerce_value("42") == 42
        assert coerce_value("-7") == -7
        assert coerce_value("3.25") == 3.25
        assert coerce_value("1,234,567") == 1234567

    def test_text(self):
        """Test anything else stays text."""
        assert coerce_value("12 apples") == "12 apples"
        assert coerce_value("1,23") == "1,23"
        assert coerce_value("") == ""
