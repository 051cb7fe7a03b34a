"""Tests for formula validation."""

import pytest

from mdoffice.errors import FormulaValidationError
from mdoffice.formulas import (
    DEFAULT_REGISTRY,
    SELF_REFERENCE_ERROR,
    FormulaValidator,
    FunctionRegistry,
    validate_formula,
)
from mdoffice.models import FormulaLocation


def location(row: int, column: int, formula: str) -> FormulaLocation:
    return FormulaLocation(
        table_index=0,
        row=row,
        column=column,
        formula=formula,
        placeholder=f"__FORMULA_0_{row}_{column}__",
    )


class TestSyntaxChecks:
    """Test grammar checks."""

    def test_valid_formula(self):
        """Test a well-formed formula passes."""
        result = validate_formula("SUM(A1:A5)")

        assert result.is_valid is True
        assert result.errors == []
        assert result.cell_references == ["A1:A5"]
        assert result.functions == ["SUM"]

    def test_missing_close_paren(self):
        """Test an unclosed parenthesis is reported."""
        result = validate_formula("SUM(A1:A5")

        assert result.is_valid is False
        assert result.errors[0].startswith("UnbalancedParens")

    def test_unexpected_close_paren(self):
        """Test depth going negative is reported with its position."""
        result = validate_formula("SUM(A1))")

        assert result.is_valid is False
        assert result.errors[0] == "UnbalancedParens: unexpected ')' at position 7"

    def test_unterminated_string(self):
        """Test an unclosed string literal is reported."""
        result = validate_formula('IF(A1>0,"yes,"no")')

        assert result.is_valid is False
        assert any(e.startswith("UnterminatedString") for e in result.errors)

    def test_escaped_quote_in_string(self):
        """Test doubled quotes inside a literal do not end it."""
        result = validate_formula('CONCATENATE("say ""hi""",A1)')

        assert result.is_valid is True
        assert result.cell_references == ["A1"]

    def test_leading_equals(self):
        """Test a leftover '=' is rejected."""
        result = validate_formula("=SUM(A1)")

        assert result.is_valid is False
        assert any(e.startswith("UnexpectedToken") for e in result.errors)

    def test_check_order(self):
        """Test errors come back in check order."""
        result = validate_formula('=SUM(A1,"x')

        prefixes = [e.split(":")[0] for e in result.errors]
        assert prefixes == ["UnbalancedParens", "UnterminatedString", "UnexpectedToken"]

    def test_unsafe_characters(self):
        """Test characters outside the allow-list are rejected."""
        result = validate_formula("A1+B1;C1")

        assert result.is_valid is False
        assert any(e.startswith("UnsafeCharacter") for e in result.errors)
        assert "';'" in result.errors[-1]

    def test_comparison_operators_are_safe(self):
        """Test <, > and = inside the body are allowed."""
        result = validate_formula('IF(A1>=10,"high",IF(A1<>0,"low","zero"))')

        assert result.is_valid is True

    def test_empty_formula(self):
        """Test a blank body is invalid."""
        result = validate_formula("   ")

        assert result.is_valid is False
        assert result.errors[0].startswith("EmptyFormula")

    def test_formula_too_long(self):
        """Test the configured length limit."""
        validator = FormulaValidator(max_length=10)
        result = validator.validate("A1+A2+A3+A4")

        assert result.is_valid is False
        assert result.errors[-1].startswith("FormulaTooLong")

    def test_malformed_input_never_raises(self):
        """Test validate reports rather than raises."""
        for raw in ["(((", ")))", '"', "'", "SUM(", "$$$", "A1:"]:
            result = validate_formula(raw)
            assert result.is_valid is False or result.errors == []


class TestReferencesAndFunctions:
    """Test extraction of references and function names."""

    def test_references_in_order_with_duplicates(self):
        """Test references keep document order and duplicates."""
        result = validate_formula("A1+B2*A1")

        assert result.cell_references == ["A1", "B2", "A1"]

    def test_absolute_references(self):
        """Test absolute and mixed references."""
        result = validate_formula("$A$1+B$2+$C3")

        assert result.cell_references == ["$A$1", "B$2", "$C3"]

    def test_sheet_qualified_references(self):
        """Test references with a sheet prefix are kept whole."""
        result = validate_formula("Sheet2!A1+'My Sheet'!B2:B4")

        assert result.cell_references == ["Sheet2!A1", "'My Sheet'!B2:B4"]

    def test_function_names_are_not_references(self):
        """Test LOG10( is a function, not cell LOG10."""
        result = validate_formula("LOG10(A1)")

        assert result.cell_references == ["A1"]
        assert result.functions == ["LOG10"]

    def test_text_inside_strings_is_ignored(self):
        """Test references and calls inside literals are not extracted."""
        result = validate_formula('IF(A1>0,"B2 SUM(",0)')

        assert result.cell_references == ["A1"]
        assert result.functions == ["IF"]

    def test_nested_functions(self):
        """Test every call is listed, upper-cased."""
        result = validate_formula("round(average(B2:B9),2)")

        assert result.functions == ["ROUND", "AVERAGE"]

    def test_unknown_function_is_warning(self):
        """Test unregistered functions warn but stay valid."""
        result = validate_formula("FOO(A1)+SUM(A2)")

        assert result.is_valid is True
        assert result.warnings == ["Unknown function: FOO"]
        assert result.functions == ["FOO", "SUM"]


class TestSelfReference:
    """Test self-reference detection at a known location."""

    def test_direct_self_reference(self):
        """Test a formula at (0,1,2) referencing C2."""
        result = validate_formula("C2*2", location(1, 2, "C2*2"))

        assert result.is_valid is False
        assert SELF_REFERENCE_ERROR in result.errors

    def test_range_covering_own_cell(self):
        """Test a range that includes the formula's cell."""
        result = validate_formula("SUM(C1:C5)", location(1, 2, "SUM(C1:C5)"))

        assert result.errors == [SELF_REFERENCE_ERROR]

    def test_absolute_self_reference(self):
        """Test $C$2 is the same cell as C2."""
        result = validate_formula("$C$2+1", location(1, 2, "$C$2+1"))

        assert result.errors == [SELF_REFERENCE_ERROR]

    def test_other_cell_is_fine(self):
        """Test referencing a neighbouring cell."""
        result = validate_formula("B2*2", location(1, 2, "B2*2"))

        assert result.is_valid is True

    def test_other_sheet_is_fine(self):
        """Test a sheet-qualified reference to the same coordinate."""
        result = validate_formula("Sheet2!C2", location(1, 2, "Sheet2!C2"))

        assert result.is_valid is True

    def test_no_location_no_check(self):
        """Test without a location no self-reference is assumed."""
        assert validate_formula("C2*2").is_valid is True


class TestStrictValidation:
    """Test the raising variant."""

    def test_raises_on_invalid(self):
        """Test FormulaValidationError carries the formula and reasons."""
        validator = FormulaValidator()

        with pytest.raises(FormulaValidationError) as exc_info:
            validator.validate_strict("SUM(A1")

        assert exc_info.value.formula == "SUM(A1"
        assert "UnbalancedParens" in exc_info.value.reason

    def test_returns_result_when_valid(self):
        """Test a valid formula returns the result."""
        result = FormulaValidator().validate_strict("A1+A2")

        assert result.cell_references == ["A1", "A2"]


class TestFunctionRegistry:
    """Test the function registry."""

    def test_default_registry_size(self):
        """Test the registry covers the common functions."""
        assert len(DEFAULT_REGISTRY) >= 60
        for name in ["SUM", "AVERAGE", "IF", "VLOOKUP", "ROUND", "COUNTIF"]:
            assert name in DEFAULT_REGISTRY

    def test_lookup_is_case_insensitive(self):
        """Test membership ignores case."""
        assert "sum" in DEFAULT_REGISTRY

    def test_with_functions_returns_new_registry(self):
        """Test extending leaves the default untouched."""
        extended = DEFAULT_REGISTRY.with_functions("myfunc")

        assert "MYFUNC" in extended
        assert "MYFUNC" not in DEFAULT_REGISTRY

    def test_injected_registry(self):
        """Test the validator uses the registry it is given."""
        validator = FormulaValidator(registry=FunctionRegistry(frozenset({"ONLY"})))

        assert validator.validate("ONLY(A1)").warnings == []
        assert validator.validate("SUM(A1)").warnings == ["Unknown function: SUM"]
