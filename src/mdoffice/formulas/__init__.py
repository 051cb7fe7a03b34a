"""Formula grammar validation and reference analysis.

Formulas arrive as the body of a ``{=...}`` table cell. The validator checks
them against a constrained grammar and a registry of known functions; the
reference helpers and cycle detection support injection-time checks.
"""

from .models import ValidationResult
from .registry import DEFAULT_FUNCTIONS, DEFAULT_REGISTRY, FunctionRegistry
from .validator import FormulaValidator, validate_formula, SELF_REFERENCE_ERROR
from .dependencies import build_reference_graph, find_reference_cycles
from .references import (
    CellReference,
    cell_for,
    column_to_index,
    index_to_column,
    parse_cell_reference,
    reference_bounds,
    reference_contains,
)

__all__ = [
    "ValidationResult",
    "DEFAULT_FUNCTIONS",
    "DEFAULT_REGISTRY",
    "FunctionRegistry",
    "FormulaValidator",
    "validate_formula",
    "SELF_REFERENCE_ERROR",
    "build_reference_graph",
    "find_reference_cycles",
    "CellReference",
    "cell_for",
    "column_to_index",
    "index_to_column",
    "parse_cell_reference",
    "reference_bounds",
    "reference_contains",
]
