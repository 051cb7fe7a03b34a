"""Validation of spreadsheet formula bodies extracted from markdown tables."""

import logging
import re
from typing import TYPE_CHECKING, Optional

from ..config import settings
from ..errors import FormulaValidationError
from .models import ValidationResult
from .references import reference_contains, split_sheet
from .registry import DEFAULT_REGISTRY, FunctionRegistry

if TYPE_CHECKING:
    from ..models import FormulaLocation

logger = logging.getLogger(__name__)

# Optional sheet qualifier, then A1 or A1:B5
REFERENCE_PATTERN = re.compile(
    r"(?<![A-Za-z0-9_.$])"
    r"(?:(?:'(?:[^']|'')+'|[A-Za-z_][A-Za-z0-9_.]*)!)?"
    r"\$?[A-Z]{1,3}\$?[0-9]{1,7}"
    r"(?::\$?[A-Z]{1,3}\$?[0-9]{1,7})?"
    r"(?![A-Za-z0-9_(!])"
)

FUNCTION_PATTERN = re.compile(r"(?<![A-Za-z0-9_.$])([A-Za-z_][A-Za-z0-9_.]*)\(")

SAFE_PUNCTUATION = frozenset("+-*/^&=<>().,:\"'$%!_")

SELF_REFERENCE_ERROR = "Circular reference: formula references its own cell"


class _ScanResult:
    """Outcome of the quote/parenthesis scan over a formula body."""

    def __init__(self):
        self.masked = ""
        self.paren_error: Optional[str] = None
        self.string_error: Optional[str] = None


def _scan(body: str) -> _ScanResult:
    """
    Walk the formula once, tracking string literals and parenthesis depth.

    Double-quoted literals ("" escapes a quote) are blanked out in the masked
    copy so references and function names inside text are not picked up.
    Single-quoted sheet names are kept but must be closed.
    """
    result = _ScanResult()
    masked = []
    depth = 0
    quote: Optional[str] = None
    quote_start = 0
    i = 0

    while i < len(body):
        char = body[i]
        if quote:
            if char == quote:
                if i + 1 < len(body) and body[i + 1] == quote:
                    masked.append("  " if quote == '"' else char * 2)
                    i += 2
                    continue
                quote = None
            masked.append(" " if quote == '"' or char == '"' else char)
            i += 1
            continue

        if char in ('"', "'"):
            quote = char
            quote_start = i
            masked.append(" " if char == '"' else char)
        elif char == "(":
            depth += 1
            masked.append(char)
        elif char == ")":
            depth -= 1
            if depth < 0 and result.paren_error is None:
                result.paren_error = f"UnbalancedParens: unexpected ')' at position {i}"
            masked.append(char)
        else:
            masked.append(char)
        i += 1

    if result.paren_error is None and depth > 0:
        result.paren_error = f"UnbalancedParens: {depth} unclosed '('"
    if quote:
        kind = "string literal" if quote == '"' else "sheet name"
        result.string_error = (
            f"UnterminatedString: {kind} starting at position {quote_start} is not closed"
        )

    result.masked = "".join(masked)
    return result


class FormulaValidator:
    """Validate formula bodies against the supported grammar."""

    def __init__(
        self,
        registry: FunctionRegistry = DEFAULT_REGISTRY,
        max_length: Optional[int] = None,
    ):
        self.registry = registry
        self.max_length = max_length or settings.max_formula_length

    def validate(
        self, raw: str, location: Optional["FormulaLocation"] = None
    ) -> ValidationResult:
        """
        Validate a formula body.

        Args:
            raw: Formula text without the surrounding ``{=`` and ``}``
            location: Where the formula sits, enabling self-reference checks

        Returns:
            ValidationResult; malformed input never raises
        """
        errors: list[str] = []
        warnings: list[str] = []

        if not raw.strip():
            return ValidationResult(
                is_valid=False, errors=["EmptyFormula: formula body is empty"]
            )

        scan = _scan(raw)
        if scan.paren_error:
            errors.append(scan.paren_error)
        if scan.string_error:
            errors.append(scan.string_error)
        if raw.lstrip().startswith("="):
            errors.append("UnexpectedToken: formula body must not start with '='")

        unsafe = sorted(
            {
                c
                for c in raw
                if not (c.isalnum() or c.isspace() or c in SAFE_PUNCTUATION)
            }
        )
        if unsafe:
            errors.append(
                "UnsafeCharacter: formula contains disallowed characters "
                + " ".join(repr(c) for c in unsafe)
            )

        if len(raw) > self.max_length:
            errors.append(
                f"FormulaTooLong: formula length {len(raw)} exceeds limit of {self.max_length}"
            )

        cell_references = [m.group(0) for m in REFERENCE_PATTERN.finditer(scan.masked)]

        functions = []
        for match in FUNCTION_PATTERN.finditer(scan.masked):
            name = match.group(1).upper()
            functions.append(name)
            if name not in self.registry:
                warnings.append(f"Unknown function: {name}")

        if location is not None:
            own_cell = location.cell
            for ref in cell_references:
                sheet, _ = split_sheet(ref)
                if sheet is None and reference_contains(ref, own_cell):
                    errors.append(SELF_REFERENCE_ERROR)
                    break

        if errors:
            logger.debug(f"Formula '{raw}' failed validation: {errors}")

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings,
            cell_references=cell_references,
            functions=functions,
        )

    def validate_strict(
        self, raw: str, location: Optional["FormulaLocation"] = None
    ) -> ValidationResult:
        """Validate and raise FormulaValidationError when the formula is invalid."""
        result = self.validate(raw, location)
        if not result.is_valid:
            raise FormulaValidationError(raw, "; ".join(result.errors))
        return result


_default_validator = FormulaValidator()


def validate_formula(
    raw: str, location: Optional["FormulaLocation"] = None
) -> ValidationResult:
    """Validate with the default registry."""
    return _default_validator.validate(raw, location)
