"""Exception types raised by the conversion pipeline."""

from typing import Optional


class ConverterError(Exception):
    """Base class for all mdoffice errors."""

    pass


class FormulaValidationError(ConverterError):
    """Raised by strict validation when a formula is invalid."""

    def __init__(self, formula: str, reason: str):
        self.formula = formula
        self.reason = reason
        super().__init__(f'Invalid formula "{formula}": {reason}')


class PreProcessorError(ConverterError):
    """Raised when the front matter block cannot be parsed."""

    def __init__(self, message: str, details: Optional[str] = None):
        self.details = details
        super().__init__(f"{message}: {details}" if details else message)


class PostProcessorError(ConverterError):
    """Raised when the engine output cannot be post-processed at all."""

    def __init__(self, message: str, format: str, output_path: str):
        self.format = format
        self.output_path = output_path
        super().__init__(message)


class PandocNotFoundError(ConverterError):
    """Raised when Pandoc is not installed or not on PATH."""

    def __init__(self, searched_path: Optional[str] = None):
        self.searched_path = searched_path
        if searched_path:
            message = (
                f'Pandoc not found at "{searched_path}". '
                "Install from https://pandoc.org/installing.html"
            )
        else:
            message = (
                "Pandoc is not installed or not in PATH. "
                "Install from https://pandoc.org/installing.html"
            )
        super().__init__(message)


class PandocVersionError(ConverterError):
    """Raised when the installed Pandoc is older than required."""

    def __init__(self, required_version: str, found_version: str):
        self.required_version = required_version
        self.found_version = found_version
        super().__init__(f"Pandoc {required_version}+ required, found {found_version}")


class PandocConversionError(ConverterError):
    """Raised when a Pandoc run fails."""

    def __init__(self, message: str, stderr: str, exit_code: int, output_format: str):
        self.stderr = stderr
        self.exit_code = exit_code
        self.output_format = output_format
        super().__init__(f"Pandoc conversion to {output_format} failed: {message}")


class PandocTimeoutError(ConverterError):
    """Raised when a Pandoc run exceeds its timeout."""

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Pandoc conversion timed out after {timeout_seconds}s")


class ConversionError(ConverterError):
    """Raised when converting a document end to end fails."""

    def __init__(self, message: str, format: str, source: str, stderr: Optional[str] = None):
        self.format = format
        self.source = source
        self.stderr = stderr  # Engine diagnostics, verbatim
        super().__init__(f'Conversion to {format} failed for "{source}": {message}')
