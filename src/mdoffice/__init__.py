"""Markdown to Office (xlsx, docx, pptx) conversion with live spreadsheet formulas."""

from .converter import ConversionResult, DocumentConverter
from .errors import (
    ConversionError,
    ConverterError,
    FormulaValidationError,
    PandocConversionError,
    PandocNotFoundError,
    PandocTimeoutError,
    PandocVersionError,
    PostProcessorError,
    PreProcessorError,
)
from .models import (
    ExtractionRecord,
    FormulaLocation,
    NormalizedMetadata,
    OutputFormat,
    PostProcessOptions,
    PostProcessorResult,
    PreProcessOptions,
)
from .pipeline import PostProcessor, PreProcessor

__version__ = "0.1.0"

__all__ = [
    "ConversionResult",
    "DocumentConverter",
    "ConversionError",
    "ConverterError",
    "FormulaValidationError",
    "PandocConversionError",
    "PandocNotFoundError",
    "PandocTimeoutError",
    "PandocVersionError",
    "PostProcessorError",
    "PreProcessorError",
    "ExtractionRecord",
    "FormulaLocation",
    "NormalizedMetadata",
    "OutputFormat",
    "PostProcessOptions",
    "PostProcessorResult",
    "PreProcessOptions",
    "PostProcessor",
    "PreProcessor",
]
