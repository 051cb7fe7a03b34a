"""Format-specific post-processing of engine output."""

from .base import OoxmlHandler, OutputHandler
from .document import DocumentHandler
from .ooxml import OoxmlPackage, escape_xml, update_xml_element
from .presentation import PresentationHandler
from .spreadsheet import SpreadsheetHandler

__all__ = [
    "OutputHandler",
    "OoxmlHandler",
    "DocumentHandler",
    "PresentationHandler",
    "SpreadsheetHandler",
    "OoxmlPackage",
    "escape_xml",
    "update_xml_element",
]
