"""Pre- and post-processing stages around the conversion engine."""

from .frontmatter import FrontMatter, normalize_metadata, parse_front_matter
from .postprocessor import PostProcessor, default_handlers
from .preprocessor import PreProcessor, normalize_line_endings
from .tables import TableRegion, cell_spans, find_tables, parse_row

__all__ = [
    "FrontMatter",
    "normalize_metadata",
    "parse_front_matter",
    "PostProcessor",
    "default_handlers",
    "PreProcessor",
    "normalize_line_endings",
    "TableRegion",
    "cell_spans",
    "find_tables",
    "parse_row",
]
