"""End-to-end conversion: pre-process, run the engine, post-process."""

import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from .engine import PandocExecutor, PandocOptions, TableWorkbookWriter
from .engine.resources import (
    METADATA_INJECT_FILTER,
    REFERENCE_TEMPLATES,
    SECTION_BREAKS_FILTER,
    SLIDE_BREAKS_FILTER,
    filter_path,
    template_path,
)
from .errors import (
    ConversionError,
    PandocConversionError,
    PandocNotFoundError,
    PandocTimeoutError,
    PandocVersionError,
)
from .models import (
    ExtractionRecord,
    OutputFormat,
    PostProcessOptions,
    PreProcessOptions,
)
from .pipeline import PostProcessor, PreProcessor

logger = logging.getLogger(__name__)


class ConversionResult(BaseModel):
    """Outcome of converting one markdown document."""

    success: bool
    output_path: str
    format: OutputFormat
    warnings: list[str] = Field(default_factory=list)
    modifications: list[str] = Field(default_factory=list)
    formula_count: int = 0
    table_count: int = 0


def pandoc_metadata(record: ExtractionRecord) -> dict[str, Union[str, list[str]]]:
    """Normalized metadata passed to Pandoc as --metadata values."""
    metadata = record.metadata
    values: dict[str, Union[str, list[str]]] = {
        "title": metadata.title,
        "section_breaks": metadata.section_breaks,
        "slide_breaks": metadata.slide_breaks,
    }
    for key in ("author", "date", "subject", "classification"):
        value = getattr(metadata, key)
        if value:
            values[key] = value
    if metadata.keywords:
        values["keywords"] = list(metadata.keywords)
    return values


class DocumentConverter:
    """
    Converts markdown into spreadsheets, documents and presentations.

    Instances hold no per-document state and may be reused.
    """

    def __init__(
        self,
        executor: Optional[PandocExecutor] = None,
        workbook_writer: Optional[TableWorkbookWriter] = None,
        preprocessor: Optional[PreProcessor] = None,
        postprocessor: Optional[PostProcessor] = None,
    ):
        self.executor = executor or PandocExecutor()
        self.workbook_writer = workbook_writer or TableWorkbookWriter()
        self.preprocessor = preprocessor or PreProcessor()
        self.postprocessor = postprocessor or PostProcessor()

    def build_pandoc_options(
        self, record: ExtractionRecord, fmt: OutputFormat
    ) -> tuple[PandocOptions, list[str]]:
        """
        Pandoc options for a document or presentation run.

        Returns:
            (options, warnings) - warnings name filters or templates that
            were configured but are missing
        """
        warnings = []
        filters = []
        names = [METADATA_INJECT_FILTER]
        if fmt == OutputFormat.DOCUMENT:
            names.append(SECTION_BREAKS_FILTER)
        elif fmt == OutputFormat.PRESENTATION:
            names.append(SLIDE_BREAKS_FILTER)
        for name in names:
            path = filter_path(name)
            if path.is_file():
                filters.append(str(path))
            else:
                warnings.append(f"Lua filter not found, skipping: {path}")

        reference_doc = None
        template = template_path(REFERENCE_TEMPLATES[fmt.extension])
        if template is not None:
            if template.is_file():
                reference_doc = str(template)
            else:
                warnings.append(f"Reference document not found, using Pandoc defaults: {template}")

        options = PandocOptions(
            output_format=fmt.extension,
            filters=filters,
            reference_doc=reference_doc,
            metadata=pandoc_metadata(record),
            slide_level=record.metadata.slide_level if fmt == OutputFormat.PRESENTATION else None,
        )
        return options, warnings

    def convert(
        self,
        markdown: str,
        format: Union[OutputFormat, str],
        output_path: Path,
        options: Optional[PreProcessOptions] = None,
        source: Optional[str] = None,
    ) -> ConversionResult:
        """
        Convert a markdown string to ``output_path``.

        Raises:
            PreProcessorError: If the front matter is malformed
            PostProcessorError: If the engine output cannot be finished
            ConversionError: If the format is unsupported or the engine fails
        """
        output_path = Path(output_path)
        source = source or str(output_path)
        try:
            fmt = OutputFormat.parse(format)
        except ValueError as e:
            raise ConversionError(str(e), str(format), source) from e

        logger.info(f"Converting {source} to {fmt.extension}")
        record = self.preprocessor.process(markdown, options)
        warnings = list(record.warnings)

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            if fmt == OutputFormat.SPREADSHEET:
                self.workbook_writer.write(record.transformed_text, output_path)
            else:
                warnings.extend(self._run_pandoc(record, fmt, output_path, source))

            post = self.postprocessor.process(
                PostProcessOptions(format=fmt, extraction_record=record, output_path=output_path)
            )
        except Exception:
            self._remove_partial(output_path)
            raise

        warnings.extend(post.warnings)
        logger.info(f"Converted {source} to {output_path} with {len(warnings)} warning(s)")
        return ConversionResult(
            success=True,
            output_path=str(output_path),
            format=fmt,
            warnings=warnings,
            modifications=post.modifications,
            formula_count=len(record.formulas),
            table_count=record.table_count,
        )

    def convert_file(
        self,
        input_path: Path,
        format: Union[OutputFormat, str],
        output_path: Optional[Path] = None,
        options: Optional[PreProcessOptions] = None,
    ) -> ConversionResult:
        """Convert a markdown file; the output defaults to the input path with the format's extension."""
        input_path = Path(input_path)
        try:
            fmt = OutputFormat.parse(format)
        except ValueError as e:
            raise ConversionError(str(e), str(format), str(input_path)) from e

        try:
            markdown = input_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ConversionError(f"Could not read input: {e}", fmt.extension, str(input_path)) from e

        target = Path(output_path) if output_path else input_path.with_suffix(f".{fmt.extension}")
        return self.convert(markdown, fmt, target, options=options, source=str(input_path))

    def _run_pandoc(
        self, record: ExtractionRecord, fmt: OutputFormat, output_path: Path, source: str
    ) -> list[str]:
        pandoc_options, warnings = self.build_pandoc_options(record, fmt)
        try:
            result = self.executor.convert(record.transformed_text, pandoc_options, output_path)
        except PandocNotFoundError as e:
            raise ConversionError(
                f"Pandoc is not installed. Install Pandoc {self.executor.min_version}+ "
                f"to convert to {fmt.extension}.",
                fmt.extension,
                source,
            ) from e
        except (PandocVersionError, PandocTimeoutError) as e:
            raise ConversionError(str(e), fmt.extension, source) from e
        except PandocConversionError as e:
            raise ConversionError(str(e), fmt.extension, source, stderr=e.stderr) from e

        if not result.success:
            failure = PandocConversionError(
                result.stderr or f"exit code {result.exit_code}",
                result.stderr,
                result.exit_code,
                fmt.extension,
            )
            raise ConversionError(
                result.stderr or f"Pandoc exited with code {result.exit_code}",
                fmt.extension,
                source,
                stderr=result.stderr,
            ) from failure
        return warnings

    def _remove_partial(self, output_path: Path):
        try:
            if output_path.exists():
                output_path.unlink()
                logger.debug(f"Removed partial output {output_path}")
        except OSError as e:
            logger.warning(f"Could not remove partial output {output_path}: {e}")
