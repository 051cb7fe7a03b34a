"""Post-processing of the artifact produced by the conversion engine."""

import logging
from typing import Optional

from ..errors import PostProcessorError
from ..handlers import DocumentHandler, OutputHandler, PresentationHandler, SpreadsheetHandler
from ..models import OutputFormat, PostProcessOptions, PostProcessorResult

logger = logging.getLogger(__name__)


def default_handlers() -> dict[OutputFormat, OutputHandler]:
    return {
        OutputFormat.SPREADSHEET: SpreadsheetHandler(),
        OutputFormat.DOCUMENT: DocumentHandler(),
        OutputFormat.PRESENTATION: PresentationHandler(),
    }


class PostProcessor:
    """Dispatch an engine artifact to the handler for its format."""

    def __init__(self, handlers: Optional[dict[OutputFormat, OutputHandler]] = None):
        self.handlers = handlers or default_handlers()

    def process(self, options: PostProcessOptions) -> PostProcessorResult:
        """
        Finish the artifact at ``options.output_path`` in place.

        Raises:
            PostProcessorError: If the format is unsupported or the artifact is
                missing or unreadable
        """
        path = options.output_path
        try:
            fmt = OutputFormat.parse(options.format)
        except ValueError as e:
            raise PostProcessorError(str(e), str(options.format), str(path)) from e

        handler = self.handlers.get(fmt)
        if handler is None:
            raise PostProcessorError(f"Unsupported format: {fmt.value}", fmt.value, str(path))

        if not path.is_file():
            raise PostProcessorError(f"Output file not found: {path}", fmt.value, str(path))

        logger.info(f"Post-processing {fmt.value} output {path}")
        return handler.process(path, options.extraction_record)
