"""Running Pandoc as the conversion engine for documents and presentations."""

import logging
import re
import shutil
import subprocess
import time
from dataclasses import dataclass
from itertools import zip_longest
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, Field

from ..config import settings
from ..errors import (
    PandocConversionError,
    PandocNotFoundError,
    PandocTimeoutError,
    PandocVersionError,
)

logger = logging.getLogger(__name__)

VERSION_PATTERN = re.compile(r"pandoc(?:\.exe)?\s+(\d+(?:\.\d+)*)", re.IGNORECASE)

# Input format used for pre-processed markdown
MARKDOWN_INPUT = "markdown+yaml_metadata_block+pipe_tables"

VERSION_CHECK_TIMEOUT = 5.0


class PandocOptions(BaseModel):
    """Options for one Pandoc run."""

    input_format: str = MARKDOWN_INPUT
    output_format: str  # docx, pptx, ...
    filters: list[str] = Field(default_factory=list)
    reference_doc: Optional[str] = None
    variables: dict[str, str] = Field(default_factory=dict)
    metadata: dict[str, Union[str, list[str]]] = Field(default_factory=dict)
    resource_path: list[str] = Field(default_factory=list)
    standalone: bool = True
    table_of_contents: bool = False
    number_sections: bool = False
    slide_level: Optional[int] = Field(default=None, ge=1, le=6)


@dataclass
class PandocInstallation:
    """Result of probing the Pandoc binary."""

    installed: bool
    version: Optional[str] = None
    path: Optional[str] = None
    error: Optional[str] = None


@dataclass
class PandocResult:
    """Outcome of a Pandoc run. ``stderr`` is kept exactly as Pandoc wrote it."""

    success: bool
    output_path: Optional[Path]
    stderr: str
    exit_code: int
    duration: float


def parse_version(text: str) -> tuple[int, ...]:
    return tuple(int(part) for part in text.split("."))


def version_at_least(found: str, required: str) -> bool:
    """Compare dotted versions numerically ("3.1.2" >= "3.0")."""
    pairs = zip_longest(parse_version(found), parse_version(required), fillvalue=0)
    for have, need in pairs:
        if have != need:
            return have > need
    return True


def build_arguments(options: PandocOptions, output_path: Path) -> list[str]:
    """Map options onto Pandoc command-line flags."""
    args = [
        "--from", options.input_format,
        "--to", options.output_format,
        "--output", str(output_path),
    ]
    if options.standalone:
        args.append("--standalone")
    if options.reference_doc:
        args.extend(["--reference-doc", options.reference_doc])
    if options.table_of_contents:
        args.append("--toc")
    if options.number_sections:
        args.append("--number-sections")
    if options.slide_level:
        args.extend(["--slide-level", str(options.slide_level)])
    for lua_filter in options.filters:
        args.extend(["--lua-filter", lua_filter])
    for key, value in options.variables.items():
        args.extend(["--variable", f"{key}={value}"])
    for key, value in options.metadata.items():
        values = value if isinstance(value, list) else [value]
        for item in values:
            args.extend(["--metadata", f"{key}={item}"])
    for resource in options.resource_path:
        args.extend(["--resource-path", resource])
    return args


class PandocExecutor:
    """Locates Pandoc, checks its version and runs conversions."""

    def __init__(
        self,
        pandoc_path: Optional[str] = None,
        timeout: Optional[float] = None,
        min_version: Optional[str] = None,
    ):
        self.pandoc_path = pandoc_path or settings.pandoc_path
        self.timeout = timeout or settings.pandoc_timeout_seconds
        self.min_version = min_version or settings.pandoc_min_version
        self._installation: Optional[PandocInstallation] = None

    def check_installation(self) -> PandocInstallation:
        """Probe ``pandoc --version`` once and cache the answer."""
        if self._installation is not None:
            return self._installation

        command = self.pandoc_path or "pandoc"
        try:
            completed = subprocess.run(
                [command, "--version"],
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=VERSION_CHECK_TIMEOUT,
            )
        except FileNotFoundError:
            self._installation = PandocInstallation(installed=False, error="Pandoc not found in PATH")
            return self._installation
        except (OSError, subprocess.TimeoutExpired) as e:
            self._installation = PandocInstallation(installed=False, error=str(e))
            return self._installation

        if completed.returncode != 0:
            self._installation = PandocInstallation(
                installed=False, error=f"Pandoc exited with code {completed.returncode}"
            )
            return self._installation

        match = VERSION_PATTERN.search(completed.stdout)
        if not match:
            self._installation = PandocInstallation(
                installed=False, error="Could not parse Pandoc version from output"
            )
            return self._installation

        version = match.group(1)
        path = command if self.pandoc_path else (shutil.which(command) or command)
        error = None
        if not version_at_least(version, self.min_version):
            error = f"Pandoc {self.min_version}+ required, found {version}"

        self._installation = PandocInstallation(installed=True, version=version, path=path, error=error)
        logger.info(f"Using Pandoc {version} at {path}")
        return self._installation

    def ensure_available(self) -> PandocInstallation:
        """
        Raises:
            PandocNotFoundError: If Pandoc cannot be run
            PandocVersionError: If Pandoc is older than the minimum version
        """
        installation = self.check_installation()
        if not installation.installed:
            raise PandocNotFoundError(self.pandoc_path)
        if installation.error:
            raise PandocVersionError(self.min_version, installation.version or "unknown")
        return installation

    def convert(self, text: str, options: PandocOptions, output_path: Path) -> PandocResult:
        """
        Convert ``text`` (fed on stdin) to ``output_path``.

        A non-zero exit is reported through the result, not raised.

        Raises:
            PandocNotFoundError, PandocVersionError: See ensure_available
            PandocTimeoutError: If Pandoc runs longer than the timeout
            PandocConversionError: If Pandoc could not be started
        """
        installation = self.ensure_available()
        output_path = Path(output_path)
        command = [installation.path] + build_arguments(options, output_path)
        logger.debug(f"Running {' '.join(command)}")

        started = time.monotonic()
        try:
            completed = subprocess.run(
                command,
                input=text,
                capture_output=True,
                text=True,
                encoding="utf-8",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired as e:
            logger.error(f"Pandoc timed out after {self.timeout}s")
            raise PandocTimeoutError(self.timeout) from e
        except OSError as e:
            raise PandocConversionError(str(e), "", -1, options.output_format) from e
        duration = time.monotonic() - started

        if completed.returncode != 0:
            logger.error(f"Pandoc exited with code {completed.returncode}")
            return PandocResult(
                success=False,
                output_path=None,
                stderr=completed.stderr,
                exit_code=completed.returncode,
                duration=duration,
            )

        logger.info(f"Pandoc wrote {output_path} in {duration:.2f}s")
        return PandocResult(
            success=True,
            output_path=output_path,
            stderr=completed.stderr,
            exit_code=0,
            duration=duration,
        )
