"""
Generator: runs an analyser over a set of source files and turns the
collected fragments into an :class:`~oasgen.document.OpenApiDocument`.

oasgen/src/oasgen/generator.py
"""

import logging
import warnings
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from .analysers import Analysis, ReflectionAnalyser
from .diagnostics import Logger
from .document import OpenApiDocument
from .errors import UnsupportedVersionError
from .faults import AnnotationWarning, Severity
from .options import DEFAULT_VERSION
from .processors import Processor, default_processors

__all__ = ["Generator", "SUPPORTED_VERSIONS", "MISSING_INFO", "MISSING_PATHS"]

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = ("3.0.0", "3.0.3", "3.1.0")

MISSING_INFO = "Required info not found (docstring `info:` block or @Info)"
MISSING_PATHS = "Required paths not found (docstring `path:` block or @Get, @Post...)"

_KEY_ORDER = ("openapi", "info", "servers", "tags", "paths", "components")


class Generator:
    """Builds an OpenAPI document from annotated sources."""

    def __init__(self, logger: Optional[Logger] = None):
        self.logger = logger or Logger()
        self.processors: List[Processor] = []

    def add_processor(self, processor: Processor) -> "Generator":
        self.processors.append(processor)
        return self

    def generate(
        self,
        sources: Iterable[Path],
        analyser=None,
        version: str = DEFAULT_VERSION,
    ) -> OpenApiDocument:
        """Analyse ``sources`` and return the document.

        Raises:
            UnsupportedVersionError: if ``version`` is not a supported OpenAPI version.
        """
        if version not in SUPPORTED_VERSIONS:
            raise UnsupportedVersionError(
                f"Unsupported OpenAPI version: {version} (supported: {', '.join(SUPPORTED_VERSIONS)})"
            )
        analyser = analyser or ReflectionAnalyser()

        analysis = Analysis()
        count = 0
        for source in sources:
            analyser.analyse(Path(source), analysis)
            count += 1
        if not count:
            self.logger.notice("No source files found")
        logger.debug(f"Analysed {count} files, found {len(analysis.fragments)} fragments")

        for processor in default_processors() + self.processors:
            logger.debug(f"Running processor {type(processor).__name__}")
            processor(analysis)

        analysis.openapi["openapi"] = version
        self._validate(analysis.openapi)
        return OpenApiDocument(self._ordered(analysis.openapi))

    @staticmethod
    def _validate(openapi: Dict[str, Any]) -> None:
        if not openapi.get("info"):
            warnings.warn(AnnotationWarning(MISSING_INFO, Severity.WARNING))
        if not openapi.get("paths"):
            warnings.warn(AnnotationWarning(MISSING_PATHS, Severity.WARNING))

    @staticmethod
    def _ordered(openapi: Dict[str, Any]) -> Dict[str, Any]:
        ordered = {key: openapi[key] for key in _KEY_ORDER if key in openapi}
        ordered.update((key, value) for key, value in openapi.items() if key not in ordered)
        return ordered
