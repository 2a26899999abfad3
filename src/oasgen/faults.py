"""
Fault policy: turns runtime warnings and uncaught failures into logged
diagnostics and process exit codes.

The policy is scoped with :meth:`FaultPolicy.installed` around the generation
step instead of being registered as process-global hooks.

oasgen/src/oasgen/faults.py
"""

import logging
import traceback
import warnings
from contextlib import contextmanager
from enum import IntFlag
from typing import Iterator, NoReturn, Tuple, Type

from .diagnostics import ERROR, Logger

__all__ = ["Severity", "AnnotationWarning", "FaultPolicy", "severity_label", "severity_for"]

logger = logging.getLogger(__name__)


class Severity(IntFlag):
    """Numeric severity codes used for warnings raised during a run."""

    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384
    ALL = 32767


_LABELS = {
    Severity.ERROR: "Error",
    Severity.CORE_ERROR: "Error",
    Severity.COMPILE_ERROR: "Error",
    Severity.USER_ERROR: "Error",
    Severity.RECOVERABLE_ERROR: "Error",
    Severity.WARNING: "Warning",
    Severity.CORE_WARNING: "Warning",
    Severity.COMPILE_WARNING: "Warning",
    Severity.USER_WARNING: "Warning",
    Severity.PARSE: "Parser error",
    Severity.NOTICE: "Notice",
    Severity.USER_NOTICE: "Notice",
    Severity.STRICT: "Strict",
    Severity.DEPRECATED: "Deprecated",
    Severity.USER_DEPRECATED: "Deprecated",
}

# Checked in order, so subclasses must come before their bases.
_CATEGORY_SEVERITIES: Tuple[Tuple[Type[Warning], Severity], ...] = (
    (DeprecationWarning, Severity.DEPRECATED),
    (PendingDeprecationWarning, Severity.DEPRECATED),
    (FutureWarning, Severity.DEPRECATED),
    (SyntaxWarning, Severity.PARSE),
    (RuntimeWarning, Severity.WARNING),
    (ImportWarning, Severity.COMPILE_WARNING),
    (ResourceWarning, Severity.NOTICE),
    (BytesWarning, Severity.STRICT),
    (UnicodeWarning, Severity.STRICT),
)


class AnnotationWarning(UserWarning):
    """Warning raised by analysers and processors, tagged with a severity."""

    def __init__(self, message: str, severity: Severity = Severity.USER_WARNING):
        super().__init__(message)
        self.severity = severity


def severity_label(code: int) -> str:
    """Display label for a numeric severity code."""
    try:
        return _LABELS.get(Severity(code), "Error")
    except ValueError:
        return "Error"


def severity_for(message: object, category: Type[Warning]) -> Severity:
    """Severity code for a warning instance or category."""
    if isinstance(message, AnnotationWarning):
        return message.severity
    for base, severity in _CATEGORY_SEVERITIES:
        if issubclass(category, base):
            return severity
    return Severity.USER_WARNING


class FaultPolicy:
    """Routes warnings and escaping exceptions to a :class:`Logger`."""

    def __init__(self, logger: Logger, error_reporting: int = Severity.ALL):
        self.logger = logger
        self.error_reporting = int(error_reporting)

    def handle_warning(self, message, category, filename, lineno, file=None, line=None) -> None:
        """Log a warning; exit at once when it is classified as an error.

        Has the signature of :func:`warnings.showwarning`.
        """
        code = severity_for(message, category)
        if not int(code) & self.error_reporting:
            logger.debug(f"Suppressed {category.__name__}: {message}")
            return

        label = severity_label(code)
        self.logger.log(ERROR, str(message), label, (str(filename), lineno))
        if label.startswith("Error"):
            raise SystemExit(int(code))

    def handle_exception(self, exc: BaseException) -> NoReturn:
        """Log an uncaught failure and exit with its code, or 1."""
        context = None
        frames = traceback.extract_tb(exc.__traceback__)
        if frames:
            context = (frames[-1].filename, frames[-1].lineno)
        logger.debug("Uncaught failure", exc_info=(type(exc), exc, exc.__traceback__))

        self.logger.log(ERROR, str(exc) or type(exc).__name__, None, context)
        if self.logger.debug:
            self.logger.console.print("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip())

        code = getattr(exc, "exit_code", 0)
        raise SystemExit(code if isinstance(code, int) and code else 1)

    @contextmanager
    def installed(self) -> Iterator["FaultPolicy"]:
        """Scope the policy around a block of work.

        Every warning raised inside the block goes through
        :meth:`handle_warning`; an exception escaping the block goes through
        :meth:`handle_exception`. The previous warning machinery is restored
        on the way out.
        """
        with warnings.catch_warnings():
            warnings.simplefilter("always")
            warnings.showwarning = self.handle_warning
            try:
                yield self
            except (SystemExit, KeyboardInterrupt):
                raise
            except Exception as exc:
                self.handle_exception(exc)
