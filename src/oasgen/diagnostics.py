"""
Diagnostic logger for the oasgen command line.

Messages are printed to standard error as soon as they are logged. The logger
remembers whether anything at ``error`` or ``notice`` level was ever logged;
that single flag decides the process exit code.

oasgen/src/oasgen/diagnostics.py
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

from rich.console import Console
from rich.text import Text

__all__ = ["Diagnostic", "Logger", "INFO", "NOTICE", "ERROR", "SEVERITIES"]

INFO = "info"
NOTICE = "notice"
ERROR = "error"
SEVERITIES = (INFO, NOTICE, ERROR)

_DEFAULT_PREFIXES = {INFO: "", NOTICE: "Notice", ERROR: "Error"}
_STYLES = {INFO: "", NOTICE: "yellow", ERROR: "bold red"}


@dataclass(frozen=True)
class Diagnostic:
    """A single logged message."""

    severity: str
    message: str
    prefix: str = ""

    def render(self) -> str:
        if self.prefix:
            return f"{self.prefix}: {self.message}"
        return self.message


def _stderr_console() -> Console:
    return Console(
        stderr=True,
        markup=False,
        emoji=False,
        highlight=False,
        soft_wrap=True,
    )


class Logger:
    """Leveled logger that tracks whether anything bad was reported."""

    def __init__(self, debug: bool = False, console: Optional[Console] = None):
        self.debug = debug
        self.console = console or _stderr_console()
        self.diagnostics: List[Diagnostic] = []
        self._called = False

    def log(
        self,
        severity: str,
        message: str,
        prefix: Optional[str] = None,
        context: Optional[Tuple[str, int]] = None,
    ) -> None:
        """Print ``message`` at ``severity``.

        ``prefix=None`` uses the severity's default tag; an explicit empty
        string prints the message untagged. ``context`` is a ``(file, line)``
        pair, shown for errors in debug mode.
        """
        if severity not in SEVERITIES:
            raise ValueError(f"Unknown severity: {severity}")
        if prefix is None:
            prefix = _DEFAULT_PREFIXES[severity]
        if severity in (ERROR, NOTICE):
            self._called = True
        if self.debug and severity == ERROR and context and context[0]:
            message = f"{message} in {context[0]} on line {context[1]}"

        diagnostic = Diagnostic(severity, message, prefix)
        self.diagnostics.append(diagnostic)

        text = Text()
        if prefix:
            text.append(f"{prefix}: ", style=_STYLES[severity])
        text.append(message)
        self.console.print(text)

    def info(self, message: str, prefix: Optional[str] = None) -> None:
        self.log(INFO, message, prefix)

    def notice(self, message: str, prefix: Optional[str] = None) -> None:
        self.log(NOTICE, message, prefix)

    def error(
        self,
        message: str,
        prefix: Optional[str] = None,
        context: Optional[Tuple[str, int]] = None,
    ) -> None:
        self.log(ERROR, message, prefix, context)

    def called(self) -> bool:
        """True once any error or notice has been logged."""
        return self._called
