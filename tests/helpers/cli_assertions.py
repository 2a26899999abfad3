"""
Assertions over ``CliRunner`` results.

Diagnostics and the document share ``result.output`` under the runner, so the
helpers compare against a normalized copy: no ANSI styling, no blank lines and
no surrounding whitespace per line.
"""
import re

import pytest
from click.testing import Result

_ANSI = re.compile(r"\x1b\[[0-9;]*m")


def clean_output(output: str) -> str:
    text = _ANSI.sub("", output).replace("\r\n", "\n").replace("\r", "\n")
    return "\n".join(stripped for stripped in (line.strip() for line in text.split("\n")) if stripped)


def _report(result: Result, headline: str, msg: str) -> None:
    detail = f"{msg}\n" if msg else ""
    pytest.fail(f"{detail}{headline}\n--- output (exit {result.exit_code}) ---\n{clean_output(result.output)}")


def assert_output_contains(result: Result, substring: str, msg: str = "") -> None:
    if substring not in clean_output(result.output):
        _report(result, f"missing: {substring!r}", msg)


def assert_output_not_contains(result: Result, substring: str, msg: str = "") -> None:
    if substring in clean_output(result.output):
        _report(result, f"unexpected: {substring!r}", msg)


def assert_exit_code(result: Result, expected_code: int, msg: str = "") -> None:
    """Fail with the captured output when the exit code differs."""
    if result.exit_code != expected_code:
        if result.exception is not None and not isinstance(result.exception, SystemExit):
            msg = f"{msg}\nraised {type(result.exception).__name__}: {result.exception}".strip()
        _report(result, f"expected exit code {expected_code}", msg)
