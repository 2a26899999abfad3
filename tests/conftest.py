"""Pytest configuration and fixtures for oasgen tests."""

import io
from pathlib import Path

import pytest
from rich.console import Console

from oasgen.diagnostics import Logger

from .helpers.sources import ANNOTATED_MODULE


@pytest.fixture
def project(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """A project directory with a pyproject.toml and one annotated module under src/."""
    (tmp_path / "pyproject.toml").write_text('[project]\nname = "demo"\n')
    src = tmp_path / "src"
    src.mkdir()
    (src / "pets.py").write_text(ANNOTATED_MODULE)
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def console_buffer() -> io.StringIO:
    return io.StringIO()


@pytest.fixture
def diagnostics(console_buffer: io.StringIO) -> Logger:
    """Logger writing to an in-memory buffer."""
    console = Console(file=console_buffer, markup=False, emoji=False, highlight=False, soft_wrap=True)
    return Logger(console=console)
