"""
Source file discovery for oasgen.

:class:`SourceFinder` is a lazy, restartable view over a set of path roots:
every iteration walks the roots again, filtering out excluded paths and files
whose name does not match the pattern.

oasgen/src/oasgen/discovery.py
"""

import fnmatch
import logging
import os
import re
from pathlib import Path
from typing import Callable, Iterable, Iterator, List, Sequence, Union

from .errors import SourceNotFoundError
from .options import DEFAULT_PATTERN

__all__ = ["SourceFinder", "compile_pattern"]

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def compile_pattern(pattern: str) -> Callable[[str], bool]:
    """Build a file-name matcher.

    ``/regex/`` is searched as a regular expression; anything else is an
    fnmatch glob.
    """
    if len(pattern) > 2 and pattern.startswith("/") and pattern.endswith("/"):
        regex = re.compile(pattern[1:-1])
        return lambda name: regex.search(name) is not None
    return lambda name: fnmatch.fnmatch(name, pattern)


class SourceFinder:
    """Iterable over the source files below ``paths``."""

    def __init__(
        self,
        paths: Iterable[PathLike],
        exclude: Sequence[str] = (),
        pattern: str = DEFAULT_PATTERN,
    ):
        self.paths: List[Path] = [Path(p) for p in paths]
        self.exclude: List[str] = [e.replace("\\", "/").rstrip("/") for e in exclude if e]
        self.pattern = pattern or DEFAULT_PATTERN
        self._matches = compile_pattern(self.pattern)

    def __iter__(self) -> Iterator[Path]:
        for root in self.paths:
            if root.is_file():
                logger.debug(f"Including explicit file: {root}")
                yield root
            elif root.is_dir():
                yield from self._walk(root)
            else:
                raise SourceNotFoundError(f'Directory "{root}" doesn\'t exist')

    def _walk(self, root: Path) -> Iterator[Path]:
        logger.debug(f"Scanning {root} for '{self.pattern}'")
        for dirpath, dirnames, filenames in os.walk(root):
            current = Path(dirpath)
            dirnames[:] = sorted(
                d
                for d in dirnames
                if not (current / d).is_symlink() and not self.is_excluded(current / d, root)
            )
            for name in sorted(filenames):
                candidate = current / name
                if candidate.is_symlink() or not self._matches(name):
                    continue
                if self.is_excluded(candidate, root):
                    continue
                logger.debug(f"Including file: {candidate}")
                yield candidate

    def is_excluded(self, path: Path, root: Path) -> bool:
        """Check ``path`` against the exclude list.

        Relative entries are matched against the path relative to ``root``,
        either as a path prefix or as a glob; absolute entries against the
        absolute path.
        """
        relative = path.relative_to(root).as_posix()
        absolute = path.resolve().as_posix()
        for entry in self.exclude:
            target = relative
            if os.path.isabs(entry):
                target, entry = absolute, Path(entry).resolve().as_posix()
            if target == entry or target.startswith(entry + "/") or fnmatch.fnmatch(target, entry):
                logger.debug(f"Excluding '{relative}' due to '{entry}'")
                return True
        return False
