"""
Command-line option parsing for oasgen.

The option schema is table driven: every option declares its kind up front
(flag, scalar with argument, repeatable with argument), so the parser never
inspects default values to decide how a token is consumed.

oasgen/src/oasgen/options.py
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .errors import ParseError

__all__ = [
    "OptionKind",
    "OptionSpec",
    "OPTION_SCHEMA",
    "ALIASES",
    "ARG_REQUIRED",
    "DEFAULT_PATTERN",
    "DEFAULT_VERSION",
    "default_options",
    "parse_options",
]

logger = logging.getLogger(__name__)

DEFAULT_PATTERN = "*.py"
DEFAULT_VERSION = "3.0.0"


class OptionKind(Enum):
    """How an option consumes tokens."""

    FLAG = "flag"
    SCALAR = "scalar"
    REPEATABLE = "repeatable"


@dataclass(frozen=True)
class OptionSpec:
    """Declaration of a single command-line option."""

    name: str
    kind: OptionKind
    default: Any = None
    short: Optional[str] = None

    @property
    def takes_argument(self) -> bool:
        return self.kind is not OptionKind.FLAG


OPTION_SCHEMA: Dict[str, OptionSpec] = {
    opt.name: opt
    for opt in (
        OptionSpec("legacy", OptionKind.FLAG, False, "l"),
        OptionSpec("output", OptionKind.SCALAR, False, "o"),
        OptionSpec("format", OptionKind.SCALAR, "auto"),
        OptionSpec("exclude", OptionKind.REPEATABLE, (), "e"),
        OptionSpec("pattern", OptionKind.SCALAR, DEFAULT_PATTERN, "n"),
        OptionSpec("bootstrap", OptionKind.SCALAR, False, "b"),
        OptionSpec("help", OptionKind.FLAG, False, "h"),
        OptionSpec("debug", OptionKind.FLAG, False, "d"),
        OptionSpec("processor", OptionKind.REPEATABLE, ()),
        OptionSpec("version", OptionKind.SCALAR, DEFAULT_VERSION),
    )
}

# Short flag -> canonical long name.
ALIASES: Mapping[str, str] = {
    opt.short: opt.name for opt in OPTION_SCHEMA.values() if opt.short
}

ARG_REQUIRED = frozenset(
    opt.name for opt in OPTION_SCHEMA.values() if opt.takes_argument
)


def default_options(overrides: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Build a fresh OptionSet from the schema defaults.

    ``overrides`` (usually configuration-file values) replace the schema
    defaults. Keys outside the schema are rejected with a ``ParseError``.
    """
    options: Dict[str, Any] = {}
    for name, opt in OPTION_SCHEMA.items():
        options[name] = list(opt.default) if opt.kind is OptionKind.REPEATABLE else opt.default

    for name, value in (overrides or {}).items():
        opt = OPTION_SCHEMA.get(name)
        if opt is None:
            raise ParseError(f"Unknown option: {name}")
        if opt.kind is OptionKind.REPEATABLE:
            options[name] = [value] if isinstance(value, str) else list(value)
        else:
            options[name] = value
    return options


def _resolve_name(token: str) -> str:
    if token.startswith("--"):
        return token[2:]
    name = ALIASES.get(token[1:])
    if name is None:
        raise ParseError(f"Unknown option: {token}")
    return name


def parse_options(
    tokens: Sequence[str],
    defaults: Optional[Mapping[str, Any]] = None,
    options: Optional[Dict[str, Any]] = None,
    paths: Optional[List[str]] = None,
) -> Tuple[Dict[str, Any], List[str]]:
    """Parse raw argument tokens into ``(options, paths)``.

    Free-standing tokens are collected as paths in encounter order. Repeatable
    options accumulate their values, the last occurrence of a scalar option
    wins and flags are switched on without consuming a value.

    ``options`` and ``paths`` may be passed in to be filled in place, so that a
    caller can still inspect what was parsed before a ``ParseError`` was raised.

    Raises:
        ParseError: on an unknown option or a missing option argument.
    """
    if options is None:
        options = {}
    options.update(default_options(defaults))
    if paths is None:
        paths = []

    index = 0
    while index < len(tokens):
        token = tokens[index]
        if not token.startswith("-"):
            paths.append(token)
            index += 1
            continue

        name = _resolve_name(token)
        opt = OPTION_SCHEMA.get(name)
        if opt is None:
            raise ParseError(f"Unknown option: {token}")

        if not opt.takes_argument:
            options[name] = True
            index += 1
            continue

        if index + 1 >= len(tokens) or tokens[index + 1].startswith("-"):
            raise ParseError(f"Missing argument for {token}")
        value = tokens[index + 1]
        if opt.kind is OptionKind.REPEATABLE:
            options[name].append(value)
        else:
            options[name] = value
        index += 2

    logger.debug(f"Parsed options {options} with paths {paths}")
    return options, paths
