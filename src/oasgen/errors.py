"""
Exception types raised by oasgen.

Every exception carries an ``exit_code`` which the fault policy uses when the
error escapes the run.

oasgen/src/oasgen/errors.py
"""

__all__ = [
    "OasgenError",
    "ParseError",
    "ConfigError",
    "ProcessorLookupError",
    "SourceNotFoundError",
    "UnsupportedVersionError",
]


class OasgenError(Exception):
    """Base class for oasgen errors."""

    exit_code: int = 1


class ParseError(OasgenError):
    """Invalid command-line usage."""


class ConfigError(OasgenError):
    """Invalid ``[tool.oasgen]`` configuration."""


class ProcessorLookupError(OasgenError, LookupError):
    """A processor name could not be resolved."""


class SourceNotFoundError(OasgenError):
    """A path root given on the command line does not exist."""


class UnsupportedVersionError(OasgenError, ValueError):
    """The requested OpenAPI version is not supported."""
