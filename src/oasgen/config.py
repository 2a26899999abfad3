"""Configuration loading for oasgen.

Reads settings *only* from pyproject.toml under the [tool.oasgen] section.
Keys other than ``error_reporting`` are option defaults and are validated
against the command-line option schema when the options are parsed.

oasgen/src/oasgen/config.py
"""

import logging
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Optional

from .errors import ConfigError
from .faults import Severity, severity_label

if sys.version_info >= (3, 11):

    import tomllib
else:

    try:

        import tomli as tomllib
    except ImportError as e:

        raise ImportError(
            "oasgen requires Python 3.11+ or the 'tomli' package "
            "to parse pyproject.toml on Python 3.10. "
            "Hint: Try running: pip install tomli"
        ) from e

__all__ = ["Config", "load_config", "walk_up_for_config"]

logger = logging.getLogger(__name__)


def walk_up_for_config(start_path: Path) -> Optional[Path]:
    """Return the first directory at or above ``start_path`` holding a pyproject.toml."""
    current = start_path.resolve()
    if current.is_file():
        current = current.parent
    for candidate in [current, *current.parents]:
        if (candidate / "pyproject.toml").is_file():
            return candidate
    return None


class Config:
    """Holds the oasgen configuration loaded from pyproject.toml.

    Attributes:
    project_root: The directory containing pyproject.toml, or None.
    settings: A read-only view of the [tool.oasgen] section.
    """

    def __init__(self, project_root: Optional[Path], config_dict: dict[str, Any]):
        self._project_root = project_root
        self._config_dict = config_dict.copy()

    @property
    def project_root(self) -> Optional[Path]:
        return self._project_root

    @property
    def settings(self) -> Mapping[str, Any]:
        return self._config_dict

    def get(self, key: str, default: Any = None) -> Any:
        return self._config_dict.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self._config_dict

    def is_present(self) -> bool:
        """Checks if a project root was found and some settings were loaded."""
        return self._project_root is not None and bool(self._config_dict)

    def option_defaults(self) -> dict[str, Any]:
        """Settings that seed the command-line options."""
        return {key: value for key, value in self._config_dict.items() if key != "error_reporting"}

    @property
    def error_reporting(self) -> int:
        """Mask of severities to report.

        Either an integer mask or a list of labels (``"Deprecated"``,
        ``"Strict"``...) whose severities are suppressed.
        """
        value = self._config_dict.get("error_reporting", int(Severity.ALL))
        if isinstance(value, bool):
            raise ConfigError("'error_reporting' in [tool.oasgen] must be an integer or a list of labels")
        if isinstance(value, int):
            return value
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            suppressed = {item.lower() for item in value}
            mask = int(Severity.ALL)
            for severity in Severity:
                if severity is not Severity.ALL and severity_label(severity).lower() in suppressed:
                    mask &= ~int(severity)
            return mask
        raise ConfigError("'error_reporting' in [tool.oasgen] must be an integer or a list of labels")


def load_config(start_path: Path) -> Config:
    """Loads oasgen configuration from the nearest pyproject.toml.

    Returns an empty Config when no pyproject.toml is found.

    Raises:
    ConfigError: If the file cannot be read or is not valid TOML.
    """
    project_root = walk_up_for_config(start_path)
    if project_root is None:
        logger.debug(f"No pyproject.toml found searching from '{start_path}'")
        return Config(project_root=None, config_dict={})

    pyproject_path = project_root / "pyproject.toml"
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Could not read {pyproject_path}: {e}") from e

    settings = data.get("tool", {}).get("oasgen", {})
    if not isinstance(settings, dict):
        raise ConfigError(f"[tool.oasgen] in {pyproject_path} must be a table")
    if settings:
        logger.debug(f"Loaded oasgen config from {pyproject_path}: {settings}")
    return Config(project_root=project_root, config_dict=settings)
