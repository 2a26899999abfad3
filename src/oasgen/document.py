"""
The generated OpenAPI document and its serializations.

oasgen/src/oasgen/document.py
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml

__all__ = ["OpenApiDocument"]

logger = logging.getLogger(__name__)


class _Dumper(yaml.SafeDumper):
    """Safe dumper that keeps multi-line strings readable."""


def _represent_str(dumper: yaml.SafeDumper, value: str) -> yaml.ScalarNode:
    if "\n" in value:
        return dumper.represent_scalar("tag:yaml.org,2002:str", value, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", value)


_Dumper.add_representer(str, _represent_str)


class OpenApiDocument:
    """In-memory OpenAPI document."""

    def __init__(self, data: Dict[str, Any]):
        self.data = data

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def to_yaml(self) -> str:
        return yaml.dump(
            self.data,
            Dumper=_Dumper,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        ).rstrip("\n")

    def to_json(self) -> str:
        return json.dumps(self.data, indent=4, ensure_ascii=False)

    def save_as(self, path: Union[str, Path], format: str = "auto") -> Path:
        """Write the document to ``path``.

        ``format`` is ``yaml``, ``json`` or ``auto``; ``auto`` picks JSON for a
        ``.json`` suffix and YAML for anything else.
        """
        path = Path(path)
        format = (format or "auto").lower()
        if format == "auto":
            format = "json" if path.suffix.lower() == ".json" else "yaml"
        content = self.to_json() if format == "json" else self.to_yaml()
        path.write_text(content + "\n", encoding="utf-8")
        logger.debug(f"Wrote {format} document to {path}")
        return path
