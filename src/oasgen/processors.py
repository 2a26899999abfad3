"""
Processors and the processor registry for oasgen.

A processor is any callable taking an :class:`~oasgen.analysers.Analysis`.
Processors are registered under a canonical name with a factory returning
the processor; ``--processor <name>`` resolves the name through this registry
and falls back to importing a dotted path.

oasgen/src/oasgen/processors.py
"""

import copy
import importlib
import logging
from typing import Any, Callable, Dict, List, Optional

from .analysers import OPERATION, PATH, ROOT, SCHEMA, Analysis, warn
from .errors import ProcessorLookupError

__all__ = [
    "Processor",
    "register_processor",
    "get_processor",
    "get_all_processors",
    "resolve_processor",
    "default_processors",
    "DEFAULT_PIPELINE",
    "deep_merge",
]

logger = logging.getLogger(__name__)

Processor = Callable[[Analysis], None]
ProcessorFactory = Callable[[], Processor]

# Simple registry - name -> factory
_PROCESSORS: Dict[str, ProcessorFactory] = {}


def register_processor(name: str, factory: Optional[ProcessorFactory] = None):
    """Register a processor factory under ``name``.

    Can be used directly or as a class/function decorator.
    """

    def decorator(target: ProcessorFactory) -> ProcessorFactory:
        _PROCESSORS[name] = target
        return target

    if factory is not None:
        return decorator(factory)
    return decorator


def get_processor(name: str) -> Optional[ProcessorFactory]:
    """Get processor factory by name."""
    return _PROCESSORS.get(name)


def get_all_processors() -> Dict[str, ProcessorFactory]:
    """Get all registered processor factories."""
    return _PROCESSORS.copy()


def _import_dotted(name: str) -> Any:
    if ":" in name:
        module_name, _, attr = name.partition(":")
    else:
        module_name, _, attr = name.rpartition(".")
    if not module_name or not attr:
        raise ImportError(name)
    module = importlib.import_module(module_name)
    target = module
    for part in attr.split("."):
        target = getattr(target, part)
    return target


def resolve_processor(name: str) -> Processor:
    """Instantiate the processor registered as ``name``.

    Unregistered names are tried as ``package.module.Class`` or
    ``package.module:factory`` import paths.

    Raises:
        ProcessorLookupError: when the name resolves to nothing usable.
    """
    factory = get_processor(name)
    if factory is None:
        try:
            factory = _import_dotted(name)
        except (ImportError, AttributeError) as e:
            logger.debug(f"Failed to import processor '{name}': {e}")
            raise ProcessorLookupError(f"Unknown processor: {name}") from e
    if not callable(factory):
        raise ProcessorLookupError(f"Unknown processor: {name}")

    processor = factory()
    if not callable(processor):
        raise ProcessorLookupError(f"Processor {name} is not callable")
    return processor


def deep_merge(target: Dict[str, Any], source: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``source`` into ``target``: mappings recurse, lists extend, scalars override."""
    for key, value in source.items():
        current = target.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            current.extend(value)
        else:
            target[key] = copy.deepcopy(value)
    return target


@register_processor("merge-root")
class MergeRoot:
    """Merge root fragments into the document, in discovery order."""

    def __call__(self, analysis: Analysis) -> None:
        for fragment in analysis.of_kind(ROOT):
            deep_merge(analysis.openapi, fragment.data)


@register_processor("build-schemas")
class BuildSchemas:
    """Collect schema fragments under ``components.schemas``."""

    def __call__(self, analysis: Analysis) -> None:
        fragments = analysis.of_kind(SCHEMA)
        if not fragments:
            return
        schemas = analysis.openapi.setdefault("components", {}).setdefault("schemas", {})
        for fragment in fragments:
            name = fragment.data["name"]
            if name in schemas:
                warn(f"Duplicate schema {name} in {fragment.source}", fragment.source, fragment.line)
                continue
            schemas[name] = fragment.data["schema"]


@register_processor("build-paths")
class BuildPaths:
    """Collect path and operation fragments under ``paths``."""

    def __call__(self, analysis: Analysis) -> None:
        paths = analysis.openapi.get("paths")
        for fragment in analysis.fragments:
            if fragment.kind not in (PATH, OPERATION):
                continue
            if paths is None:
                paths = analysis.openapi.setdefault("paths", {})
            item = paths.setdefault(fragment.data["path"], {})
            if fragment.kind == PATH:
                deep_merge(item, fragment.data["item"])
                continue
            method = fragment.data["method"]
            if method in item:
                warn(
                    f"Duplicate operation {method.upper()} {fragment.data['path']} in {fragment.symbol}",
                    fragment.source,
                    fragment.line,
                )
                continue
            item[method] = fragment.data["operation"]


@register_processor("operation-id")
class OperationId:
    """Default ``operationId`` to the qualified name of the annotated function."""

    def __call__(self, analysis: Analysis) -> None:
        for fragment in analysis.of_kind(OPERATION):
            operation = fragment.data["operation"]
            if fragment.symbol and "operationId" not in operation:
                operation["operationId"] = fragment.symbol


@register_processor("sort-paths")
class SortPaths:
    """Order ``paths`` alphabetically."""

    def __call__(self, analysis: Analysis) -> None:
        paths = analysis.openapi.get("paths")
        if paths:
            analysis.openapi["paths"] = dict(sorted(paths.items()))


@register_processor("document-tags")
class DocumentTags:
    """Declare every tag used by an operation in the top-level ``tags`` list."""

    def __call__(self, analysis: Analysis) -> None:
        tags: List[Dict[str, Any]] = analysis.openapi.get("tags") or []
        known = {tag.get("name") for tag in tags if isinstance(tag, dict)}
        for fragment in analysis.of_kind(OPERATION):
            for name in fragment.data["operation"].get("tags", ()):
                if name not in known:
                    tags.append({"name": name})
                    known.add(name)
        if tags:
            analysis.openapi["tags"] = tags


DEFAULT_PIPELINE = ("merge-root", "build-schemas", "build-paths", "operation-id")


def default_processors() -> List[Processor]:
    """Processors every generation runs before the user-registered ones."""
    return [resolve_processor(name) for name in DEFAULT_PIPELINE]
