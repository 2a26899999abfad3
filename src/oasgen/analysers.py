"""
Source analysers for oasgen.

Two interchangeable strategies extract OpenAPI fragments from Python files:

- :class:`ReflectionAnalyser` parses the module with :mod:`ast` and asks its
  annotation factories for fragments: YAML blocks in docstrings
  (:class:`DocBlockAnnotationFactory`) and decorator attributes
  (:class:`AttributeAnnotationFactory`).
- :class:`TokenAnalyser` is the legacy strategy: it reads ``# @openapi``
  comment blocks from the token stream.

Problems with individual annotations are reported as
:class:`~oasgen.faults.AnnotationWarning` and never stop the analysis.

oasgen/src/oasgen/analysers.py
"""

import ast
import logging
import textwrap
import tokenize
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol, Sequence, Tuple, Union

import yaml

from .faults import AnnotationWarning, Severity

__all__ = [
    "Fragment",
    "Analysis",
    "HTTP_METHODS",
    "AnnotationFactory",
    "DocBlockAnnotationFactory",
    "AttributeAnnotationFactory",
    "ReflectionAnalyser",
    "TokenAnalyser",
]

logger = logging.getLogger(__name__)

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")

ROOT = "root"
PATH = "path"
OPERATION = "operation"
SCHEMA = "schema"

Definition = Union[ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef]


@dataclass
class Fragment:
    """A piece of the OpenAPI document found in a source file."""

    kind: str
    data: Dict[str, Any]
    source: Optional[Path] = None
    line: int = 0
    symbol: str = ""


@dataclass
class Analysis:
    """Fragments collected from all sources plus the document being built."""

    fragments: List[Fragment] = field(default_factory=list)
    openapi: Dict[str, Any] = field(default_factory=dict)

    def add(self, fragment: Fragment) -> None:
        self.fragments.append(fragment)

    def of_kind(self, kind: str) -> List[Fragment]:
        return [f for f in self.fragments if f.kind == kind]


def warn(message: str, source: Optional[Path], line: int, severity: Severity = Severity.WARNING) -> None:
    """Raise an AnnotationWarning located at ``source:line``."""
    warnings.warn_explicit(
        AnnotationWarning(message, severity),
        AnnotationWarning,
        str(source) if source else "<unknown>",
        line or 0,
    )


def load_yaml_mapping(text: str, source: Optional[Path], line: int) -> Optional[Dict[str, Any]]:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        warn(f"Invalid YAML annotation in {source}: {e}", source, line)
        return None
    if data is None:
        return None
    if not isinstance(data, dict):
        warn(f"YAML annotation in {source} must be a mapping, got {type(data).__name__}", source, line)
        return None
    return data


def operation_fragments(
    path: Optional[str],
    data: Dict[str, Any],
    source: Optional[Path],
    line: int,
    symbol: str,
) -> Iterator[Fragment]:
    """Split a path item mapping into ``path`` and ``operation`` fragments."""
    if not path:
        warn(f"Missing path for operation {symbol}", source, line)
        return
    if not isinstance(path, str):
        warn(f"Path for operation {symbol} must be a string, got {type(path).__name__}", source, line)
        return
    item: Dict[str, Any] = {}
    for key, value in data.items():
        method = str(key).lower()
        if method not in HTTP_METHODS:
            item[key] = value
            continue
        if value is None:
            value = {}
        if not isinstance(value, dict):
            warn(f"Operation {method.upper()} {path} in {symbol} must be a mapping", source, line)
            continue
        yield Fragment(OPERATION, {"path": path, "method": method, "operation": value}, source, line, symbol)
    if item:
        yield Fragment(PATH, {"path": path, "item": item}, source, line, symbol)


def schema_name_is_valid(name: Any, symbol: str, source: Optional[Path], line: int) -> bool:
    if isinstance(name, str):
        return True
    warn(f"Schema name for {symbol} must be a string, got {type(name).__name__}", source, line)
    return False


class AnnotationFactory(Protocol):
    """Builds fragments for a single module, class or function node."""

    def fragments(self, node: Definition, symbol: str, source: Path) -> Iterator[Fragment]:
        ...


class DocBlockAnnotationFactory:
    """Reads the YAML that follows a ``---`` line in a docstring.

    On a module the YAML is merged into the document root, on a class it is a
    schema (named after the class unless ``name`` is given) and on a function
    it is a path item whose ``path`` key is required.
    """

    separator = "---"

    def fragments(self, node: Definition, symbol: str, source: Path) -> Iterator[Fragment]:
        docstring = ast.get_docstring(node, clean=True)
        if not docstring:
            return
        lines = docstring.splitlines()
        try:
            start = [line.strip() for line in lines].index(self.separator)
        except ValueError:
            return

        line = getattr(node, "lineno", 1)
        data = load_yaml_mapping("\n".join(lines[start + 1 :]), source, line)
        if data is None:
            return

        if isinstance(node, ast.Module):
            yield Fragment(ROOT, data, source, line, symbol)
        elif isinstance(node, ast.ClassDef):
            name = data.pop("name", None) or node.name
            if schema_name_is_valid(name, symbol, source, line):
                yield Fragment(SCHEMA, {"name": name, "schema": data}, source, line, symbol)
        else:
            path = data.pop("path", None)
            yield from operation_fragments(path, data, source, line, symbol)


class AttributeAnnotationFactory:
    """Reads decorator attributes such as ``@Get("/users", summary=...)``.

    Only the final name of the decorator is considered, so ``@oa.Get`` and
    ``@Get`` are the same attribute. Arguments must be Python literals.
    """

    root_attributes = ("Info", "Server", "Tag")
    operation_attributes = tuple(m.capitalize() for m in HTTP_METHODS)

    def fragments(self, node: Definition, symbol: str, source: Path) -> Iterator[Fragment]:
        for decorator in getattr(node, "decorator_list", ()):
            if not isinstance(decorator, ast.Call):
                continue
            name = self._callee_name(decorator.func)
            if name not in self.root_attributes + self.operation_attributes + ("Schema",):
                continue
            parsed = self._arguments(decorator, name, source, symbol)
            if parsed is None:
                continue
            args, kwargs = parsed
            yield from self._build(name, args, kwargs, node, symbol, source, decorator.lineno)

    def _build(
        self,
        name: str,
        args: List[Any],
        kwargs: Dict[str, Any],
        node: Definition,
        symbol: str,
        source: Path,
        line: int,
    ) -> Iterator[Fragment]:
        if name == "Info":
            yield Fragment(ROOT, {"info": kwargs}, source, line, symbol)
        elif name == "Server":
            if args:
                kwargs = {"url": args[0], **kwargs}
            yield Fragment(ROOT, {"servers": [kwargs]}, source, line, symbol)
        elif name == "Tag":
            if args:
                kwargs = {"name": args[0], **kwargs}
            yield Fragment(ROOT, {"tags": [kwargs]}, source, line, symbol)
        elif name == "Schema":
            schema_name = kwargs.pop("name", None) or (args[0] if args else None) or getattr(node, "name", symbol)
            if schema_name_is_valid(schema_name, symbol, source, line):
                yield Fragment(SCHEMA, {"name": schema_name, "schema": kwargs}, source, line, symbol)
        else:
            path = args[0] if args else kwargs.pop("path", None)
            yield from operation_fragments(path, {name.lower(): kwargs}, source, line, symbol)

    @staticmethod
    def _callee_name(func: ast.expr) -> Optional[str]:
        if isinstance(func, ast.Name):
            return func.id
        if isinstance(func, ast.Attribute):
            return func.attr
        return None

    @staticmethod
    def _arguments(
        decorator: ast.Call, name: str, source: Path, symbol: str
    ) -> Optional[Tuple[List[Any], Dict[str, Any]]]:
        try:
            args = [ast.literal_eval(arg) for arg in decorator.args]
            kwargs = {}
            for keyword in decorator.keywords:
                if keyword.arg is None:
                    raise ValueError("keyword unpacking")
                kwargs[keyword.arg] = ast.literal_eval(keyword.value)
        except (ValueError, TypeError, SyntaxError):
            warn(f"@{name} on {symbol} has non-literal arguments", source, decorator.lineno)
            return None
        return args, kwargs


def _definitions(body: Sequence[ast.stmt], prefix: str = "") -> Iterator[Tuple[Definition, str]]:
    for node in body:
        if isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
            symbol = f"{prefix}{node.name}"
            yield node, symbol
            yield from _definitions(node.body, f"{symbol}.")


class ReflectionAnalyser:
    """Analyses the syntax tree of each file with a set of annotation factories."""

    def __init__(self, factories: Optional[Sequence[AnnotationFactory]] = None):
        if factories is None:
            factories = [DocBlockAnnotationFactory(), AttributeAnnotationFactory()]
        self.factories = list(factories)

    def analyse(self, source: Path, analysis: Analysis) -> None:
        logger.debug(f"Analysing {source} with {type(self).__name__}")
        # ast decodes bytes using the PEP 263 coding cookie.
        content = source.read_bytes()
        try:
            tree = ast.parse(content, filename=str(source))
        except SyntaxError as e:
            warn(f"Unable to parse {source}: {e.msg}", source, e.lineno or 0, Severity.PARSE)
            return
        except ValueError as e:
            warn(f"Unable to parse {source}: {e}", source, 0, Severity.PARSE)
            return

        nodes: List[Tuple[Definition, str]] = [(tree, "")]
        nodes.extend(_definitions(tree.body))
        for node, symbol in nodes:
            for factory in self.factories:
                for fragment in factory.fragments(node, symbol, source):
                    analysis.add(fragment)


class TokenAnalyser:
    """Legacy analyser reading ``# @openapi`` comment blocks.

    A block starts with a comment that is exactly ``@openapi`` and runs over
    the comment lines directly below it. The block is YAML merged into the
    document root::

        # @openapi
        # info:
        #   title: Pets
        #   version: 1.0.0
    """

    marker = "@openapi"

    def analyse(self, source: Path, analysis: Analysis) -> None:
        logger.debug(f"Analysing {source} with {type(self).__name__}")
        try:
            blocks = self._blocks(source)
        except (tokenize.TokenError, SyntaxError, ValueError) as e:
            warn(f"Unable to tokenize {source}: {e}", source, 0, Severity.PARSE)
            return

        for line, lines in blocks:
            data = load_yaml_mapping(textwrap.dedent("\n".join(lines)), source, line)
            if data is not None:
                analysis.add(Fragment(ROOT, data, source, line))

    def _blocks(self, source: Path) -> List[Tuple[int, List[str]]]:
        blocks: List[Tuple[int, List[str]]] = []
        current: Optional[Tuple[int, List[str]]] = None
        last_row = 0

        with tokenize.open(source) as f:
            for token in tokenize.generate_tokens(f.readline):
                if token.type in (tokenize.NL, tokenize.NEWLINE, tokenize.INDENT, tokenize.DEDENT):
                    continue
                row = token.start[0]
                text = token.string[1:] if token.type == tokenize.COMMENT else None
                if text is not None and text.startswith(" "):
                    text = text[1:]

                if current is not None:
                    if text is not None and row == last_row + 1 and text.strip() != self.marker:
                        current[1].append(text)
                        last_row = row
                        continue
                    blocks.append(current)
                    current = None

                if text is not None and text.strip() == self.marker:
                    current = (row, [])
                    last_row = row

        if current is not None:
            blocks.append(current)
        return blocks
