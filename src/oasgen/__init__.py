"""oasgen: OpenAPI document generator for Python code bases

Scans Python sources for docstring, decorator and comment annotations and
builds an OpenAPI document from them.
"""

from oasgen.analysers import (AttributeAnnotationFactory,
                              DocBlockAnnotationFactory, ReflectionAnalyser,
                              TokenAnalyser)
from oasgen.diagnostics import Logger
from oasgen.discovery import SourceFinder
from oasgen.document import OpenApiDocument
from oasgen.errors import OasgenError, ParseError
from oasgen.faults import AnnotationWarning, FaultPolicy, Severity
from oasgen.generator import Generator
from oasgen.processors import register_processor

__version__ = "0.1.0"

__all__ = [
    # Pipeline
    "Generator",
    "SourceFinder",
    "OpenApiDocument",
    "ReflectionAnalyser",
    "DocBlockAnnotationFactory",
    "AttributeAnnotationFactory",
    "TokenAnalyser",
    "register_processor",
    # Diagnostics
    "Logger",
    "FaultPolicy",
    "Severity",
    "AnnotationWarning",
    "OasgenError",
    "ParseError",
]
