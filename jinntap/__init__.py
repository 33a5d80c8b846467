"""Schema-driven document model with a lossless XML dialect."""

from jinntap.errors import (
    Diagnostic,
    DiagnosticKind,
    Diagnostics,
    SchemaCompilationError,
    SchemaDefinitionError,
)
from jinntap.models import Document, Mark, Node, Text
from jinntap.parser import DocumentParser, parse
from jinntap.schema import TypeDescriptor, TypeRegistry, compile_schema, load_registry
from jinntap.serializer import DocumentSerializer, serialize
from jinntap.session import EditorSession

__version__ = "0.1.0"

__all__ = [
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "Document",
    "DocumentParser",
    "DocumentSerializer",
    "EditorSession",
    "Mark",
    "Node",
    "SchemaCompilationError",
    "SchemaDefinitionError",
    "Text",
    "TypeDescriptor",
    "TypeRegistry",
    "compile_schema",
    "load_registry",
    "parse",
    "serialize",
]
