"""Errors and diagnostics raised or recorded by the jinntap core."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from jinntap.logging_config import logger


class SchemaCompilationError(Exception):
    """Raised when an element spec cannot be compiled into a type."""

    def __init__(self, name: str, archetype: str | None, reason: str = "") -> None:
        """Initialize the error.

        Args:
            name: The element name from the schema definition
            archetype: The archetype string given for the element
            reason: Additional detail about the failure
        """
        self.name = name
        self.archetype = archetype
        msg = f"Cannot compile element <{name}>: unrecognized archetype {archetype!r}"
        if reason:
            msg = f"Cannot compile element <{name}>: {reason}"
        super().__init__(msg)


class SchemaDefinitionError(Exception):
    """Raised when a schema definition file cannot be loaded."""

    def __init__(self, message: str, source: str = "") -> None:
        self.source = source
        if source:
            message = f"{source}: {message}"
        super().__init__(message)


class DiagnosticKind(str, Enum):
    """Classification of recoverable problems."""

    SCHEMA_COMPILATION = "SchemaCompilationError"
    UNKNOWN_TYPE = "UnknownTypeWarning"
    MALFORMED_ATTRIBUTE = "MalformedAttributeWarning"
    DEPTH_EXCEEDED = "DepthExceededWarning"
    MALFORMED_MARKUP = "MalformedMarkupWarning"


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable problem found while compiling, serializing or parsing."""

    kind: DiagnosticKind
    message: str
    name: str = ""
    """The element, mark or attribute name the diagnostic is about."""


@dataclass
class Diagnostics:
    """Collector for diagnostics.

    Every recorded diagnostic is also logged as a warning, so callers that
    never look at the collector still see the problem in the logs.
    """

    items: list[Diagnostic] = field(default_factory=list)

    def record(self, kind: DiagnosticKind, message: str, name: str = "") -> Diagnostic:
        diagnostic = Diagnostic(kind=kind, message=message, name=name)
        self.items.append(diagnostic)
        logger.warning(f"{kind.value}: {message}")
        return diagnostic

    def of_kind(self, kind: DiagnosticKind) -> list[Diagnostic]:
        return [d for d in self.items if d.kind == kind]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def __bool__(self) -> bool:
        return bool(self.items)
