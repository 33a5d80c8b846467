"""Attribute descriptors compiled from attribute specs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

from jinntap.errors import DiagnosticKind

if TYPE_CHECKING:
    from jinntap.errors import Diagnostics
    from jinntap.schema.spec import AttributeSpec


@dataclass(frozen=True)
class AttributeDescriptor:
    """Compiled attribute: default value plus extraction and emission rules.

    String values are passed through verbatim, the empty string included.
    An absent value becomes the default, and so does a value that is not a
    string at all.
    """

    name: str
    default: Any = None

    def extract(
        self,
        source: Mapping[str, Any],
        diagnostics: Diagnostics | None = None,
    ) -> Any:
        """Read this attribute from a source element's attributes.

        Args:
            source: Attribute mapping of the source element
            diagnostics: Collector for malformed values

        Returns:
            The raw value, or the default if absent or malformed
        """
        if self.name not in source:
            return self.default

        value = source[self.name]
        if isinstance(value, str):
            return value

        if diagnostics is not None:
            diagnostics.record(
                DiagnosticKind.MALFORMED_ATTRIBUTE,
                f"attribute {self.name}={value!r} unusable, using default {self.default!r}",
                name=self.name,
            )
        return self.default

    def emit(self, value: Any) -> tuple[str, str] | None:
        """Render a value as a ``(name, string)`` pair, or None to omit it."""
        if value is None or value is False or value == "":
            return None
        return self.name, str(value)


def compile_attribute(name: str, spec: AttributeSpec | None = None) -> AttributeDescriptor:
    """Compile one attribute spec.

    A falsy declared default (``""``, ``0``, ``false``) means "no default".
    """
    default = spec.default if spec is not None else None
    return AttributeDescriptor(name=name, default=default or None)


def compile_attributes(
    specs: Mapping[str, AttributeSpec],
) -> tuple[AttributeDescriptor, ...]:
    """Compile attribute specs, keeping declaration order."""
    return tuple(compile_attribute(name, spec) for name, spec in specs.items())
