"""Serialization of document trees to the XML dialect.

Every element renders as ``<tag attr="value">content</tag>``. Top-level
elements are indented by a fixed prefix and end with a newline; nested
elements carry no added whitespace. Marks wrap their text run from the
innermost (first) mark outwards.
"""

from __future__ import annotations

import re
from typing import Any, Mapping

from lxml import etree

from jinntap.config import MAX_DEPTH, TOP_LEVEL_INDENT
from jinntap.errors import DiagnosticKind, Diagnostics
from jinntap.models import Document, Node, Text
from jinntap.schema.attributes import AttributeDescriptor
from jinntap.schema.registry import TypeDescriptor, TypeRegistry

# Characters XML 1.0 cannot carry at all, not even as character references
INVALID_XML_CHARS = re.compile(r"[^\t\n\r\x20-\uD7FF\uE000-\uFFFD\U00010000-\U0010FFFF]")

ESCAPE_TAG = "x"


def _xml_safe(value: str) -> str:
    return INVALID_XML_CHARS.sub("", value)


def escape_text(value: str) -> str:
    """Escape character data.

    libxml2 escapes ``&``, ``<`` and ``>``, and writes carriage returns as
    ``&#13;`` so they survive line-end normalization on parse.
    """
    if not value:
        return ""
    elem = etree.Element(ESCAPE_TAG)
    elem.text = _xml_safe(value)
    rendered = etree.tostring(elem, encoding="unicode")
    return rendered[len(f"<{ESCAPE_TAG}>") : -len(f"</{ESCAPE_TAG}>")]


def escape_attribute(value: str) -> str:
    """Escape a value for a double-quoted attribute.

    Tabs and line breaks become character references, otherwise attribute
    value normalization would turn them into spaces on parse.
    """
    elem = etree.Element(ESCAPE_TAG)
    elem.set("v", _xml_safe(value))
    rendered = etree.tostring(elem, encoding="unicode")
    return rendered[len(f'<{ESCAPE_TAG} v="') : -len('"/>')]


def emit_attributes(
    descriptors: tuple[AttributeDescriptor, ...],
    attrs: Mapping[str, Any],
) -> str:
    """Render ``name="value"`` pairs, skipping omitted ones.

    Declared attributes come first in declaration order. Attributes the type
    does not declare are rendered after them, under the same omission rule.

    Args:
        descriptors: The type's attribute descriptors
        attrs: Attribute values of the node or mark

    Returns:
        Space-joined attribute pairs (empty when nothing is emitted)
    """
    declared = {d.name for d in descriptors}
    extra = tuple(AttributeDescriptor(name) for name in attrs if name not in declared)

    pairs: list[str] = []
    for descriptor in descriptors + extra:
        emitted = descriptor.emit(attrs.get(descriptor.name))
        if emitted is None:
            continue
        name, value = emitted
        pairs.append(f'{name}="{escape_attribute(value)}"')
    return " ".join(pairs)


def wrap(descriptor: TypeDescriptor, attrs: Mapping[str, Any], content: str) -> str:
    """Wrap content in the descriptor's tag."""
    rendered = emit_attributes(descriptor.attributes, attrs)
    open_tag = f"<{descriptor.tag} {rendered}>" if rendered else f"<{descriptor.tag}>"
    return f"{open_tag}{content}</{descriptor.tag}>"


class DocumentSerializer:
    """Serializer that walks a document tree depth-first.

    Unknown node types drop their subtree and unknown mark types drop their
    wrapping layer; both are recorded as diagnostics and never abort the
    rest of the document.
    """

    def __init__(self, registry: TypeRegistry, max_depth: int = MAX_DEPTH) -> None:
        """Initialize the serializer.

        Args:
            registry: Types used to resolve tags and attributes
            max_depth: Nesting depth beyond which subtrees are dropped
        """
        self._registry = registry
        self._max_depth = max_depth

    def serialize(self, document: Document, diagnostics: Diagnostics | None = None) -> str:
        """Serialize a whole document.

        Args:
            document: The document snapshot
            diagnostics: Collector for unknown types

        Returns:
            One indented, newline-terminated line per top-level element;
            a dropped element leaves its line empty
        """
        if diagnostics is None:
            diagnostics = Diagnostics()

        return "".join(
            f"{TOP_LEVEL_INDENT}{self.serialize_child(child, diagnostics, depth=1)}\n"
            for child in document.children
        )

    def serialize_child(
        self,
        child: Node | Text,
        diagnostics: Diagnostics,
        depth: int = 0,
    ) -> str:
        if isinstance(child, Text):
            return self.serialize_text(child, diagnostics)
        return self.serialize_node(child, diagnostics, depth)

    def serialize_text(self, text: Text, diagnostics: Diagnostics) -> str:
        """Render a text run with its marks, innermost mark first."""
        result = escape_text(text.value)

        for mark in text.marks:
            descriptor = self._registry.get(mark.type)
            if descriptor is None or not descriptor.is_mark:
                diagnostics.record(
                    DiagnosticKind.UNKNOWN_TYPE,
                    f"Unknown mark type: {mark.type}",
                    name=mark.type,
                )
                continue
            result = wrap(descriptor, mark.attrs, result)

        return result

    def serialize_node(self, node: Node, diagnostics: Diagnostics, depth: int = 0) -> str:
        """Render a node and its subtree, or an empty string if it cannot be rendered."""
        descriptor = self._registry.get(node.type)
        if descriptor is None or descriptor.tag is None or descriptor.is_mark:
            diagnostics.record(
                DiagnosticKind.UNKNOWN_TYPE,
                f"Unknown node type: {node.type}",
                name=node.type,
            )
            return ""

        if depth > self._max_depth:
            diagnostics.record(
                DiagnosticKind.DEPTH_EXCEEDED,
                f"<{node.type}> nested deeper than {self._max_depth}, subtree dropped",
                name=node.type,
            )
            return ""

        content = "".join(
            self.serialize_child(child, diagnostics, depth + 1) for child in node.children
        )
        return wrap(descriptor, node.attrs, content)


def serialize(
    document: Document,
    registry: TypeRegistry,
    diagnostics: Diagnostics | None = None,
) -> str:
    """Serialize a document with the given registry."""
    return DocumentSerializer(registry).serialize(document, diagnostics)
