"""Parsing of the XML dialect back into document trees.

Tags are recognized through the type registry. Node tags become nodes with
their declared attributes extracted; mark tags become marks layered onto the
text they enclose, the outermost tag ending up last. Unrecognized tags are
reported and their content is hoisted into the parent.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from lxml import etree

from jinntap.config import MAX_DEPTH
from jinntap.errors import DiagnosticKind, Diagnostics
from jinntap.logging_config import logger
from jinntap.models import Child, Document, Mark, Node, Text

if TYPE_CHECKING:
    from jinntap.schema.registry import TypeRegistry

# Synthetic container for the top-level elements, which have no common parent
FRAGMENT_TAG = "jinntap-fragment"

XML_DECLARATION = re.compile(r"^\s*<\?xml[^>]*\?>")
DECLARED_ENCODING = re.compile(rb"^\s*<\?xml[^>]*encoding=[\"']([A-Za-z0-9._-]+)[\"']")


def get_tag_name(elem: etree._Element) -> str:
    """Get tag name without namespace prefix.

    Args:
        elem: XML element

    Returns:
        Tag name without namespace (e.g., "hi" not "{ns}hi"); empty for
        comments and processing instructions
    """
    tag = elem.tag
    if isinstance(tag, str) and "}" in tag:
        return tag.split("}")[-1]
    return tag if isinstance(tag, str) else ""


def _append_text(children: list[Child], value: str, marks: tuple[Mark, ...]) -> None:
    """Append a text run, merging it into a preceding run with the same marks."""
    if children and isinstance(children[-1], Text) and children[-1].marks == marks:
        children[-1] = Text(value=children[-1].value + value, marks=marks)
    else:
        children.append(Text(value=value, marks=marks))


class DocumentParser:
    """Parser that rebuilds document trees from XML using a type registry."""

    def __init__(self, registry: TypeRegistry, max_depth: int = MAX_DEPTH) -> None:
        """Initialize the parser.

        Args:
            registry: Types used to recognize tags
            max_depth: Nesting depth beyond which subtrees are dropped
        """
        self._registry = registry
        self._max_depth = max_depth

    def parse(
        self,
        source: str | bytes | etree._Element,
        diagnostics: Diagnostics | None = None,
    ) -> Document:
        """Parse serialized content into a document.

        Args:
            source: XML text holding any number of top-level elements, or an
                already parsed element whose children are the top-level
                elements
            diagnostics: Collector for unknown tags and malformed values

        Returns:
            A new Document
        """
        if diagnostics is None:
            diagnostics = Diagnostics()

        container = source if isinstance(source, etree._Element) else self._parse_markup(source, diagnostics)
        if container is None:
            return Document()

        allow_text = self._registry.root.content_model.allows_text
        children = self._parse_content(container, (), 0, diagnostics, allow_text)
        return Document(children=tuple(children))

    def _decode(self, source: bytes, diagnostics: Diagnostics) -> str:
        """Decode bytes using the declared encoding, UTF-8 when none is declared.

        Undecodable bytes become U+FFFD and are reported as malformed markup.
        """
        match = DECLARED_ENCODING.match(source)
        encoding = match.group(1).decode("ascii") if match else "utf-8"
        try:
            return source.decode(encoding)
        except (LookupError, UnicodeDecodeError) as e:
            diagnostics.record(
                DiagnosticKind.MALFORMED_MARKUP,
                f"content is not valid {encoding}, undecodable bytes replaced: {e}",
            )
        try:
            return source.decode(encoding, errors="replace")
        except LookupError:
            return source.decode("utf-8", errors="replace")

    def _parse_markup(
        self, source: str | bytes, diagnostics: Diagnostics
    ) -> etree._Element | None:
        if isinstance(source, bytes):
            source = self._decode(source, diagnostics)
        source = XML_DECLARATION.sub("", source)

        # recover keeps whatever can be salvaged from malformed markup
        parser = etree.XMLParser(recover=True, remove_comments=True, remove_pis=True, resolve_entities=False)
        wrapped = f"<{FRAGMENT_TAG}>{source}</{FRAGMENT_TAG}>"
        root = etree.fromstring(wrapped.encode("utf-8", errors="replace"), parser)

        for entry in parser.error_log:
            diagnostics.record(
                DiagnosticKind.MALFORMED_MARKUP,
                f"line {entry.line}: {entry.message}",
            )
        return root

    def _parse_content(
        self,
        elem: etree._Element,
        marks: tuple[Mark, ...],
        depth: int,
        diagnostics: Diagnostics,
        allow_text: bool,
    ) -> list[Child]:
        """Parse the text and child elements of an element.

        Args:
            elem: The element whose content is parsed
            marks: Enclosing marks, outermost first
            depth: Nesting depth of elem
            diagnostics: Collector for problems
            allow_text: Whether whitespace-only text is content here

        Returns:
            The children, with adjacent equally-marked text merged
        """
        children: list[Child] = []
        text_marks = tuple(reversed(marks))

        def add_text(value: str | None) -> None:
            if not value:
                return
            if not allow_text and not value.strip():
                return
            _append_text(children, value, text_marks)

        add_text(elem.text)
        for child in elem:
            if get_tag_name(child):
                for parsed in self._parse_element(child, marks, depth + 1, diagnostics, allow_text):
                    if isinstance(parsed, Text):
                        _append_text(children, parsed.value, parsed.marks)
                    else:
                        children.append(parsed)
            add_text(child.tail)
        return children

    def _parse_element(
        self,
        elem: etree._Element,
        marks: tuple[Mark, ...],
        depth: int,
        diagnostics: Diagnostics,
        allow_text: bool,
    ) -> list[Child]:
        tag_name = get_tag_name(elem)

        if depth > self._max_depth:
            diagnostics.record(
                DiagnosticKind.DEPTH_EXCEEDED,
                f"<{tag_name}> nested deeper than {self._max_depth}, subtree dropped",
                name=tag_name,
            )
            return []

        descriptor = self._registry.by_tag(tag_name)
        if descriptor is None:
            diagnostics.record(
                DiagnosticKind.UNKNOWN_TYPE,
                f"Unknown tag <{tag_name}>, content kept",
                name=tag_name,
            )
            return self._parse_content(elem, marks, depth, diagnostics, allow_text)

        attrs = {a.name: a.extract(elem.attrib, diagnostics) for a in descriptor.attributes}

        if descriptor.is_mark:
            mark = Mark(type=descriptor.name, attrs=attrs)
            return self._parse_content(elem, marks + (mark,), depth, diagnostics, allow_text=True)

        if marks:
            logger.debug(f"<{tag_name}> inside a mark, marks do not apply to nodes")

        children = self._parse_content(
            elem, (), depth, diagnostics, descriptor.content_model.allows_text
        )
        return [Node(type=descriptor.name, attrs=attrs, children=tuple(children))]


def parse(
    source: str | bytes | etree._Element,
    registry: TypeRegistry,
    diagnostics: Diagnostics | None = None,
) -> Document:
    """Parse serialized content with the given registry."""
    return DocumentParser(registry).parse(source, diagnostics)
