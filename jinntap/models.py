"""Document tree: the in-memory form of editable content.

Snapshots are immutable. The editing surface produces a fresh snapshot on
every change; the serializer only reads them and the parser only builds new
ones.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterator, Mapping, Union

ROOT_TYPE = "doc"
TEXT_TYPE = "text"


def _frozen_attrs(attrs: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(attrs or {}))


@dataclass(frozen=True)
class Mark:
    """An inline annotation applied to a text run."""

    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", _frozen_attrs(self.attrs))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Mark):
            return NotImplemented
        return self.type == other.type and dict(self.attrs) == dict(other.attrs)

    def __hash__(self) -> int:
        return hash((self.type, tuple(sorted(self.attrs.items()))))

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        return result


@dataclass(frozen=True)
class Text:
    """A run of text.

    Marks are ordered innermost first: ``marks[0]`` is the tag closest to the
    text, ``marks[-1]`` the outermost.
    """

    value: str
    marks: tuple[Mark, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "marks", tuple(self.marks))

    @property
    def type(self) -> str:
        return TEXT_TYPE

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": TEXT_TYPE, "text": self.value}
        if self.marks:
            result["marks"] = [m.to_dict() for m in self.marks]
        return result


@dataclass(frozen=True)
class Node:
    """A typed element with attributes and ordered children."""

    type: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    children: tuple[Child, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", _frozen_attrs(self.attrs))
        object.__setattr__(self, "children", tuple(self.children))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Node):
            return NotImplemented
        return (
            self.type == other.type
            and dict(self.attrs) == dict(other.attrs)
            and self.children == other.children
        )

    def __hash__(self) -> int:
        return hash((self.type, tuple(sorted(self.attrs.items())), self.children))

    @property
    def content_size(self) -> int:
        """Length of the node's content in characters; leaf nodes count as one."""
        size = 0
        for child in self.children:
            if isinstance(child, Text):
                size += len(child.value)
            else:
                size += 1
        return size

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"type": self.type}
        if self.attrs:
            result["attrs"] = dict(self.attrs)
        if self.children:
            result["content"] = [c.to_dict() for c in self.children]
        return result

    def text_content(self) -> str:
        parts: list[str] = []
        for child in self.children:
            if isinstance(child, Text):
                parts.append(child.value)
            else:
                parts.append(child.text_content())
        return "".join(parts)

    def walk(self) -> Iterator[Child]:
        """Yield every descendant in document order (pre-order)."""
        stack: list[Child] = list(reversed(self.children))
        while stack:
            child = stack.pop()
            yield child
            if isinstance(child, Node):
                stack.extend(reversed(child.children))


Child = Union[Node, Text]


@dataclass(frozen=True, eq=False)
class Document(Node):
    """The root of a document tree."""

    type: str = ROOT_TYPE

    def text_content(self) -> str:
        """Plain text of the document, top-level blocks separated by blank lines."""
        return "\n\n".join(
            c.text_content() if isinstance(c, Node) else c.value for c in self.children
        )


def child_from_dict(data: Mapping[str, Any]) -> Child:
    """Build a node or text run from its JSON form.

    Text runs use ``{"type": "text", "text": ..., "marks": [...]}``; ``value``
    is accepted in place of ``text``. Nodes use ``{"type", "attrs", "content"}``.
    """
    if data.get("type") == TEXT_TYPE:
        value = data.get("text", data.get("value", ""))
        marks = tuple(
            Mark(type=m["type"], attrs=m.get("attrs") or {})
            for m in data.get("marks") or ()
        )
        return Text(value=value, marks=marks)

    children = data.get("content", data.get("children")) or ()
    return Node(
        type=data["type"],
        attrs=data.get("attrs") or {},
        children=tuple(child_from_dict(c) for c in children),
    )


def document_from_dict(data: Mapping[str, Any]) -> Document:
    """Build a document from its JSON form (the root's ``type`` is ignored)."""
    children = data.get("content", data.get("children")) or ()
    return Document(children=tuple(child_from_dict(c) for c in children))
