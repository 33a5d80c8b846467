"""Type registry: the compiled, read-only set of element types."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Iterator, Mapping

from jinntap.config import ROOT_CONTENT
from jinntap.models import ROOT_TYPE, TEXT_TYPE, Child, Node, Text
from jinntap.schema.attributes import AttributeDescriptor
from jinntap.schema.commands import Command, ShortcutBinding
from jinntap.schema.content import ContentModel
from jinntap.schema.spec import Archetype


@dataclass(frozen=True)
class TypeDescriptor:
    """Compiled representation of one element type."""

    name: str
    tag: str | None
    """Tag written to and recognized in XML; None for the built-ins."""
    archetype: Archetype | None
    """None for the built-in root and text types."""
    content_model: ContentModel
    attributes: tuple[AttributeDescriptor, ...] = ()
    commands: Mapping[str, Command] = field(default_factory=dict)
    shortcuts: Mapping[str, ShortcutBinding] = field(default_factory=dict)
    group: str | None = None
    label: str | None = None
    priority: int | None = None
    defining: bool = False
    inline: bool = False
    default_content: Any = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "commands", MappingProxyType(dict(self.commands)))
        object.__setattr__(self, "shortcuts", MappingProxyType(dict(self.shortcuts)))

    @property
    def is_mark(self) -> bool:
        return self.archetype is Archetype.INLINE_MARK

    @property
    def is_builtin(self) -> bool:
        return self.archetype is None

    @property
    def labels(self) -> frozenset[str]:
        """Names a content expression can refer to this type by."""
        if self.group:
            return frozenset({self.name, self.group})
        return frozenset({self.name})

    def attribute(self, name: str) -> AttributeDescriptor | None:
        for descriptor in self.attributes:
            if descriptor.name == name:
                return descriptor
        return None

    def default_attrs(self) -> dict[str, Any]:
        return {a.name: a.default for a in self.attributes}


ROOT_DESCRIPTOR = TypeDescriptor(
    name=ROOT_TYPE,
    tag=None,
    archetype=None,
    content_model=ContentModel.parse(ROOT_CONTENT),
)

TEXT_DESCRIPTOR = TypeDescriptor(
    name=TEXT_TYPE,
    tag=None,
    archetype=None,
    content_model=ContentModel.parse(""),
    group="inline",
)


class TypeRegistry:
    """Read-only mapping of type names (and tags) to descriptors.

    Built once per schema definition and never changed afterwards, so one
    registry can be shared by any number of serializers and parsers.
    """

    def __init__(self, descriptors: Iterable[TypeDescriptor]) -> None:
        """Initialize the registry.

        Args:
            descriptors: Compiled descriptors; the root and text built-ins are
                always added and cannot be replaced

        Raises:
            ValueError: If two types share a name or a tag
        """
        by_name: dict[str, TypeDescriptor] = {
            ROOT_TYPE: ROOT_DESCRIPTOR,
            TEXT_TYPE: TEXT_DESCRIPTOR,
        }
        by_tag: dict[str, TypeDescriptor] = {}

        for descriptor in descriptors:
            if descriptor.name in by_name:
                raise ValueError(f"Duplicate type name: {descriptor.name}")
            by_name[descriptor.name] = descriptor
            if descriptor.tag is None:
                continue
            if descriptor.tag in by_tag:
                other = by_tag[descriptor.tag].name
                raise ValueError(f"Tag <{descriptor.tag}> used by both {other} and {descriptor.name}")
            by_tag[descriptor.tag] = descriptor

        self._by_name = MappingProxyType(by_name)
        self._by_tag = MappingProxyType(by_tag)

    def get(self, name: str) -> TypeDescriptor | None:
        """Look up a type by registry name."""
        return self._by_name.get(name)

    def by_tag(self, tag: str) -> TypeDescriptor | None:
        """Look up a type by its XML tag."""
        return self._by_tag.get(tag)

    def __getitem__(self, name: str) -> TypeDescriptor:
        return self._by_name[name]

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)

    @property
    def root(self) -> TypeDescriptor:
        return self._by_name[ROOT_TYPE]

    @property
    def text(self) -> TypeDescriptor:
        return self._by_name[TEXT_TYPE]

    def names(self) -> list[str]:
        return list(self._by_name.keys())

    def tags(self) -> set[str]:
        return set(self._by_tag.keys())

    def marks(self) -> list[TypeDescriptor]:
        return [d for d in self._by_name.values() if d.is_mark]

    def of_archetype(self, archetype: Archetype) -> list[TypeDescriptor]:
        return [d for d in self._by_name.values() if d.archetype is archetype]

    def commands(self) -> dict[str, Command]:
        """All commands across types, keyed by command name."""
        result: dict[str, Command] = {}
        for descriptor in self._by_name.values():
            result.update(descriptor.commands)
        return result

    def labels_for(self, child: Child) -> frozenset[str]:
        """Labels a child answers to in content expressions."""
        if isinstance(child, Text):
            return TEXT_DESCRIPTOR.labels
        descriptor = self._by_name.get(child.type)
        if descriptor is None:
            return frozenset({child.type})
        return descriptor.labels

    def check_content(self, node: Node) -> bool:
        """Check a node's children against its type's content expression.

        Returns False for a node whose type is not registered.
        """
        descriptor = self._by_name.get(node.type)
        if descriptor is None:
            return False
        return descriptor.content_model.matches([self.labels_for(c) for c in node.children])
