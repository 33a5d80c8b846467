"""Tests for TypeRegistry."""

import pytest

from jinntap.models import Node, Text
from jinntap.schema import Archetype, compile_element
from jinntap.schema.registry import TypeRegistry


class TestTypeRegistry:
    """Tests for TypeRegistry class."""

    def test_lookup_by_name_and_tag_agree(self, registry) -> None:
        """Name and tag lookups return the same descriptor."""
        for descriptor in registry:
            if descriptor.tag is not None:
                assert registry.by_tag(descriptor.tag) is registry.get(descriptor.name)

    def test_tag_override_lookup(self) -> None:
        """Overridden tags are looked up by tag, not by name."""
        registry = TypeRegistry([compile_element("person", {"type": "inline", "tag": "persName"})])
        assert registry.by_tag("persName").name == "person"
        assert registry.by_tag("person") is None

    def test_builtins_have_no_tag(self, registry) -> None:
        """Root and text are not recognized as tags."""
        assert registry.by_tag("doc") is None
        assert registry.by_tag("text") is None
        assert registry.root.is_builtin
        assert registry.text.group == "inline"

    def test_unknown_lookup(self, registry) -> None:
        """Unknown names return None."""
        assert registry.get("figure") is None
        assert "figure" not in registry
        with pytest.raises(KeyError):
            registry["figure"]

    def test_duplicate_tag_raises(self) -> None:
        """Constructing a registry with a shared tag fails."""
        with pytest.raises(ValueError, match="used by both"):
            TypeRegistry(
                [
                    compile_element("a", {"type": "inline", "tag": "x"}),
                    compile_element("b", {"type": "inline", "tag": "x"}),
                ]
            )

    def test_builtin_cannot_be_replaced(self) -> None:
        """Descriptors named like a built-in are refused."""
        from dataclasses import replace

        impostor = replace(compile_element("p", {"type": "block"}), name="text")
        with pytest.raises(ValueError, match="Duplicate"):
            TypeRegistry([impostor])

    def test_queries(self, registry) -> None:
        """Helper queries select by archetype."""
        assert {d.name for d in registry.marks()} == {"hi", "persName"}
        assert [d.name for d in registry.of_archetype(Archetype.LIST_ITEM)] == ["item"]
        assert "toggleHi" in registry.commands()
        assert "pb" in registry.tags()
        assert registry.names()[:2] == ["doc", "text"]
        assert len(registry) == len(registry.names())

    def test_registry_is_read_only(self, registry) -> None:
        """Descriptors and their mappings cannot be changed."""
        with pytest.raises(TypeError):
            registry["list"].commands["other"] = None
        with pytest.raises(AttributeError):
            registry["list"].tag = "ul"


class TestCheckContent:
    """Tests for TypeRegistry.check_content."""

    def test_list_requires_items(self, registry) -> None:
        """A list holds list items only."""
        item = Node("item", children=(Node("p"),))
        assert registry.check_content(Node("list", children=(item, item)))
        assert not registry.check_content(Node("list"))
        assert not registry.check_content(Node("list", children=(Node("p"),)))

    def test_item_requires_leading_paragraph(self, registry) -> None:
        """A list item starts with a paragraph, then any blocks."""
        nested = Node("list", children=(Node("item", children=(Node("p"),)),))
        assert registry.check_content(Node("item", children=(Node("p"), nested)))
        assert not registry.check_content(Node("item"))
        assert not registry.check_content(Node("item", children=(nested,)))

    def test_inline_content(self, registry) -> None:
        """Paragraphs hold text and empty elements, not blocks."""
        assert registry.check_content(Node("p", children=(Text("a"), Node("pb"), Text("b"))))
        assert not registry.check_content(Node("p", children=(Node("p"),)))

    def test_unknown_type(self, registry) -> None:
        """Nodes of unknown type never pass."""
        assert not registry.check_content(Node("figure"))
