"""Round-trip tests: serialize then parse gives the same tree."""

import pytest

from jinntap.models import Document, Mark, Node, Text
from jinntap.parser import parse
from jinntap.schema import compile_schema
from jinntap.serializer import serialize


def normalize(node, registry):
    """Fill in declared attribute defaults, as parsing does"""
    if isinstance(node, Text):
        marks = tuple(
            Mark(m.type, {**registry[m.type].default_attrs(), **m.attrs}) for m in node.marks
        )
        return Text(node.value, marks)
    children = tuple(normalize(c, registry) for c in node.children)
    if isinstance(node, Document):
        return Document(children=children)
    return Node(node.type, {**registry[node.type].default_attrs(), **node.attrs}, children)


@pytest.fixture
def full_document():
    """Document using every archetype, all attributes set"""
    return Document(
        children=(
            Node(
                "div",
                {"type": "chapter"},
                (
                    Node(
                        "p",
                        {"rend": "indent"},
                        (
                            Text("Hello "),
                            Text("world", (Mark("hi", {"rend": "b"}), Mark("persName", {"ref": "#w"}))),
                            Node("pb", {"n": "1", "facs": "f1.png"}),
                            Text(" & <more>", (Mark("hi", {"rend": "i"}),)),
                        ),
                    ),
                    Node(
                        "list",
                        {},
                        (
                            Node("item", {}, (Node("p", {"rend": "a"}, (Text("one"),)),)),
                            Node(
                                "item",
                                {},
                                (
                                    Node("p", {"rend": "b"}, (Text("two"),)),
                                    Node("note", {"id": "n1", "n": "1"}, (Text("nested"),)),
                                ),
                            ),
                        ),
                    ),
                ),
            ),
            Node("div", {"type": "appendix"}, (Node("p", {"rend": "x"}, (Text(" spaced  "),)),)),
        )
    )


class TestRoundTrip:
    """Tests for parse(serialize(tree)) == tree."""

    def test_full_document(self, registry, full_document) -> None:
        """A tree with every attribute set survives unchanged."""
        xml = serialize(full_document, registry)
        assert parse(xml, registry) == full_document

    def test_xml_stable(self, registry, full_document) -> None:
        """Serializing the parsed tree gives the same XML."""
        xml = serialize(full_document, registry)
        assert serialize(parse(xml, registry), registry) == xml

    def test_defaults_normalized(self, registry) -> None:
        """Missing attributes come back as their defaults."""
        document = Document(
            children=(Node("div", {}, (Node("p", {}, (Text("x", (Mark("hi"),)),)),)),)
        )
        parsed = parse(serialize(document, registry), registry)
        assert parsed == normalize(document, registry)

    def test_mark_order(self) -> None:
        """Marks [A, B] render as <B><A>text</A></B> and parse back as [A, B]."""
        registry = compile_schema(
            {"p": {"type": "block"}, "a": {"type": "inline"}, "b": {"type": "inline"}}
        )
        document = Document(children=(Node("p", {}, (Text("text", (Mark("a"), Mark("b"))),)),))

        xml = serialize(document, registry)

        assert xml == "      <p><b><a>text</a></b></p>\n"
        assert parse(xml, registry) == document

    def test_null_attributes_absent_after_round_trip(self, registry) -> None:
        """Null attributes are omitted and come back as null."""
        document = Document(children=(Node("div", {"type": None}),))
        xml = serialize(document, registry)
        assert xml == "      <div></div>\n"
        assert parse(xml, registry) == document

    def test_bundled_schema(self) -> None:
        """The bundled schema round-trips its own vocabulary."""
        from jinntap.schema import load_registry

        registry = load_registry()
        xml = (
            '      <div><head type="level1">Title</head>'
            '<p>On <date when="1900-01-01">new year</date> in '
            '<placeName ref="#rome"><hi rend="b">Rome</hi></placeName>'
            '<pb n="2"></pb></p></div>\n'
            '      <noteGrp><note target="#a" n="1">See above</note></noteGrp>\n'
        )
        assert serialize(parse(xml, registry), registry) == xml

    def test_whitespace_characters_preserved(self, registry) -> None:
        """Tabs and line breaks in attributes and carriage returns in text survive."""
        document = Document(
            children=(
                Node(
                    "div",
                    {"type": "a\nb\tc"},
                    (Node("p", {"rend": "x\r\ny"}, (Text("a\r\nb\rc"),)),),
                ),
            )
        )
        xml = serialize(document, registry)
        assert "\t" not in xml
        assert parse(xml, registry) == document

    def test_dropped_top_level_node_line_ignored_on_parse(self, registry) -> None:
        """The empty line left by a dropped top-level node parses to nothing."""
        document = Document(children=(Node("figure"), Node("div", {"type": "a"})))
        xml = serialize(document, registry)
        assert parse(xml, registry) == Document(children=(Node("div", {"type": "a"}),))
