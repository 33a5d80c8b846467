"""Editor session: the surface the hosting shell talks to.

The session owns the registry and the current document snapshot. The
editing surface hands it new snapshots; the shell subscribes to content
changes and to activations of empty elements, and can ask for the current
XML at any time.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Mapping

from jinntap.config import DEFAULT_CONTENT
from jinntap.errors import Diagnostics
from jinntap.logging_config import logger
from jinntap.models import Document, Node
from jinntap.parser import DocumentParser
from jinntap.schema.registry import TypeRegistry
from jinntap.schema.spec import Archetype
from jinntap.serializer import DocumentSerializer


def attribute_string(attrs: Mapping[str, Any] | None) -> str:
    """Render attributes as ``key="value"`` pairs, for tooltips."""
    return " ".join(f'{key}="{value}"' for key, value in (attrs or {}).items() if value is not None)


@dataclass(frozen=True)
class ContentChange:
    """Payload of a content-change notification."""

    text: str
    xml: str


@dataclass(frozen=True)
class Activation:
    """Payload of an empty-element activation."""

    node: Node
    label: str
    tooltip: str


ContentChangeListener = Callable[[ContentChange], None]
ActivationListener = Callable[[Activation], None]


class EditorSession:
    """Current document state plus notification channels for one editor."""

    def __init__(self, registry: TypeRegistry, content: str | Document | None = None) -> None:
        """Initialize the session.

        Args:
            registry: Compiled types for this editor
            content: Initial XML or document (default: an empty division
                holding an empty paragraph)
        """
        self.registry = registry
        self._serializer = DocumentSerializer(registry)
        self._parser = DocumentParser(registry)
        self._content_listeners: list[ContentChangeListener] = []
        self._activation_listeners: list[ActivationListener] = []

        # problems found while loading and serializing the current snapshot
        self.diagnostics = Diagnostics()
        self._document = Document()
        self._xml: str | None = None
        if isinstance(content, Document):
            self._replace(content, Diagnostics())
        else:
            self._load(content or DEFAULT_CONTENT)

    @property
    def document(self) -> Document:
        return self._document

    @property
    def xml(self) -> str:
        """Serialized form of the current snapshot, computed once per snapshot."""
        if self._xml is None:
            self._xml = self._serializer.serialize(self._document, self.diagnostics)
        return self._xml

    @property
    def text(self) -> str:
        """Plain text of the current snapshot."""
        return self._document.text_content()

    def on_content_change(self, listener: ContentChangeListener) -> Callable[[], None]:
        """Subscribe to content changes; returns a function that unsubscribes."""
        self._content_listeners.append(listener)
        return lambda: self._content_listeners.remove(listener)

    def on_activate(self, listener: ActivationListener) -> Callable[[], None]:
        """Subscribe to empty-element activations; returns a function that unsubscribes."""
        self._activation_listeners.append(listener)
        return lambda: self._activation_listeners.remove(listener)

    def update(self, document: Document) -> None:
        """Replace the snapshot (called by the editing surface) and notify."""
        self._replace(document, Diagnostics())
        self._notify_content_change()

    def load(self, xml: str) -> Document:
        """Replace the snapshot with parsed XML and notify."""
        document = self._load(xml)
        self._notify_content_change()
        return document

    def _load(self, xml: str) -> Document:
        diagnostics = Diagnostics()
        document = self._parser.parse(xml, diagnostics)
        self._replace(document, diagnostics)
        return document

    def _replace(self, document: Document, diagnostics: Diagnostics) -> None:
        self._document = document
        self.diagnostics = diagnostics
        self._xml = None

    def activate(self, node: Node) -> Activation | None:
        """Signal that an empty element was activated in the editing surface.

        Args:
            node: The activated node

        Returns:
            The activation sent to listeners, or None if the node is not an
            empty element
        """
        descriptor = self.registry.get(node.type)
        if descriptor is None or descriptor.archetype is not Archetype.EMPTY_LEAF:
            logger.debug(f"Ignoring activation of <{node.type}>: not an empty element")
            return None

        activation = Activation(
            node=node,
            label=descriptor.label or "",
            tooltip=attribute_string(node.attrs),
        )
        for listener in list(self._activation_listeners):
            listener(activation)
        return activation

    def _notify_content_change(self) -> None:
        change = ContentChange(text=self.text, xml=self.xml)
        for listener in list(self._content_listeners):
            listener(change)
