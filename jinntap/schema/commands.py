"""Editing operations and keyboard bindings generated for element types.

The core does not edit documents. A command only describes the edit: called
with attributes (and, where it matters, the cursor position) it returns an
``EditIntent`` that the editing surface carries out.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from jinntap.models import Node


class EditAction(str, Enum):
    """Primitive edits the editing surface knows how to perform."""

    TOGGLE_MARK = "toggleMark"
    SET_NODE = "setNode"
    WRAP_IN = "wrapIn"
    LIFT = "lift"
    WRAP_IN_LIST = "wrapInList"
    LIFT_LIST_ITEM = "liftListItem"
    SPLIT_LIST_ITEM = "splitListItem"
    SINK_LIST_ITEM = "sinkListItem"
    INSERT_CONTENT = "insertContent"


@dataclass(frozen=True)
class SelectionContext:
    """Cursor position as seen by a command.

    Attributes:
        ancestors: Type names from the root down to the cursor's parent node
        parent_offset: Cursor offset inside its parent node
        parent_content_size: Content size of the cursor's parent node
    """

    ancestors: tuple[str, ...] = ()
    parent_offset: int = 0
    parent_content_size: int = 0

    def inside(self, type_name: str) -> bool:
        return type_name in self.ancestors


@dataclass(frozen=True)
class EditIntent:
    """An edit requested by a command, for the editing surface to apply."""

    action: str
    type_name: str
    attrs: Mapping[str, Any] = field(default_factory=dict)
    item_type: str | None = None
    """List item type, for list wrapping."""
    content: Node | None = None
    """Node to insert, for insertions."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "attrs", MappingProxyType(dict(self.attrs or {})))


@dataclass(frozen=True)
class Command:
    """A named operation bound to one element type."""

    name: str
    action: str
    type_name: str

    def __call__(
        self,
        attributes: Mapping[str, Any] | None = None,
        selection: SelectionContext | None = None,
    ) -> EditIntent:
        return EditIntent(action=self.action, type_name=self.type_name, attrs=attributes or {})


@dataclass(frozen=True)
class ToggleListCommand(Command):
    """Wrap the selection in a new list, or lift it out if already inside one."""

    item_type: str = "item"

    def __call__(
        self,
        attributes: Mapping[str, Any] | None = None,
        selection: SelectionContext | None = None,
    ) -> EditIntent:
        if selection is not None and selection.inside(self.type_name):
            return EditIntent(
                action=EditAction.LIFT_LIST_ITEM.value,
                type_name=self.item_type,
            )
        return EditIntent(
            action=EditAction.WRAP_IN_LIST.value,
            type_name=self.type_name,
            attrs=attributes or {},
            item_type=self.item_type,
        )


@dataclass(frozen=True)
class InsertCommand(Command):
    """Insert an empty placeholder node carrying the given attributes."""

    def __call__(
        self,
        attributes: Mapping[str, Any] | None = None,
        selection: SelectionContext | None = None,
    ) -> EditIntent:
        placeholder = Node(type=self.type_name, attrs=attributes or {})
        return EditIntent(
            action=self.action,
            type_name=self.type_name,
            attrs=attributes or {},
            content=placeholder,
        )


def list_item_enter_action(parent_offset: int, parent_content_size: int) -> EditAction:
    """Decide what Enter does inside a list item.

    At the start of an empty item Enter leaves the list; anywhere else it
    splits the item in two.
    """
    if parent_offset == 0 and parent_content_size == 0:
        return EditAction.LIFT_LIST_ITEM
    return EditAction.SPLIT_LIST_ITEM


@dataclass(frozen=True)
class ListItemEnterCommand(Command):
    """Enter key handling for list items."""

    def __call__(
        self,
        attributes: Mapping[str, Any] | None = None,
        selection: SelectionContext | None = None,
    ) -> EditIntent:
        selection = selection if selection is not None else SelectionContext()
        action = list_item_enter_action(selection.parent_offset, selection.parent_content_size)
        return EditIntent(action=action.value, type_name=self.type_name)


@dataclass(frozen=True)
class ShortcutBinding:
    """A keyboard shortcut bound to a command with fixed arguments."""

    key: str
    command: Command
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes or {})))

    def __call__(self, selection: SelectionContext | None = None) -> EditIntent:
        return self.command(self.attributes, selection)


def capitalize(name: str) -> str:
    """Upper-case the first character only (``persName`` -> ``PersName``)."""
    return name[:1].upper() + name[1:]


def list_item_keymap(type_name: str) -> dict[str, ShortcutBinding]:
    """The fixed Enter / Tab / Shift-Tab bindings shared by every list item type."""
    return {
        "Enter": ShortcutBinding(
            key="Enter",
            command=ListItemEnterCommand(
                name="enter", action=EditAction.SPLIT_LIST_ITEM.value, type_name=type_name
            ),
        ),
        "Tab": ShortcutBinding(
            key="Tab",
            command=Command(
                name="sinkListItem", action=EditAction.SINK_LIST_ITEM.value, type_name=type_name
            ),
        ),
        "Shift-Tab": ShortcutBinding(
            key="Shift-Tab",
            command=Command(
                name="liftListItem", action=EditAction.LIFT_LIST_ITEM.value, type_name=type_name
            ),
        ),
    }
