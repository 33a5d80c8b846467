"""Tests for commands and keyboard bindings."""

from jinntap.models import Node
from jinntap.schema.commands import (
    Command,
    EditAction,
    InsertCommand,
    SelectionContext,
    ShortcutBinding,
    ToggleListCommand,
    capitalize,
    list_item_enter_action,
    list_item_keymap,
)


class TestListItemEnter:
    """Tests for the list item Enter state machine."""

    def test_enter_at_start_of_empty_item_lifts(self) -> None:
        """Empty item with cursor at offset zero leaves the list."""
        assert list_item_enter_action(0, 0) is EditAction.LIFT_LIST_ITEM

    def test_enter_in_non_empty_item_splits(self) -> None:
        """Any non-empty item is split."""
        assert list_item_enter_action(0, 5) is EditAction.SPLIT_LIST_ITEM
        assert list_item_enter_action(3, 5) is EditAction.SPLIT_LIST_ITEM
        assert list_item_enter_action(5, 5) is EditAction.SPLIT_LIST_ITEM

    def test_keymap_enter_uses_selection(self) -> None:
        """Enter binding consults the cursor position."""
        keymap = list_item_keymap("item")

        empty = keymap["Enter"](SelectionContext(parent_offset=0, parent_content_size=0))
        assert empty.action == EditAction.LIFT_LIST_ITEM
        assert empty.type_name == "item"

        filled = keymap["Enter"](SelectionContext(parent_offset=2, parent_content_size=4))
        assert filled.action == EditAction.SPLIT_LIST_ITEM

    def test_keymap_tab_and_shift_tab(self) -> None:
        """Tab sinks, Shift-Tab lifts."""
        keymap = list_item_keymap("entry")
        assert set(keymap) == {"Enter", "Tab", "Shift-Tab"}
        assert keymap["Tab"]().action == EditAction.SINK_LIST_ITEM
        assert keymap["Shift-Tab"]().action == EditAction.LIFT_LIST_ITEM
        assert keymap["Tab"]().type_name == "entry"


class TestToggleListCommand:
    """Tests for ToggleListCommand."""

    def _command(self) -> ToggleListCommand:
        return ToggleListCommand(
            name="toggleList",
            action=EditAction.WRAP_IN_LIST.value,
            type_name="list",
            item_type="item",
        )

    def test_wraps_outside_list(self) -> None:
        """Outside a list the selection is wrapped in a new list."""
        intent = self._command()({"rend": "bulleted"}, SelectionContext(ancestors=("doc", "div", "p")))
        assert intent.action == EditAction.WRAP_IN_LIST
        assert intent.type_name == "list"
        assert intent.item_type == "item"
        assert dict(intent.attrs) == {"rend": "bulleted"}

    def test_lifts_inside_list(self) -> None:
        """Inside a list of this type the item is lifted out."""
        selection = SelectionContext(ancestors=("doc", "div", "list", "item", "p"))
        intent = self._command()(None, selection)
        assert intent.action == EditAction.LIFT_LIST_ITEM
        assert intent.type_name == "item"

    def test_without_selection_wraps(self) -> None:
        """No cursor information means wrap."""
        assert self._command()().action == EditAction.WRAP_IN_LIST


class TestCommands:
    """Tests for plain commands and shortcut bindings."""

    def test_command_passes_attributes(self) -> None:
        """Attributes become the intent's attributes."""
        command = Command(name="toggleHi", action=EditAction.TOGGLE_MARK.value, type_name="hi")
        intent = command({"rend": "b"})
        assert intent.action == "toggleMark"
        assert intent.type_name == "hi"
        assert dict(intent.attrs) == {"rend": "b"}

    def test_insert_creates_placeholder(self) -> None:
        """Insert carries an empty node with the given attributes."""
        command = InsertCommand(name="insertPb", action=EditAction.INSERT_CONTENT.value, type_name="pb")
        intent = command({"n": "3"})
        assert intent.content == Node(type="pb", attrs={"n": "3"})
        assert intent.content.children == ()

    def test_shortcut_binding_passes_own_attributes(self) -> None:
        """A binding runs its command with the shortcut's attributes."""
        command = Command(name="setHead", action=EditAction.SET_NODE.value, type_name="head")
        binding = ShortcutBinding(key="Mod-Alt-1", command=command, attributes={"type": "level1"})
        intent = binding()
        assert intent.action == "setNode"
        assert dict(intent.attrs) == {"type": "level1"}

    def test_capitalize(self) -> None:
        """Only the first character is upper-cased."""
        assert capitalize("persName") == "PersName"
        assert capitalize("p") == "P"
        assert capitalize("") == ""
