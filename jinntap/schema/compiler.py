"""Compilation of schema definitions into type registries.

Each element entry is dispatched on its archetype. The archetype fixes the
content constraint, the generated commands and the default keyboard
behaviour. Plain blocks take their content constraint from the entry.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from pydantic import ValidationError

from jinntap.config import load_schema_definition
from jinntap.errors import DiagnosticKind, Diagnostics, SchemaCompilationError
from jinntap.logging_config import logger
from jinntap.models import ROOT_TYPE, TEXT_TYPE
from jinntap.schema.attributes import compile_attributes
from jinntap.schema.commands import (
    Command,
    EditAction,
    InsertCommand,
    ShortcutBinding,
    ToggleListCommand,
    capitalize,
    list_item_keymap,
)
from jinntap.schema.content import ContentExpressionError, ContentModel
from jinntap.schema.registry import TypeDescriptor, TypeRegistry
from jinntap.schema.spec import Archetype, ElementSpec

LIST_CONTENT = "item+"
LIST_ITEM_CONTENT = "p block*"
LIST_ITEM_GROUP = "item"
BLOCK_CONTENT = "inline*"
EMPTY_LABEL = "Empty Element"

RESERVED_NAMES = frozenset({ROOT_TYPE, TEXT_TYPE})


@dataclass
class ArchetypeRules:
    """What an archetype contributes to a compiled type."""

    content: str
    group: str | None
    commands: dict[str, Command] = field(default_factory=dict)
    default_command: Command | None = None
    """Command a shortcut runs when it names none."""
    defining: bool = False
    inline: bool = False
    fixed_shortcuts: dict[str, ShortcutBinding] | None = None
    """Keymap that replaces declared shortcuts entirely."""


def _inline_mark_rules(name: str, spec: ElementSpec, item_type: str) -> ArchetypeRules:
    toggle = Command(
        name=f"toggle{capitalize(name)}", action=EditAction.TOGGLE_MARK.value, type_name=name
    )
    return ArchetypeRules(
        content="",
        group=None,
        commands={toggle.name: toggle},
        default_command=toggle,
        inline=True,
    )


def _empty_leaf_rules(name: str, spec: ElementSpec, item_type: str) -> ArchetypeRules:
    insert = InsertCommand(
        name=f"insert{capitalize(name)}", action=EditAction.INSERT_CONTENT.value, type_name=name
    )
    return ArchetypeRules(
        content="",
        group="inline",
        commands={insert.name: insert},
        default_command=insert,
        inline=True,
    )


def _list_container_rules(name: str, spec: ElementSpec, item_type: str) -> ArchetypeRules:
    toggle = ToggleListCommand(
        name="toggleList",
        action=EditAction.WRAP_IN_LIST.value,
        type_name=name,
        item_type=item_type,
    )
    return ArchetypeRules(
        content=LIST_CONTENT,
        group="block",
        commands={toggle.name: toggle},
        default_command=toggle,
        defining=True,
    )


def _list_item_rules(name: str, spec: ElementSpec, item_type: str) -> ArchetypeRules:
    if spec.keyboard:
        logger.debug(f"<{name}> uses the fixed list item keymap, declared shortcuts ignored")
    return ArchetypeRules(
        content=LIST_ITEM_CONTENT,
        group=LIST_ITEM_GROUP,
        fixed_shortcuts=list_item_keymap(name),
    )


def _block_rules(name: str, spec: ElementSpec, item_type: str) -> ArchetypeRules:
    suffix = capitalize(name)
    commands = {
        f"set{suffix}": Command(f"set{suffix}", EditAction.SET_NODE.value, name),
        f"wrap{suffix}": Command(f"wrap{suffix}", EditAction.WRAP_IN.value, name),
        f"lift{suffix}": Command(f"lift{suffix}", EditAction.LIFT.value, name),
    }
    return ArchetypeRules(
        content=spec.content if spec.content is not None else BLOCK_CONTENT,
        group=spec.group or "block",
        commands=commands,
        default_command=commands[f"set{suffix}"],
        defining=bool(spec.defining),
        inline=bool(spec.inline),
    )


ARCHETYPE_RULES: dict[Archetype, Callable[[str, ElementSpec, str], ArchetypeRules]] = {
    Archetype.INLINE_MARK: _inline_mark_rules,
    Archetype.EMPTY_LEAF: _empty_leaf_rules,
    Archetype.LIST_CONTAINER: _list_container_rules,
    Archetype.LIST_ITEM: _list_item_rules,
    Archetype.BLOCK: _block_rules,
}


def _coerce_spec(name: str, spec: ElementSpec | Mapping[str, Any] | None) -> ElementSpec:
    if isinstance(spec, ElementSpec):
        return spec
    try:
        return ElementSpec.model_validate(spec or {})
    except ValidationError as e:
        raise SchemaCompilationError(name, None, reason=f"malformed spec ({e.error_count()} errors)") from e


def compile_shortcuts(
    spec: ElementSpec, rules: ArchetypeRules, type_name: str
) -> dict[str, ShortcutBinding]:
    """Bind declared shortcuts to commands.

    A shortcut naming a ``command`` runs that command: one of the type's own
    commands when the name matches, otherwise an editor command of that name
    applied to this type. Other shortcuts run the archetype's default command.
    """
    if rules.fixed_shortcuts is not None:
        return dict(rules.fixed_shortcuts)

    shortcuts: dict[str, ShortcutBinding] = {}
    for key, config in spec.keyboard.items():
        if config.command:
            command = rules.commands.get(config.command) or Command(
                name=config.command, action=config.command, type_name=type_name
            )
        elif rules.default_command is not None:
            command = rules.default_command
        else:
            continue
        shortcuts[key] = ShortcutBinding(key=key, command=command, attributes=config.attributes or {})
    return shortcuts


def compile_element(
    name: str,
    spec: ElementSpec | Mapping[str, Any] | None,
    item_type: str = "item",
) -> TypeDescriptor:
    """Compile one element spec into a type descriptor.

    Args:
        name: Element name (the registry key)
        spec: The element spec, as a model or as loaded from a schema file
        item_type: List item type that list containers wrap content in

    Returns:
        The compiled TypeDescriptor

    Raises:
        SchemaCompilationError: If the archetype is not recognized, the name
            is reserved, or the entry is malformed
    """
    element_spec = _coerce_spec(name, spec)

    if name in RESERVED_NAMES:
        raise SchemaCompilationError(name, element_spec.archetype, reason="name is reserved for a built-in type")

    archetype = Archetype.resolve(element_spec.archetype)
    if archetype is None:
        raise SchemaCompilationError(name, element_spec.archetype)

    rules = ARCHETYPE_RULES[archetype](name, element_spec, item_type)

    try:
        content_model = ContentModel.parse(rules.content)
    except ContentExpressionError as e:
        raise SchemaCompilationError(name, element_spec.archetype, reason=str(e)) from e

    label = element_spec.label
    if archetype is Archetype.EMPTY_LEAF and not label:
        label = EMPTY_LABEL

    return TypeDescriptor(
        name=name,
        tag=element_spec.tag or name,
        archetype=archetype,
        content_model=content_model,
        attributes=compile_attributes(element_spec.attributes),
        commands=rules.commands,
        shortcuts=compile_shortcuts(element_spec, rules, name),
        group=rules.group,
        label=label,
        priority=element_spec.priority,
        defining=rules.defining,
        inline=rules.inline,
        default_content=element_spec.default_content,
    )


def _entries(
    definition: Mapping[str, Any] | Iterable[tuple[str, Any]],
) -> list[tuple[str, Any]]:
    if isinstance(definition, Mapping):
        return list(definition.items())
    return list(definition)


def _item_type(compiled: Mapping[str, TypeDescriptor]) -> str:
    """Name of the first list item type that compiled, or the fallback name."""
    for descriptor in compiled.values():
        if descriptor.archetype is Archetype.LIST_ITEM:
            return descriptor.name
    return LIST_ITEM_GROUP


def compile_schema(
    definition: Mapping[str, Any] | Iterable[tuple[str, Any]],
    diagnostics: Diagnostics | None = None,
    strict: bool = False,
) -> TypeRegistry:
    """Compile a schema definition into a type registry.

    Entries that fail to compile are recorded and left out; the rest of the
    schema still compiles. When a name is declared twice the later entry
    replaces the earlier one. Keeping names unique is the schema author's
    job, not the compiler's.

    Args:
        definition: Mapping of element name to spec, or (name, spec) pairs
        diagnostics: Collector for rejected entries
        strict: Raise on the first rejected entry instead of recording it

    Returns:
        TypeRegistry with the built-in root and text types plus every
        compiled element type

    Raises:
        SchemaCompilationError: Only when strict is set
    """
    if diagnostics is None:
        diagnostics = Diagnostics()

    entries = _entries(definition)
    compiled: dict[str, TypeDescriptor] = {}
    accepted: dict[str, Any] = {}

    with logger.indent_block(f"Compiling schema ({len(entries)} entries)"):
        for name, spec in entries:
            try:
                descriptor = compile_element(name, spec)
                clash = next(
                    (d for d in compiled.values() if d.tag == descriptor.tag and d.name != name),
                    None,
                )
                if clash is not None:
                    raise SchemaCompilationError(
                        name,
                        descriptor.archetype.value,
                        reason=f"tag <{descriptor.tag}> already used by {clash.name}",
                    )
            except SchemaCompilationError as e:
                if strict:
                    raise
                diagnostics.record(DiagnosticKind.SCHEMA_COMPILATION, str(e), name=name)
                continue

            if name in compiled:
                logger.debug(f"<{name}> redeclared, later declaration wins")
            else:
                logger.debug(f"<{name}> {descriptor.archetype.value}")
            compiled[name] = descriptor
            accepted[name] = spec

        # list containers wrap in an item type that made it into the registry
        item_type = _item_type(compiled)
        for name, descriptor in list(compiled.items()):
            if descriptor.archetype is Archetype.LIST_CONTAINER:
                compiled[name] = compile_element(name, accepted[name], item_type=item_type)

    return TypeRegistry(compiled.values())


def load_registry(
    path: Path | str | None = None,
    diagnostics: Diagnostics | None = None,
) -> TypeRegistry:
    """Load a schema definition file and compile it.

    Args:
        path: Schema file (default: the bundled schema)
        diagnostics: Collector for rejected entries

    Returns:
        The compiled TypeRegistry
    """
    return compile_schema(load_schema_definition(path), diagnostics=diagnostics)
