"""Compilation of declarative schema definitions into element types."""

from jinntap.schema.attributes import AttributeDescriptor, compile_attribute
from jinntap.schema.commands import (
    Command,
    EditAction,
    EditIntent,
    SelectionContext,
    ShortcutBinding,
    list_item_enter_action,
)
from jinntap.schema.compiler import compile_element, compile_schema, load_registry
from jinntap.schema.content import ContentExpressionError, ContentModel
from jinntap.schema.registry import TypeDescriptor, TypeRegistry
from jinntap.schema.spec import Archetype, ElementSpec

__all__ = [
    "Archetype",
    "AttributeDescriptor",
    "Command",
    "ContentExpressionError",
    "ContentModel",
    "EditAction",
    "EditIntent",
    "ElementSpec",
    "SelectionContext",
    "ShortcutBinding",
    "TypeDescriptor",
    "TypeRegistry",
    "compile_attribute",
    "compile_element",
    "compile_schema",
    "list_item_enter_action",
    "load_registry",
]
