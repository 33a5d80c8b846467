"""
Pydantic models for schema definitions

A schema definition maps element names to element specs. Specs are accepted
as written in the schema file (camelCase keys, archetype under ``type``).
"""

from enum import Enum
from typing import Any, Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from jinntap.config import ARCHETYPE_ALIASES


class Archetype(str, Enum):
    """Structural role of an element type"""

    INLINE_MARK = "inline-mark"
    EMPTY_LEAF = "empty-leaf"
    LIST_CONTAINER = "list-container"
    LIST_ITEM = "list-item"
    BLOCK = "block"

    @classmethod
    def resolve(cls, value: str | None) -> Optional["Archetype"]:
        """Map a schema archetype string (alias or canonical) to an Archetype.

        Returns None for anything unrecognized.
        """
        if not isinstance(value, str):
            return None
        canonical = ARCHETYPE_ALIASES.get(value, value)
        try:
            return cls(canonical)
        except ValueError:
            return None


class AttributeSpec(BaseModel):
    """Declaration of one attribute"""
    default: Any = None

    class Config:
        extra = "allow"


class ShortcutSpec(BaseModel):
    """Keyboard shortcut declaration"""
    attributes: Optional[dict[str, Any]] = None
    command: Optional[str] = None

    class Config:
        extra = "allow"


class ElementSpec(BaseModel):
    """Declarative spec of one element type"""
    archetype: Optional[str] = Field(
        None, validation_alias=AliasChoices("archetype", "type")
    )
    tag: Optional[str] = None
    group: Optional[str] = None
    content: Optional[str] = None
    label: Optional[str] = None
    priority: Optional[int] = None
    defining: Optional[bool] = None
    inline: Optional[bool] = None
    default_content: Any = Field(
        None, validation_alias=AliasChoices("defaultContent", "default_content")
    )
    attributes: dict[str, AttributeSpec] = Field(default_factory=dict)
    keyboard: dict[str, ShortcutSpec] = Field(default_factory=dict)

    class Config:
        extra = "ignore"

    @field_validator("attributes", "keyboard", mode="before")
    @classmethod
    def _empty_entries(cls, value: Any) -> Any:
        # `name:` with nothing after it loads as None
        if value is None:
            return {}
        if isinstance(value, dict):
            return {k: ({} if v is None else v) for k, v in value.items()}
        return value
