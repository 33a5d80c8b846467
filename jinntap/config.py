"""Shared configuration for the jinntap core."""

import json
from pathlib import Path
from typing import Any

import yaml
from jsonschema import ValidationError, validate

from jinntap.errors import SchemaDefinitionError

# Fixed leading whitespace for every top-level element in serialized output
TOP_LEVEL_INDENT = " " * 6

# Nesting depth beyond which subtrees are dropped with a diagnostic
MAX_DEPTH = 256

# Archetype strings accepted in a schema definition, mapped to canonical names
ARCHETYPE_ALIASES = {
    "inline": "inline-mark",
    "empty": "empty-leaf",
    "list": "list-container",
    "listItem": "list-item",
    "block": "block",
}

# Content expression of the built-in root container
ROOT_CONTENT = "div+ noteGrp?"

# Document a session starts with when no content is given
DEFAULT_CONTENT = "<div><p></p></div>"

DEFAULT_SCHEMA_PATH = Path(__file__).parent / "data" / "schema.yml"

# Shape of a schema definition file. Archetype strings are not enumerated;
# an unknown archetype rejects only its own entry, at compile time.
SCHEMA_DEFINITION_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "properties": {
            "type": {"type": "string"},
            "archetype": {"type": "string"},
            "tag": {"type": "string"},
            "group": {"type": "string"},
            "content": {"type": "string"},
            "label": {"type": "string"},
            "priority": {"type": "integer"},
            "defining": {"type": "boolean"},
            "inline": {"type": "boolean"},
            "attributes": {
                "type": "object",
                "additionalProperties": {"type": ["object", "null"]},
            },
            "keyboard": {
                "type": "object",
                "additionalProperties": {
                    "type": ["object", "null"],
                    "properties": {
                        "attributes": {"type": ["object", "null"]},
                        "command": {"type": "string"},
                    },
                },
            },
        },
    },
}


def validate_schema_definition(definition: Any, source: str = "") -> None:
    """Validate the overall shape of a schema definition.

    Args:
        definition: The loaded schema definition
        source: Where the definition came from, used in error messages

    Raises:
        SchemaDefinitionError: If the definition does not have the expected shape
    """
    try:
        validate(instance=definition, schema=SCHEMA_DEFINITION_SCHEMA)
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise SchemaDefinitionError(
            f"Invalid schema definition at {location}: {e.message}", source=source
        ) from e


def load_schema_definition(path: Path | str | None = None) -> dict[str, Any]:
    """Load a schema definition from a YAML or JSON file.

    Args:
        path: Path to the file (default: the bundled schema)

    Returns:
        Mapping of element name to element spec

    Raises:
        SchemaDefinitionError: If the file cannot be parsed or has the wrong shape
    """
    schema_path = Path(path) if path is not None else DEFAULT_SCHEMA_PATH

    try:
        with open(schema_path, "r", encoding="utf-8") as f:
            if schema_path.suffix == ".json":
                definition = json.load(f)
            else:
                definition = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise SchemaDefinitionError(str(e), source=str(schema_path)) from e

    if definition is None:
        definition = {}

    validate_schema_definition(definition, source=str(schema_path))
    return definition
