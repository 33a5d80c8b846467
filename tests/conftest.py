"""
Pytest configuration and fixtures for jinntap tests
"""
import pytest

from jinntap.errors import Diagnostics
from jinntap.logging_config import GlobalIndent
from jinntap.schema import compile_schema


@pytest.fixture(autouse=True)
def reset_log_indent():
    """Keep indentation state from leaking between tests"""
    GlobalIndent.reset()
    yield
    GlobalIndent.reset()


@pytest.fixture
def schema_definition():
    """Schema definition covering every archetype"""
    return {
        "div": {"type": "block", "content": "block*", "attributes": {"type": {}}},
        "p": {"type": "block", "content": "inline*", "attributes": {"rend": {}}},
        "note": {
            "type": "block",
            "content": "inline*",
            "attributes": {"id": {}, "n": {}},
        },
        "hi": {
            "type": "inline",
            "attributes": {"rend": {}},
            "keyboard": {"Mod-i": {"attributes": {"rend": "i"}}},
        },
        "persName": {"type": "inline", "attributes": {"ref": {}}},
        "list": {"type": "list", "keyboard": {"Mod-Shift-8": {}}},
        "item": {"type": "listItem"},
        "pb": {
            "type": "empty",
            "label": "page",
            "attributes": {"n": {}, "facs": {}},
            "keyboard": {"Mod-Enter": {"attributes": {"n": "1"}}},
        },
    }


@pytest.fixture
def diagnostics():
    """Fresh diagnostics collector"""
    return Diagnostics()


@pytest.fixture
def registry(schema_definition):
    """Registry compiled from the test schema definition"""
    return compile_schema(schema_definition)
