"""Tests for required-only schema views."""

from openapi_directory.schema import extract_required_schema


def test_none_stays_none():
    assert extract_required_schema(None) is None


def test_object_keeps_required_properties():
    schema = {
        "type": "object",
        "required": ["id"],
        "properties": {"id": {"type": "integer"}, "name": {"type": "string"}},
    }

    required = extract_required_schema(schema)

    assert required["properties"] == {"id": {"type": "integer"}}
    assert set(schema["properties"]) == {"id", "name"}


def test_object_without_required_keeps_nothing():
    schema = {"type": "object", "properties": {"name": {"type": "string"}}}

    assert extract_required_schema(schema)["properties"] == {}


def test_array_items_are_reduced():
    schema = {
        "type": "array",
        "items": {
            "type": "object",
            "required": ["a"],
            "properties": {"a": {}, "b": {}},
        },
    }

    assert extract_required_schema(schema)["items"]["properties"] == {"a": {}}


def test_tuple_items_are_reduced():
    schema = {
        "type": "array",
        "items": [
            {"type": "object", "required": [], "properties": {"a": {}}},
            {"type": "string"},
        ],
    }

    required = extract_required_schema(schema)

    assert required["items"] == [
        {"type": "object", "required": [], "properties": {}},
        {"type": "string"},
    ]
