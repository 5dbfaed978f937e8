"""Tests for the schema algebra."""

import json

import pytest

from openapi_directory.exceptions import TypeMismatchError
from openapi_directory.schema import (
    chunk_schema,
    deepen_schema,
    get_sub_schema,
    merge_schema,
    schema_type,
    shallow_schema,
)


def one_token(value):
    return 1


@pytest.fixture
def pet_schema():
    return {
        "type": "object",
        "title": "Pet",
        "required": ["name"],
        "properties": {
            "name": {"type": "string", "description": "Pet name"},
            "tag": {"type": "string"},
            "owner": {
                "type": "object",
                "properties": {
                    "id": {"type": "integer"},
                    "email": {"type": "string", "format": "email"},
                },
            },
        },
    }


def test_schema_type_inference():
    assert schema_type({"type": "string"}) == "string"
    assert schema_type({"properties": {}}) == "object"
    assert schema_type({"items": {}}) == "array"
    assert schema_type({}) is None
    assert schema_type("not a schema") is None


def test_shallow_schema_strips_structure(pet_schema):
    shallow = shallow_schema(pet_schema)

    assert "properties" not in shallow
    assert shallow["type"] == "object"
    assert shallow["title"] == "Pet"
    assert shallow["required"] == ["name"]


def test_shallow_schema_drops_oversized_keywords():
    schema = {
        "type": "string",
        "title": "A rather long title that is always kept",
        "description": "x" * 50,
        "enum": ["a", "b"],
    }

    shallow = shallow_schema(
        schema, keyword_token_limit=10, length_function=lambda value: len(json.dumps(value))
    )

    assert shallow == {
        "type": "string",
        "title": "A rather long title that is always kept",
        "enum": ["a", "b"],
    }


def test_chunk_pulls_required_properties_out():
    schema = {
        "type": "object",
        "properties": {
            "a": {"type": "string"},
            "b": {"type": "string"},
            "c": {"type": "string"},
        },
        "required": ["a"],
    }

    chunks = chunk_schema(schema, chunk_required=False, token_limit=10**6)

    assert len(chunks) == 1
    assert chunks[0].property_names == ["b", "c"]
    assert set(chunks[0].schema["properties"]) == {"a", "b", "c"}
    assert chunks[0].schema["required"] == ["a"]


def test_chunk_required_when_requested():
    schema = {
        "type": "object",
        "properties": {"a": {"type": "string"}, "b": {"type": "string"}},
        "required": ["a"],
    }

    chunks = chunk_schema(schema, chunk_required=True, token_limit=10**6)

    assert chunks[0].property_names == ["a", "b"]


def test_chunks_are_disjoint_and_cover_all_properties():
    schema = {
        "type": "object",
        "properties": {name: {"type": "string"} for name in "abcde"},
        "required": ["a"],
    }

    chunks = chunk_schema(schema, token_limit=2, length_function=one_token)

    assert [chunk.property_names for chunk in chunks] == [["b", "c"], ["d", "e"]]
    names = [name for chunk in chunks for name in chunk.property_names]
    assert len(names) == len(set(names))
    assert set(names) | {"a"} == set(schema["properties"])
    for chunk in chunks:
        assert "a" in chunk.schema["properties"]


def test_oversized_property_gets_its_own_chunk():
    schema = {
        "type": "object",
        "properties": {
            "x": {"type": "string"},
            "y": {"type": "string", "description": "big"},
            "z": {"type": "string"},
        },
    }

    def measure(value):
        return 10 if "big" in json.dumps(value) else 1

    chunks = chunk_schema(schema, token_limit=3, length_function=measure)

    assert [chunk.property_names for chunk in chunks] == [["x"], ["y"], ["z"]]


def test_chunk_array_wraps_items():
    schema = {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {"p": {"type": "string"}, "q": {"type": "integer"}},
        },
    }

    chunks = chunk_schema(schema, token_limit=10**6)

    assert len(chunks) == 1
    assert chunks[0].property_names == ["p", "q"]
    assert chunks[0].schema["type"] == "array"
    assert set(chunks[0].schema["items"]["properties"]) == {"p", "q"}


@pytest.mark.parametrize(
    "schema",
    [
        {"type": "string"},
        {"type": ["object", "null"], "properties": {"a": {"type": "string"}}},
        {"properties": {"a": {"type": "string"}}},
    ],
)
def test_chunk_opaque_schemas_yield_identity_chunk(schema):
    chunks = chunk_schema(schema, token_limit=10)

    assert len(chunks) == 1
    assert chunks[0].property_names == []
    assert chunks[0].schema == schema


def test_get_sub_schema_keeps_selection(pet_schema):
    original = json.dumps(pet_schema, sort_keys=True)

    sub_schema = get_sub_schema(pet_schema, ["tag", "unknown"])

    assert list(sub_schema["properties"]) == ["tag"]
    assert sub_schema["required"] == ["name"]
    assert json.dumps(pet_schema, sort_keys=True) == original


def test_get_sub_schema_recurses_into_items():
    schema = {
        "type": "array",
        "items": {"type": "object", "properties": {"a": {}, "b": {}}},
    }

    assert get_sub_schema(schema, ["b"])["items"]["properties"] == {"b": {}}


def test_merge_of_disjoint_sub_schemas(pet_schema):
    merged = merge_schema(
        get_sub_schema(pet_schema, ["name"]),
        get_sub_schema(pet_schema, ["owner"]),
    )

    assert merged["properties"] == get_sub_schema(pet_schema, ["name", "owner"])["properties"]


def test_merge_objects():
    left = {"type": "object", "required": ["a"], "properties": {"a": {"type": "string"}}}
    right = {
        "properties": {"a": {"type": "integer"}, "b": {"type": "string"}},
        "required": ["b", "a"],
    }

    merged = merge_schema(left, right)

    assert merged["type"] == "object"
    assert merged["required"] == ["a", "b"]
    assert merged["properties"] == {"a": {"type": "integer"}, "b": {"type": "string"}}
    assert left["properties"] == {"a": {"type": "string"}}


def test_merge_arrays():
    left = {"type": "array", "items": {"type": "object", "properties": {"a": {}}}}
    right = {"type": "array", "items": {"type": "object", "properties": {"b": {}}}}

    assert set(merge_schema(left, right)["items"]["properties"]) == {"a", "b"}


def test_merge_tuple_items():
    left = {"type": "array", "items": [{"type": "string"}]}
    right = {"type": "array", "items": [{"type": "string", "format": "date"}, {"type": "integer"}]}

    merged = merge_schema(left, right)

    assert merged["items"] == [{"type": "string", "format": "date"}, {"type": "integer"}]


def test_merge_type_mismatch():
    with pytest.raises(TypeMismatchError) as exc_info:
        merge_schema({"type": "object"}, {"type": "array"})

    assert isinstance(exc_info.value, TypeError)


def test_deepen_restores_shallow_schema(pet_schema):
    assert deepen_schema(pet_schema, shallow_schema(pet_schema)) == pet_schema


def test_deepen_keeps_filtered_properties(pet_schema):
    filtered = {"type": "object", "properties": {"owner": {"type": "object"}}}

    deepened = deepen_schema(pet_schema, filtered)

    assert list(deepened["properties"]) == ["owner"]
    assert set(deepened["properties"]["owner"]["properties"]) == {"id", "email"}
    assert deepened["required"] == ["name"]


def test_deepen_array_items():
    full = {
        "type": "array",
        "items": {"type": "object", "properties": {"a": {"type": "object", "properties": {"x": {}}}}},
    }
    filtered = {"type": "array", "items": {"type": "object", "properties": {"a": {"type": "object"}}}}

    deepened = deepen_schema(full, filtered)

    assert deepened["items"]["properties"]["a"]["properties"] == {"x": {}}


def test_deepen_type_mismatch():
    with pytest.raises(TypeMismatchError):
        deepen_schema({"type": "object"}, {"type": "string"})
