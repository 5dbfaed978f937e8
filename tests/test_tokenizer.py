"""Tests for the operation tokenizer."""

import hashlib

import pytest

from openapi_directory.constants import MAX_CHARS_PER_TOKEN
from openapi_directory.openapi import tokenizer
from openapi_directory.openapi.dereference import SpecDereferencer
from openapi_directory.openapi.tokenizer import OperationTokenizer, entry_id, normalize_text

SPEC_ID = "api-spec-id"


def digest(text):
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def tokenize(document, token_map, url_path, method):
    dereferencer = SpecDereferencer(document)
    operation = dereferencer.dereference_operation(url_path, method)
    parameters = dereferencer.inline(document["paths"][url_path].get("parameters") or [])
    return OperationTokenizer(
        token_map, SPEC_ID, url_path, method, operation, parameters, "oa"
    ).tokenize()


def test_put_operation_entries(petstore):
    token_map = tokenize(petstore, {}, "/pets", "put")

    texts = {entry.text for entry in token_map.values()}
    assert texts == {
        "Put pets endpoint description",
        "param1 description",
        "param2 description",
        "Pet name",
        "children",
    }

    entry = token_map[f"{SPEC_ID}|{digest('Put pets endpoint description')}"]
    assert entry.spec_id == SPEC_ID
    assert entry.paths == {"api-spec-id|/pets|put"}
    assert entry.scopes == {
        "api-spec-id|write:pets",
        "api-spec-id|read:pets",
        "api-spec-id|admin:pets",
    }


def test_shared_parameter_text_collapses_into_one_entry(petstore):
    token_map = {}
    tokenize(petstore, token_map, "/pets", "put")
    tokenize(petstore, token_map, "/pets", "post")

    matching = [entry for entry in token_map.values() if entry.text == "param2 description"]
    assert len(matching) == 1
    assert matching[0].paths == {"api-spec-id|/pets|put", "api-spec-id|/pets|post"}
    assert "api-spec-id|create:pets" in matching[0].scopes
    assert "api-spec-id|read:pets" in matching[0].scopes


def test_operation_without_security_has_no_scopes(petstore):
    token_map = tokenize(petstore, {}, "/pets/{petId}", "get")

    texts = {entry.text: entry for entry in token_map.values()}
    assert set(texts) == {"getPet", "The id of the pet"}
    assert texts["getPet"].scopes == set()


def test_operation_parameters_override_path_item_parameters():
    operation = {
        "description": "Search",
        "parameters": [{"name": "q", "in": "query", "description": "Operation level"}],
    }
    path_item_parameters = [{"name": "q", "in": "query", "description": "Path level"}]

    token_map = OperationTokenizer(
        {}, SPEC_ID, "/search", "get", operation, path_item_parameters
    ).tokenize()

    texts = {entry.text for entry in token_map.values()}
    assert texts == {"Search", "Operation level"}


def test_parameter_name_fallback():
    operation = {"summary": "Lookup", "parameters": [{"name": "limit", "in": "query"}]}

    token_map = OperationTokenizer({}, SPEC_ID, "/lookup", "get", operation).tokenize()

    assert {entry.text for entry in token_map.values()} == {"Lookup", "limit"}


def test_array_body_properties():
    operation = {
        "operationId": "bulkCreate",
        "requestBody": {
            "content": {
                "text/plain": {"schema": {"type": "string"}},
                "application/json": {
                    "schema": {
                        "type": "array",
                        "items": {
                            "type": "object",
                            "properties": {"sku": {"description": "Stock keeping unit"}},
                        },
                    }
                },
            }
        },
    }

    token_map = OperationTokenizer({}, SPEC_ID, "/items", "post", operation).tokenize()

    assert {entry.text for entry in token_map.values()} == {"bulkCreate", "Stock keeping unit"}


def test_entry_id_is_content_address():
    assert entry_id("spec", "text") == f"spec|{digest('text')}"
    assert entry_id("spec", "text") != entry_id("other", "text")


def test_normalize_text_cleans_markup():
    assert normalize_text("<p>Hello&amp;   world</p>\x07\n") == "Hello& world"
    assert normalize_text(None) == ""


@pytest.mark.parametrize("limit", [10, 50])
def test_normalize_text_truncates_to_budget(limit):
    text = " ".join(f"word{i}" for i in range(300))

    normalized = normalize_text(text, token_limit=limit)

    assert len(normalized.split()) <= limit
    assert text.startswith(normalized)


def test_normalize_text_pre_trims_long_text(monkeypatch):
    counted = []
    real_count = tokenizer.count_tokens

    def counting(text, *args, **kwargs):
        counted.append(len(text))
        return real_count(text, *args, **kwargs)

    monkeypatch.setattr(tokenizer, "count_tokens", counting)
    text = "word " * 200_000

    normalized = normalize_text(text, token_limit=50)

    assert normalized
    assert len(normalized.split()) <= 50
    assert text.startswith(normalized)
    assert max(counted) <= 50 * MAX_CHARS_PER_TOKEN
    assert len(counted) <= 3


def test_swagger_v2_body_parameter_properties():
    operation = {
        "summary": "Place orders",
        "parameters": [
            {
                "in": "body",
                "name": "orders",
                "schema": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "quantity": {"type": "integer", "description": "Units"},
                            "sku": {"type": "string"},
                        },
                    },
                },
            }
        ],
    }

    token_map = OperationTokenizer({}, SPEC_ID, "/orders", "post", operation).tokenize()

    assert {entry.text for entry in token_map.values()} == {
        "Place orders",
        "orders",
        "Units",
        "sku",
    }


def test_request_body_wins_over_body_parameter():
    operation = {
        "summary": "Mixed",
        "parameters": [
            {"in": "body", "name": "legacy", "schema": {"type": "object", "properties": {"old": {}}}}
        ],
        "requestBody": {
            "content": {
                "application/json": {
                    "schema": {"type": "object", "properties": {"new": {"description": "New"}}}
                }
            }
        },
    }

    token_map = OperationTokenizer({}, SPEC_ID, "/mixed", "post", operation).tokenize()

    assert {entry.text for entry in token_map.values()} == {"Mixed", "legacy", "New"}
