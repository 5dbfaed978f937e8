"""Tests for the specification indexer."""

import copy

from openapi_directory.monitoring.metrics import MetricsManager
from openapi_directory.openapi import SpecIndexer, build_token_map


def snapshot(token_map):
    return {key: entry.to_dict() for key, entry in token_map.items()}


def test_build_token_map(petstore):
    token_map = build_token_map("petstore", petstore)

    assert len(token_map) == 8
    assert all(key == entry.id for key, entry in token_map.items())
    assert all(key.startswith("petstore|") for key in token_map)

    param1 = next(entry for entry in token_map.values() if entry.text == "param1 description")
    assert param1.paths == {"petstore|/pets|put", "petstore|/pets|post"}


def test_indexing_is_idempotent(petstore):
    first = build_token_map("petstore", petstore)
    second = build_token_map("petstore", petstore)

    assert snapshot(first) == snapshot(second)


def test_unresolvable_operation_is_skipped(petstore):
    document = copy.deepcopy(petstore)
    document["paths"]["/pets"]["post"]["parameters"] = [
        {"$ref": "#/components/parameters/Missing"}
    ]
    metrics = MetricsManager()

    indexer = SpecIndexer("petstore", document, metrics=metrics)
    token_map = indexer.build_token_map()

    assert list(indexer.skipped_operations) == ["post:/pets"]
    paths = set().union(*(entry.paths for entry in token_map.values()))
    assert paths == {"petstore|/pets|put", "petstore|/pets/{petId}|get"}
    assert metrics.get_value("operations_skipped_total", {"spec_id": "petstore"}) == 1
    assert metrics.get_value("token_map_size", {"spec_id": "petstore"}) == len(token_map)


def test_swagger_v2_document():
    document = {
        "swagger": "2.0",
        "securityDefinitions": {"auth": {"type": "oauth2", "flow": "implicit", "scopes": {}}},
        "paths": {
            "/orders": {
                "post": {
                    "summary": "Place an order",
                    "parameters": [
                        {"in": "body", "name": "body", "schema": {"$ref": "#/definitions/Order"}}
                    ],
                    "security": [{"auth": ["orders:write"]}],
                }
            }
        },
        "definitions": {
            "Order": {
                "type": "object",
                "properties": {"quantity": {"type": "integer", "description": "Units"}},
            }
        },
    }

    token_map = build_token_map("shop", document)

    texts = {entry.text for entry in token_map.values()}
    assert texts == {"Place an order", "body", "Units"}
    assert all(entry.scopes == {"shop|orders:write"} for entry in token_map.values())
