"""Required-only views of JSON Schemas."""

from copy import deepcopy
from typing import Optional

from .algebra import JSONSchema, schema_type


def extract_required_schema(schema: Optional[JSONSchema]) -> Optional[JSONSchema]:
    """Deep copy of a schema keeping only required object properties.

    Recurses into a single `items` schema and into every element of tuple `items`.
    """
    if schema is None:
        return None

    required_schema = deepcopy(schema)
    kind = schema_type(required_schema)

    if kind == "object" and isinstance(required_schema.get("properties"), dict):
        required = required_schema.get("required") or []
        required_schema["properties"] = {
            name: prop
            for name, prop in required_schema["properties"].items()
            if name in required
        }
    elif kind == "array":
        items = required_schema.get("items")
        if isinstance(items, dict):
            required_schema["items"] = extract_required_schema(items)
        elif isinstance(items, list):
            required_schema["items"] = [
                extract_required_schema(item) if isinstance(item, dict) else item
                for item in items
            ]

    return required_schema
