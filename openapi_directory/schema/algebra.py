"""
JSON Schema algebra for negotiating oversized schemas with token-limited consumers.

A large request schema is first reduced to a shallow view and split into token-bounded
chunks of sibling properties. The consumer picks relevant properties from each chunk. The
picks are cut out with `get_sub_schema`, accumulated with `merge_schema`, and
`deepen_schema` finally restores the nested structure the shallow view removed.

All functions are pure: inputs are never mutated and results never alias their inputs.

Example Usage:
    from openapi_directory.schema import chunk_schema, deepen_schema, get_sub_schema, merge_schema

    filtered = {"type": "object", "properties": {}}
    for chunk in chunk_schema(schema, token_limit=2000):
        picked = pick(chunk.property_names)
        filtered = merge_schema(filtered, get_sub_schema(chunk.schema, picked))
    result = deepen_schema(schema, filtered)
"""

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..config import config
from ..constants import SHALLOW_HINT_KEYWORDS, STRUCTURAL_KEYWORDS
from ..exceptions import TypeMismatchError
from ..utils.tokens import tokenized_length

logger = logging.getLogger(__name__)

JSONSchema = Dict[str, Any]
LengthFunction = Callable[[Any], int]


@dataclass
class SchemaChunk:
    """A token-bounded slice of a schema's properties.

    Attributes:
        property_names: Properties the consumer may pick from this chunk. Empty when there
            is nothing to shortlist.
        schema: The chunk as a schema: the shallow parent plus the chunked properties (and
            any required properties pulled out of chunking).
    """

    property_names: List[str] = field(default_factory=list)
    schema: JSONSchema = field(default_factory=dict)


def schema_type(schema: Any) -> Optional[Any]:
    """Declared type of a schema, inferred from `properties`/`items` when absent."""
    if not isinstance(schema, dict):
        return None
    declared = schema.get("type")
    if declared is not None:
        return declared
    if "properties" in schema:
        return "object"
    if "items" in schema:
        return "array"
    return None


def _common_type(left: JSONSchema, right: JSONSchema, operation: str) -> Optional[Any]:
    left_type = schema_type(left)
    right_type = schema_type(right)
    if left_type is not None and right_type is not None and left_type != right_type:
        raise TypeMismatchError(left_type, right_type, operation)
    return left_type if left_type is not None else right_type


def _union(*lists: Optional[Iterable[str]]) -> List[str]:
    seen: List[str] = []
    for values in lists:
        for value in values or []:
            if value not in seen:
                seen.append(value)
    return seen


def shallow_schema(
    schema: JSONSchema,
    keyword_token_limit: Optional[int] = None,
    length_function: Optional[LengthFunction] = None,
) -> JSONSchema:
    """Copy of a schema with nested structure removed.

    Structural keywords (`properties`, `items`, combinators...) are dropped. Other keywords
    are kept when their serialized size is within `keyword_token_limit`; `type`, `title`
    and `format` are always kept.

    Args:
        schema: Schema to shrink
        keyword_token_limit: Token budget for a single keyword value
        length_function: Token counter (default: tiktoken based)

    Returns:
        Shallow schema
    """
    if not isinstance(schema, dict):
        return deepcopy(schema)

    limit = config.shallow_keyword_token_limit if keyword_token_limit is None else keyword_token_limit
    measure = length_function or tokenized_length

    shallow: JSONSchema = {}
    for key, value in schema.items():
        if key in STRUCTURAL_KEYWORDS:
            continue
        if key not in SHALLOW_HINT_KEYWORDS and measure(value) > limit:
            logger.debug(f"Dropping oversized keyword {key!r} from shallow schema")
            continue
        shallow[key] = deepcopy(value)
    return shallow


def _chunk_properties(
    object_schema: JSONSchema,
    chunk_required: bool,
    token_limit: int,
    measure: LengthFunction,
) -> Tuple[Dict[str, Any], List[Dict[str, Any]]]:
    """Greedily group the properties of an object schema.

    Returns:
        Tuple of (required properties pulled out of chunking, chunks)
    """
    properties = object_schema.get("properties") or {}
    required = object_schema.get("required") or []

    pulled_out: Dict[str, Any] = {}
    chunks: List[Dict[str, Any]] = []
    current: Dict[str, Any] = {}
    current_length = 0

    for name, prop in properties.items():
        prop_metadata = shallow_schema(prop, length_function=measure) if isinstance(prop, dict) else prop

        if not chunk_required and name in required:
            pulled_out[name] = prop_metadata
            continue

        length = measure(prop_metadata)
        if current and (current_length + length > token_limit or length > token_limit):
            chunks.append(current)
            current = {}
            current_length = 0

        current[name] = prop_metadata
        current_length += length

    if current:
        chunks.append(current)

    return pulled_out, chunks


def chunk_schema(
    schema: JSONSchema,
    chunk_required: bool = False,
    token_limit: Optional[int] = None,
    length_function: Optional[LengthFunction] = None,
) -> List[SchemaChunk]:
    """Split a schema into token-bounded chunks of sibling properties.

    Object schemas are chunked on their properties, arrays on the properties of their
    single item schema (results are wrapped back in an `items` envelope). Anything else,
    including schemas with a list-valued `type`, yields one identity chunk with no
    property names.

    Args:
        schema: Schema to chunk
        chunk_required: Whether required properties are chunked like the others. When
            False they are kept out of the chunking loop and added to every chunk's base.
        token_limit: Token budget per chunk
        length_function: Token counter (default: tiktoken based)

    Returns:
        List of chunks
    """
    declared = schema.get("type") if isinstance(schema, dict) else None
    if declared not in ("object", "array"):
        return [SchemaChunk([], schema)]

    limit = config.chunk_token_limit if token_limit is None else token_limit
    measure = length_function or tokenized_length
    metadata = shallow_schema(schema, length_function=measure)

    if declared == "object":
        target = schema
    else:
        target = schema.get("items")
        if not isinstance(target, dict) or schema_type(target) != "object":
            return [SchemaChunk([], schema)]

    pulled_out, chunks = _chunk_properties(target, chunk_required, limit, measure)
    if not chunks:
        chunks = [{}]

    def wrap(properties: Dict[str, Any]) -> JSONSchema:
        if declared == "object":
            return {**deepcopy(metadata), "properties": properties}
        item_metadata = shallow_schema(target, length_function=measure)
        return {**deepcopy(metadata), "items": {**item_metadata, "properties": properties}}

    result = [
        SchemaChunk(list(chunk), wrap({**deepcopy(pulled_out), **chunk}))
        for chunk in chunks
    ]
    logger.debug(f"Chunked schema into {len(result)} chunks (limit {limit} tokens)")
    return result


def get_sub_schema(schema: JSONSchema, selected_properties: Iterable[str]) -> JSONSchema:
    """Deep copy of a schema keeping only the selected properties.

    For arrays with a single item schema the selection applies to the item's properties.
    Unknown property names are ignored.
    """
    selected = list(selected_properties)
    sub_schema = deepcopy(schema)
    kind = schema_type(schema)

    if kind == "object":
        properties = schema.get("properties") or {}
        sub_schema["properties"] = {
            name: deepcopy(properties[name]) for name in selected if name in properties
        }
    elif kind == "array" and isinstance(schema.get("items"), dict):
        sub_schema["items"] = get_sub_schema(schema["items"], selected)

    return sub_schema


def merge_schema(left: JSONSchema, right: JSONSchema) -> JSONSchema:
    """Merge two schemas of the same type.

    Objects take the union of `required` and a shallow merge of `properties` (right wins).
    Arrays merge their single item schemas recursively, or tuple items element-wise.
    Other schemas are shallow-merged with right winning.

    Raises:
        TypeMismatchError: If the (inferred) types differ
    """
    kind = _common_type(left, right, "merge")
    merged = deepcopy(left)
    if kind is not None:
        merged["type"] = kind

    if kind == "object":
        if "required" in left or "required" in right:
            merged["required"] = _union(left.get("required"), right.get("required"))
        merged["properties"] = {
            **(merged.get("properties") or {}),
            **deepcopy(right.get("properties") or {}),
        }
        for key, value in right.items():
            if key not in merged:
                merged[key] = deepcopy(value)
    elif kind == "array":
        left_items = left.get("items")
        right_items = right.get("items")
        if right_items is None:
            pass
        elif left_items is None:
            merged["items"] = deepcopy(right_items)
        elif isinstance(left_items, dict) and isinstance(right_items, dict):
            merged["items"] = merge_schema(left_items, right_items)
        elif isinstance(left_items, list) and isinstance(right_items, list):
            merged["items"] = [
                _merge_tuple_element(left_items, right_items, i)
                for i in range(max(len(left_items), len(right_items)))
            ]
        for key, value in right.items():
            if key not in merged:
                merged[key] = deepcopy(value)
    else:
        merged.update(deepcopy(right))
        if kind is not None:
            merged["type"] = kind

    return merged


def _merge_tuple_element(left: List[Any], right: List[Any], index: int) -> Any:
    if index >= len(left):
        return deepcopy(right[index])
    if index >= len(right):
        return deepcopy(left[index])
    if isinstance(left[index], dict) and isinstance(right[index], dict):
        return merge_schema(left[index], right[index])
    return deepcopy(right[index])


def deepen_schema(full_schema: JSONSchema, filtered_schema: JSONSchema) -> JSONSchema:
    """Restore the structure a shallow or chunked schema lost.

    The result keeps the filtered schema's properties (each deepened against its full
    counterpart) and the union of both `required` arrays. Keywords the filtered schema
    omits entirely, `properties` and `items` included, fall back to the full schema.

    Raises:
        TypeMismatchError: If the (inferred) types differ
    """
    kind = _common_type(full_schema, filtered_schema, "deepen")

    deepened = deepcopy(full_schema)
    deepened.update(deepcopy(filtered_schema))
    if kind is not None:
        deepened["type"] = kind

    if "required" in full_schema or "required" in filtered_schema:
        deepened["required"] = _union(filtered_schema.get("required"), full_schema.get("required"))

    full_properties = full_schema.get("properties")
    filtered_properties = filtered_schema.get("properties")
    if isinstance(full_properties, dict) and isinstance(filtered_properties, dict):
        deepened["properties"] = {
            name: _deepen_member(full_properties.get(name), prop)
            for name, prop in filtered_properties.items()
        }

    full_items = full_schema.get("items")
    filtered_items = filtered_schema.get("items")
    if isinstance(full_items, dict) and isinstance(filtered_items, dict):
        deepened["items"] = deepen_schema(full_items, filtered_items)
    elif isinstance(full_items, list) and isinstance(filtered_items, list):
        deepened["items"] = [
            _deepen_member(full_items[i] if i < len(full_items) else None, item)
            for i, item in enumerate(filtered_items)
        ]

    return deepened


def _deepen_member(full: Any, filtered: Any) -> Any:
    if isinstance(full, dict) and isinstance(filtered, dict):
        return deepen_schema(full, filtered)
    return deepcopy(filtered)


__all__ = [
    "JSONSchema",
    "SchemaChunk",
    "schema_type",
    "shallow_schema",
    "chunk_schema",
    "get_sub_schema",
    "merge_schema",
    "deepen_schema",
]
