"""
JSON Schema utilities.

- algebra.py: shallow views, chunking, sub-schemas, merging and deepening
- required.py: required-only views
"""

from .algebra import (
    JSONSchema,
    SchemaChunk,
    chunk_schema,
    deepen_schema,
    get_sub_schema,
    merge_schema,
    schema_type,
    shallow_schema,
)
from .required import extract_required_schema

__all__ = [
    "JSONSchema",
    "SchemaChunk",
    "chunk_schema",
    "deepen_schema",
    "extract_required_schema",
    "get_sub_schema",
    "merge_schema",
    "schema_type",
    "shallow_schema",
]
