"""OpenAPI document processing: dereferencing, tokenizing and indexing."""

from .dereference import SpecDereferencer, dereference_operation, find_refs
from .indexer import SpecIndexer, build_token_map
from .operation import (
    OperationSchemas,
    extract_operation_schemas,
    get_oauth_security_scheme_name,
    get_operation_scopes,
)
from .tokenizer import OperationTokenizer, TokenEntry, TokenMap

__all__ = [
    "OperationSchemas",
    "OperationTokenizer",
    "SpecDereferencer",
    "SpecIndexer",
    "TokenEntry",
    "TokenMap",
    "build_token_map",
    "dereference_operation",
    "extract_operation_schemas",
    "find_refs",
    "get_oauth_security_scheme_name",
    "get_operation_scopes",
]
