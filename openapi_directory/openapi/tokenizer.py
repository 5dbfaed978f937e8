"""
Operation tokenizer.

Turns one operation into content-addressed token entries: the operation description, each
parameter description and each top-level request body property. Entries are keyed by the
digest of their normalized text, so identical texts from different operations collapse into
one entry whose `paths` and `scopes` sets grow with every operation that references it.
"""

import hashlib
import html
import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

from ..config import config
from ..constants import MAX_CHARS_PER_TOKEN, PATH_SEPARATOR, TRUNCATION_STEP
from ..utils.tokens import count_tokens
from .operation import format_operation_path, get_default_content_type, get_operation_scopes

logger = logging.getLogger(__name__)

_TAG_PATTERN = re.compile(r"<[^>]+>")
_CONTROL_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_PATTERN = re.compile(r"\s+")


@dataclass
class TokenEntry:
    """A deduplicated unit of retrievable text."""

    id: str
    text: str
    spec_id: str
    paths: Set[str] = field(default_factory=set)
    scopes: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "id": self.id,
            "text": self.text,
            "spec_id": self.spec_id,
            "paths": sorted(self.paths),
            "scopes": sorted(self.scopes),
        }


TokenMap = Dict[str, TokenEntry]


def normalize_text(text: Optional[str], token_limit: Optional[int] = None) -> str:
    """Clean text for embedding and bound it to a token budget.

    Markup is stripped, entities unescaped, control characters removed and whitespace
    collapsed. Text over the budget loses trailing characters in fixed steps until it fits.
    """
    if not text:
        return ""

    limit = config.entry_token_limit if token_limit is None else token_limit

    cleaned = _TAG_PATTERN.sub(" ", str(text))
    cleaned = html.unescape(cleaned)
    cleaned = _CONTROL_PATTERN.sub("", cleaned)
    cleaned = _WHITESPACE_PATTERN.sub(" ", cleaned).strip()

    # Text past this bound never fits the budget
    cleaned = cleaned[: limit * MAX_CHARS_PER_TOKEN].rstrip()

    while cleaned and count_tokens(cleaned) > limit:
        cleaned = cleaned[:-TRUNCATION_STEP].rstrip()

    return cleaned


def entry_id(spec_id: str, text: str) -> str:
    """Content address of a normalized text within a specification."""
    digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
    return f"{spec_id}{PATH_SEPARATOR}{digest}"


class OperationTokenizer:
    """Emit the token entries of one operation into a shared token map."""

    def __init__(
        self,
        token_map: TokenMap,
        spec_id: str,
        url_path: str,
        http_method: str,
        operation: Dict[str, Any],
        path_item_parameters: Optional[List[Dict[str, Any]]] = None,
        oauth_scheme_name: Optional[str] = None,
        token_limit: Optional[int] = None,
    ):
        """Initialize tokenizer.

        Args:
            token_map: Map shared by every operation of the specification
            spec_id: Specification identifier
            url_path: Operation URL path
            http_method: Operation HTTP method
            operation: Dereferenced operation object
            path_item_parameters: Dereferenced parameters declared on the path item
            oauth_scheme_name: OAuth2 security scheme of the specification
            token_limit: Token budget per entry text
        """
        self.token_map = token_map
        self.spec_id = spec_id
        self.url_path = url_path
        self.http_method = http_method.lower()
        self.operation = operation
        self.path_item_parameters = path_item_parameters or []
        self.token_limit = token_limit

        self.path = format_operation_path(spec_id, url_path, self.http_method)
        self.scopes = get_operation_scopes(spec_id, operation, oauth_scheme_name)

    def tokenize(self) -> TokenMap:
        """Add this operation's entries to the token map."""
        self._add_description()
        self._add_parameters()
        self._add_request_body()
        return self.token_map

    def _add_description(self) -> None:
        operation = self.operation
        text = (
            operation.get("description")
            or operation.get("operationId")
            or operation.get("summary")
            or ""
        )
        self._add_entry(text)

    def _parameters(self) -> List[Dict[str, Any]]:
        # Operation parameters override path item parameters of the same name
        merged: Dict[str, Dict[str, Any]] = {}
        for parameter in [*self.path_item_parameters, *(self.operation.get("parameters") or [])]:
            if not isinstance(parameter, dict):
                continue
            key = parameter.get("name") or parameter.get("description") or ""
            merged[key] = parameter
        return list(merged.values())

    def _add_parameters(self) -> None:
        for parameter in self._parameters():
            self._add_entry(parameter.get("description") or parameter.get("name") or "")

    def _request_body_schema(self) -> Optional[Dict[str, Any]]:
        request_body = self.operation.get("requestBody")
        if isinstance(request_body, dict):
            content = request_body.get("content") or {}
            content_type = get_default_content_type(content.keys())
            if content_type is None:
                return None
            schema = (content.get(content_type) or {}).get("schema")
            return schema if isinstance(schema, dict) else None

        # Swagger 2 carries the body as an `in: body` parameter
        for parameter in self._parameters():
            if parameter.get("in") == "body":
                schema = parameter.get("schema")
                return schema if isinstance(schema, dict) else None
        return None

    def _add_request_body(self) -> None:
        schema = self._request_body_schema()
        if schema is None:
            return

        if schema.get("type") == "object":
            properties = schema.get("properties") or {}
        elif schema.get("type") == "array" and isinstance(schema.get("items"), dict):
            properties = schema["items"].get("properties") or {}
        else:
            return

        for name, prop in properties.items():
            description = prop.get("description") if isinstance(prop, dict) else None
            self._add_entry(description or name or "")

    def _add_entry(self, raw_text: str) -> None:
        text = normalize_text(raw_text, self.token_limit)
        identifier = entry_id(self.spec_id, text)

        entry = self.token_map.get(identifier)
        if entry is None:
            entry = TokenEntry(id=identifier, text=text, spec_id=self.spec_id)
            self.token_map[identifier] = entry

        entry.paths.add(self.path)
        entry.scopes.update(self.scopes)


__all__ = ["TokenEntry", "TokenMap", "OperationTokenizer", "normalize_text", "entry_id"]
