"""Helpers for reading operations out of OpenAPI v2/v3 documents."""

import logging
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from ..constants import (
    DEFAULT_SCOPE,
    HTTP_METHODS,
    PARAMETER_LOCATIONS,
    PATH_SEPARATOR,
    PREFERRED_CONTENT_TYPES,
    SUCCESS_RESPONSE_CODES,
)
from ..exceptions import RefResolutionError
from .dereference import REF_KEY, SpecDereferencer

logger = logging.getLogger(__name__)


@dataclass
class OperationSchemas:
    """Schemas an operation accepts and returns."""

    query: Optional[Dict[str, Any]] = None
    path: Optional[Dict[str, Any]] = None
    header: Optional[Dict[str, Any]] = None
    cookie: Optional[Dict[str, Any]] = None
    body: Optional[Dict[str, Any]] = None
    response: Optional[Dict[str, Any]] = None
    request_content_type: Optional[str] = None
    response_content_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "query": self.query,
            "path": self.path,
            "header": self.header,
            "cookie": self.cookie,
            "body": self.body,
            "response": self.response,
            "request_content_type": self.request_content_type,
            "response_content_type": self.response_content_type,
        }


def get_default_content_type(types: Iterable[str]) -> Optional[str]:
    """Pick the preferred content type, else the first one offered."""
    available = list(types)
    for content_type in PREFERRED_CONTENT_TYPES:
        if content_type in available:
            return content_type
    return available[0] if available else None


def get_oauth_security_scheme_name(document: Dict[str, Any]) -> Optional[str]:
    """Name of the first OAuth2 security scheme declared by a document.

    Swagger 2 documents declare schemes under `securityDefinitions`, OpenAPI 3 documents
    under `components.securitySchemes`.
    """
    definitions = document.get("securityDefinitions") or {}
    for name, definition in definitions.items():
        if isinstance(definition, dict) and definition.get("type") == "oauth2":
            return name

    components = document.get("components") or {}
    schemes = components.get("securitySchemes") or {}
    dereferencer: Optional[SpecDereferencer] = None
    for name, scheme in schemes.items():
        if isinstance(scheme, dict) and isinstance(scheme.get(REF_KEY), str):
            dereferencer = dereferencer or SpecDereferencer(document)
            try:
                scheme = dereferencer.inline(scheme)
            except RefResolutionError as e:
                logger.warning(f"Skipping security scheme {name}: {e}")
                continue
        if isinstance(scheme, dict) and scheme.get("type") == "oauth2":
            return name

    return None


def namespace_scope(spec_id: str, scope: str) -> str:
    """Qualify a scope with its specification id."""
    return f"{spec_id}{PATH_SEPARATOR}{scope}"


def get_operation_scopes(
    spec_id: str,
    operation: Dict[str, Any],
    oauth_scheme_name: Optional[str],
) -> List[str]:
    """Namespaced scopes an operation requires.

    Returns an empty list when the operation declares no security, the `_default`
    sentinel when no OAuth2 requirement applies, and otherwise the scopes of every OAuth2
    requirement in declaration order.
    """
    security = operation.get("security")
    if not security:
        return []

    scopes: Optional[List[str]] = None
    if oauth_scheme_name:
        for requirement in security:
            if not isinstance(requirement, dict):
                continue
            requirement_scopes = requirement.get(oauth_scheme_name)
            if requirement_scopes is None:
                continue
            if scopes is None:
                scopes = []
            for scope in requirement_scopes:
                namespaced = namespace_scope(spec_id, scope)
                if namespaced not in scopes:
                    scopes.append(namespaced)

    if scopes is None:
        return [namespace_scope(spec_id, DEFAULT_SCOPE)]
    return scopes


def qualify_scopes(scopes: Iterable[str], spec_ids: Sequence[str]) -> List[str]:
    """Namespace bare caller scopes against every known specification.

    Scopes that already carry a specification id are kept as given.
    """
    qualified: List[str] = []
    for scope in scopes:
        candidates = (
            [scope]
            if PATH_SEPARATOR in scope
            else [namespace_scope(spec_id, scope) for spec_id in spec_ids]
        )
        for candidate in candidates:
            if candidate not in qualified:
                qualified.append(candidate)
    return qualified


def format_operation_path(spec_id: str, url_path: str, http_method: str) -> str:
    """Build the `specId|urlPath|httpMethod` key of an operation."""
    return PATH_SEPARATOR.join((spec_id, url_path, http_method.lower()))


def parse_operation_path(value: str) -> Tuple[str, str, str]:
    """Split an operation path into (spec_id, url_path, http_method).

    Raises:
        ValueError: If the value is not an operation path
    """
    first = value.find(PATH_SEPARATOR)
    last = value.rfind(PATH_SEPARATOR)
    if first < 0 or first == last:
        raise ValueError(f"Invalid operation path: {value!r}")
    return value[:first], value[first + 1 : last], value[last + 1 :]


def iter_operations(
    document: Dict[str, Any]
) -> Iterator[Tuple[str, str, Dict[str, Any], List[Any]]]:
    """Yield (url_path, http_method, operation, path_item_parameters) in document order."""
    paths = document.get("paths") or {}
    for url_path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue
        parameters = path_item.get("parameters") or []
        for method in HTTP_METHODS:
            operation = path_item.get(method)
            if isinstance(operation, dict):
                yield url_path, method, operation, parameters


def describe_operation(operation: Optional[Dict[str, Any]], fallback: str = "") -> str:
    """Human readable description of an operation."""
    if operation:
        for key in ("description", "summary", "operationId"):
            value = operation.get(key)
            if value:
                return value
    return fallback


def _append_parameter(schema: Optional[Dict[str, Any]], parameter: Dict[str, Any]) -> Dict[str, Any]:
    if schema is None:
        schema = {
            "type": "object",
            "required": [],
            "title": f"{parameter['in']} parameters to be sent with the HTTP request",
            "properties": {},
        }

    # Swagger 2 non-body parameters carry their type inline
    parameter_schema = parameter.get("schema")
    if parameter_schema is None:
        parameter_schema = {
            key: value
            for key, value in parameter.items()
            if key not in ("name", "in", "required", "description", "schema")
        }
    parameter_schema = deepcopy(parameter_schema)
    if parameter.get("description") and isinstance(parameter_schema, dict):
        parameter_schema.setdefault("description", parameter["description"])

    schema["properties"][parameter["name"]] = parameter_schema
    if parameter.get("required") and parameter["name"] not in schema["required"]:
        schema["required"].append(parameter["name"])
    return schema


def _media_schema(content: Dict[str, Any]) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    content_type = get_default_content_type(content.keys())
    if content_type is None:
        return None, None
    media = content.get(content_type) or {}
    return deepcopy(media.get("schema")), content_type


def extract_operation_schemas(operation: Dict[str, Any]) -> OperationSchemas:
    """Build the parameter, body and response schemas of a dereferenced operation."""
    schemas = OperationSchemas()
    by_location: Dict[str, Optional[Dict[str, Any]]] = {}

    for parameter in operation.get("parameters") or []:
        if not isinstance(parameter, dict) or "name" not in parameter:
            continue
        location = parameter.get("in")
        if location not in PARAMETER_LOCATIONS:
            logger.debug(f"Ignoring parameter {parameter['name']} in {location}")
            continue
        if location == "body":
            schemas.body = deepcopy(parameter.get("schema"))
            continue
        by_location[location] = _append_parameter(by_location.get(location), parameter)

    schemas.query = by_location.get("query")
    schemas.path = by_location.get("path")
    schemas.header = by_location.get("header")
    schemas.cookie = by_location.get("cookie")

    request_body = operation.get("requestBody")
    if isinstance(request_body, dict):
        schemas.body, schemas.request_content_type = _media_schema(request_body.get("content") or {})

    # YAML loads unquoted status codes as integers
    responses = {str(code): value for code, value in (operation.get("responses") or {}).items()}
    response = next(
        (responses[code] for code in SUCCESS_RESPONSE_CODES if code in responses),
        None,
    )
    if isinstance(response, dict):
        if "schema" in response:
            schemas.response = deepcopy(response["schema"])
        elif "content" in response:
            schemas.response, schemas.response_content_type = _media_schema(
                response.get("content") or {}
            )

    return schemas


__all__ = [
    "OperationSchemas",
    "get_default_content_type",
    "get_oauth_security_scheme_name",
    "get_operation_scopes",
    "namespace_scope",
    "qualify_scopes",
    "format_operation_path",
    "parse_operation_path",
    "iter_operations",
    "describe_operation",
    "extract_operation_schemas",
]
