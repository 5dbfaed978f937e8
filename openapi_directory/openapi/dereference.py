"""
Reference resolution for OpenAPI operations.

The dereferencer inlines every local `$ref` reachable from one operation so downstream
components work on plain object trees. Circular references are broken by truncation: while
a component is being substituted its reference is tracked, and a reference met again on
the same substitution path has its `$ref` key deleted instead of being expanded. A cyclic
schema therefore becomes a finite tree whose deepest cyclic branch is an empty object.

The input document is never mutated.

Example Usage:
    from openapi_directory.openapi.dereference import SpecDereferencer

    dereferencer = SpecDereferencer(document)
    operation = dereferencer.dereference_operation("/pets", "put")
"""

import logging
from copy import deepcopy
from typing import Any, Dict, FrozenSet, List, Optional

from ..constants import HTTP_METHODS
from ..exceptions import OperationNotFoundError, RefResolutionError

logger = logging.getLogger(__name__)

REF_KEY = "$ref"


def find_refs(node: Any, refs: Optional[List[str]] = None) -> List[str]:
    """Collect every `$ref` string under node, depth first, in encounter order."""
    if refs is None:
        refs = []
    if isinstance(node, dict):
        for key, value in node.items():
            if key == REF_KEY and isinstance(value, str):
                refs.append(value)
            else:
                find_refs(value, refs)
    elif isinstance(node, list):
        for item in node:
            find_refs(item, refs)
    return refs


def _decode_pointer_token(token: str) -> str:
    # JSON Pointer escaping per RFC 6901
    return token.replace("~1", "/").replace("~0", "~")


class SpecDereferencer:
    """Inline `$ref` pointers of one specification, one operation at a time."""

    def __init__(self, document: Dict[str, Any]):
        """Initialize dereferencer.

        Args:
            document: Parsed OpenAPI/Swagger document (read only)
        """
        self.document = document
        self._resolved: Dict[str, Any] = {}

    def lookup(self, ref: str) -> Any:
        """Return the raw target of a local reference.

        Raises:
            RefResolutionError: If the reference is external or its target is missing
        """
        if not ref.startswith("#"):
            raise RefResolutionError(ref)

        target: Any = self.document
        pointer = ref[1:]
        if not pointer:
            return target

        for raw_token in pointer.lstrip("/").split("/"):
            token = _decode_pointer_token(raw_token)
            if isinstance(target, dict) and token in target:
                target = target[token]
            elif isinstance(target, list) and token.isdigit() and int(token) < len(target):
                target = target[int(token)]
            else:
                raise RefResolutionError(ref)
        return target

    def resolve_ref(self, ref: str) -> Any:
        """Return the cycle-safe, fully inlined body of a referenced component.

        Bodies are computed once per root reference and cached; callers receive copies.
        """
        if ref not in self._resolved:
            target = self.lookup(ref)
            self._resolved[ref] = self._substitute(target, frozenset([ref]))
        return deepcopy(self._resolved[ref])

    def _substitute(self, node: Any, substituting: FrozenSet[str]) -> Any:
        """Copy node with nested references expanded, tracking the refs being substituted."""
        if isinstance(node, list):
            return [self._substitute(item, substituting) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get(REF_KEY)
        siblings = {
            key: self._substitute(value, substituting)
            for key, value in node.items()
            if key != REF_KEY
        }
        if not isinstance(ref, str):
            # A non-string $ref is data, e.g. a property literally named "$ref"
            if REF_KEY in node:
                siblings[REF_KEY] = self._substitute(ref, substituting)
            return siblings

        if ref in substituting:
            logger.debug(f"Truncating circular reference {ref}")
            return siblings

        body = self._substitute(self.lookup(ref), substituting | {ref})
        if isinstance(body, dict):
            return {**body, **siblings}
        return body

    def _replace(self, node: Any) -> Any:
        """Copy node with every reference replaced by its resolved component."""
        if isinstance(node, list):
            return [self._replace(item) for item in node]
        if not isinstance(node, dict):
            return node

        ref = node.get(REF_KEY)
        siblings = {key: self._replace(value) for key, value in node.items() if key != REF_KEY}
        if not isinstance(ref, str):
            if REF_KEY in node:
                siblings[REF_KEY] = self._replace(ref)
            return siblings

        body = self.resolve_ref(ref)
        if isinstance(body, dict):
            return {**body, **siblings}
        return body

    def inline(self, node: Any) -> Any:
        """Copy of an arbitrary fragment of the document with its references inlined.

        Raises:
            RefResolutionError: If a reference cannot be resolved
        """
        return self._replace(node)

    def _path_item(self, url_path: str) -> Dict[str, Any]:
        paths = self.document.get("paths") or {}
        path_item = paths.get(url_path)
        if not isinstance(path_item, dict):
            raise OperationNotFoundError(url_path, "*")
        return path_item

    def dereference_path_item(self, url_path: str) -> Dict[str, Any]:
        """Return a path item with every reference inlined.

        Raises:
            OperationNotFoundError: If the path does not exist
            RefResolutionError: If a reference cannot be resolved
        """
        path_item = self._path_item(url_path)
        refs = find_refs(path_item)
        logger.debug(f"Found {len(refs)} refs for path {url_path}")
        for ref in dict.fromkeys(refs):
            self.resolve_ref(ref)
        return self._replace(path_item)

    def dereference_operation(self, url_path: str, http_method: str) -> Dict[str, Any]:
        """Return the fully inlined operation object for a method and path.

        Raises:
            OperationNotFoundError: If the path or method does not exist
            RefResolutionError: If a reference cannot be resolved
        """
        method = http_method.lower()
        try:
            path_item = self._path_item(url_path)
        except OperationNotFoundError:
            raise OperationNotFoundError(url_path, http_method) from None

        operation = path_item.get(method) if method in HTTP_METHODS else None
        if not isinstance(operation, dict):
            raise OperationNotFoundError(url_path, http_method)

        refs = find_refs(operation)
        logger.debug(f"Found {len(refs)} refs for {method.upper()} {url_path}")
        for ref in dict.fromkeys(refs):
            self.resolve_ref(ref)
        return self._replace(operation)


def dereference_operation(
    document: Dict[str, Any], http_method: str, url_path: str
) -> Dict[str, Any]:
    """Inline all references of one operation of a document."""
    return SpecDereferencer(document).dereference_operation(url_path, http_method)


__all__ = ["SpecDereferencer", "dereference_operation", "find_refs"]
