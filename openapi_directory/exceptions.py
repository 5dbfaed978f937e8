"""Exception hierarchy for the directory components."""

from typing import Any, Dict, List, Optional


class DirectoryException(Exception):
    """Base directory exception."""

    def __init__(
        self,
        message: str,
        component: str,
        error_code: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize directory exception.

        Args:
            message: Error message
            component: Component that raised the error
            error_code: Error code
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.component = component
        self.error_code = error_code
        self.details = details or {}

    def __str__(self) -> str:
        return self.message


class ConfigurationError(DirectoryException):
    """Invalid or missing configuration."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "config", "INVALID_CONFIG", details)


class RefResolutionError(DirectoryException):
    """A $ref target is missing from the specification."""

    def __init__(self, ref: str) -> None:
        super().__init__(
            f"Could not resolve reference {ref}",
            "dereference",
            "REF_NOT_FOUND",
            {"ref": ref},
        )
        self.ref = ref


class TypeMismatchError(DirectoryException, TypeError):
    """Schema merge or deepen called on schemas of different types."""

    def __init__(self, left: Any, right: Any, operation: str = "merge") -> None:
        super().__init__(
            f"Cannot {operation} schemas of different types, got {left!r} and {right!r}",
            "schema",
            "TYPE_MISMATCH",
            {"left": left, "right": right, "operation": operation},
        )


class OperationNotFoundError(DirectoryException, KeyError):
    """Requested method and path are absent from the specification."""

    def __init__(self, url_path: str, http_method: str) -> None:
        super().__init__(
            f"Could not find operation object for {http_method.upper()} {url_path}",
            "dereference",
            "OPERATION_NOT_FOUND",
            {"path": url_path, "method": http_method},
        )
        self.url_path = url_path
        self.http_method = http_method


class ProviderBatchError(DirectoryException):
    """Embedding provider or vector backend call failed for a batch."""

    def __init__(self, message: str, ids: List[str], cause: Optional[BaseException] = None) -> None:
        super().__init__(
            message,
            "embedding",
            "BATCH_FAILED",
            {"ids": list(ids), "error": str(cause) if cause else None},
        )
        self.ids = list(ids)
        self.cause = cause


class LLMUnavailableError(DirectoryException):
    """Language model collaborator could not produce a usable answer."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message, "llm", "LLM_UNAVAILABLE", details)


__all__ = [
    "DirectoryException",
    "ConfigurationError",
    "RefResolutionError",
    "TypeMismatchError",
    "OperationNotFoundError",
    "ProviderBatchError",
    "LLMUnavailableError",
]
