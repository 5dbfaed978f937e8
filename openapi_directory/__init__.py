"""
OpenAPI Directory - Retrieval of API Operations for Natural-Language Objectives

This package indexes OpenAPI/Swagger specifications and retrieves the operations that fit
an objective, honouring the caller's authorization scopes.

Key Features:
- Reference resolution with cycle truncation
- Content-addressed token entries shared across operations
- Incremental embedding with change detection
- Scope-aware ranking of operations
- Token-bounded negotiation of large request schemas
"""

import logging
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("openapi-directory")
except PackageNotFoundError:
    __version__ = "0.0.0"

logger = logging.getLogger(__name__)

__all__ = ["__version__"]
