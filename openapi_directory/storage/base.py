"""Vector backend contract."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Collection:
    """Handle of a named collection inside a vector backend."""

    name: str
    dimension: Optional[int] = None


@dataclass
class VectorItem:
    """One vector with its id and metadata."""

    id: str
    vector: List[float]
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class QueryResult:
    """Nearest neighbour returned by a backend; smaller distance is closer."""

    id: str
    metadata: Dict[str, Any]
    distance: float


class VectorStoreClient(ABC):
    """Capabilities every vector backend provides."""

    @abstractmethod
    def find_or_create_collection(self, name: str, dimension: Optional[int] = None) -> Collection:
        """Return the named collection, creating it when missing."""

    @abstractmethod
    def upsert_items(self, collection: Collection, items: List[VectorItem]) -> None:
        """Insert or replace items by id."""

    @abstractmethod
    def query_items(
        self,
        collection: Collection,
        vector: List[float],
        limit: int,
        scopes: Optional[List[str]] = None,
    ) -> List[QueryResult]:
        """Nearest items whose `scopes` metadata contains any of the given scopes.

        Args:
            collection: Collection to search
            vector: Query vector
            limit: Maximum number of results
            scopes: Allowed scopes; None disables the filter
        """

    def purge_collection(self, collection: Collection) -> None:
        """Remove every item of a collection."""
        raise NotImplementedError(f"{type(self).__name__} does not support purging")


__all__ = ["Collection", "VectorItem", "QueryResult", "VectorStoreClient"]
