"""Search result models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..openapi.operation import format_operation_path


@dataclass
class Match:
    """Nearest neighbour of a query in the embedding index.

    Attributes:
        id: Token entry id
        metadata: Entry metadata (`paths`, `scopes`, `spec_id`, `text`)
        distance: Distance to the query, smaller is closer
    """

    id: str
    metadata: Dict[str, Any]
    distance: float

    @property
    def paths(self) -> List[str]:
        return list(self.metadata.get("paths") or [])


@dataclass
class APICandidate:
    """Ranked operation proposed for an objective."""

    spec_id: str
    path: str
    http_method: str
    description: str
    scopes: List[str] = field(default_factory=list)
    score: float = 0.0

    @property
    def operation_path(self) -> str:
        return format_operation_path(self.spec_id, self.path, self.http_method)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "spec_id": self.spec_id,
            "path": self.path,
            "http_method": self.http_method,
            "description": self.description,
            "scopes": list(self.scopes),
            "score": self.score,
        }


__all__ = ["Match", "APICandidate"]
