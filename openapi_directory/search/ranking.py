"""
Candidate ranking.

Similarity matches point at token entries, and one entry can back many operations. The
ranker spreads every match over the operation paths it backs and drops paths the caller is
not authorized for. It then sums `1 - distance` per path and keeps the best paths. The sum is
not normalized: a path backed by several moderately similar entries can outrank a path
with a single close entry.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..config import config
from ..openapi.operation import (
    describe_operation,
    get_oauth_security_scheme_name,
    get_operation_scopes,
    parse_operation_path,
    qualify_scopes,
)
from .search_models import APICandidate, Match

logger = logging.getLogger(__name__)

SpecMap = Dict[str, Dict[str, Any]]


def find_operation(
    spec_map: SpecMap, spec_id: str, url_path: str, http_method: str
) -> Optional[Dict[str, Any]]:
    """Operation object of a specification, or None when it does not exist."""
    document = spec_map.get(spec_id)
    if not isinstance(document, dict):
        return None
    path_item = (document.get("paths") or {}).get(url_path)
    if not isinstance(path_item, dict):
        return None
    operation = path_item.get(http_method.lower())
    return operation if isinstance(operation, dict) else None


class CandidateRanker:
    """Turn similarity matches into a ranked shortlist of operations."""

    def __init__(self, shortlist_size: Optional[int] = None):
        """Initialize ranker.

        Args:
            shortlist_size: Number of candidates kept (default: SHORTLIST_SIZE)
        """
        self.shortlist_size = shortlist_size or config.shortlist_size

    def rank(
        self,
        matches: Sequence[Match],
        spec_map: SpecMap,
        scopes: Sequence[str],
    ) -> List[APICandidate]:
        """Rank the operations backing a list of matches.

        Args:
            matches: Similarity matches
            spec_map: Specification id to document
            scopes: Caller scopes, namespaced or bare

        Returns:
            Candidates by descending score; ties keep discovery order
        """
        caller_scopes = qualify_scopes(scopes, list(spec_map))
        scheme_names: Dict[str, Optional[str]] = {}
        path_scores: Dict[str, float] = {}
        path_scopes: Dict[str, List[str]] = {}

        for match in matches:
            for path in match.paths:
                try:
                    spec_id, url_path, http_method = parse_operation_path(path)
                except ValueError:
                    logger.debug(f"Ignoring malformed operation path {path!r}")
                    continue

                operation = find_operation(spec_map, spec_id, url_path, http_method)
                if operation is None:
                    logger.debug(f"Dropping {path}: operation not in specification map")
                    continue

                if spec_id not in scheme_names:
                    scheme_names[spec_id] = get_oauth_security_scheme_name(spec_map[spec_id])
                required = get_operation_scopes(spec_id, operation, scheme_names[spec_id])
                matched = [scope for scope in caller_scopes if scope in required]
                if not matched:
                    continue

                path_scores[path] = path_scores.get(path, 0.0) + (1.0 - match.distance)
                known = path_scopes.setdefault(path, [])
                known.extend(scope for scope in matched if scope not in known)

        ranked = sorted(path_scores.items(), key=lambda item: item[1], reverse=True)

        candidates: List[APICandidate] = []
        for path, score in ranked[: self.shortlist_size]:
            spec_id, url_path, http_method = parse_operation_path(path)
            operation = find_operation(spec_map, spec_id, url_path, http_method)
            candidates.append(
                APICandidate(
                    spec_id=spec_id,
                    path=url_path,
                    http_method=http_method,
                    description=describe_operation(operation, path),
                    scopes=path_scopes[path],
                    score=score,
                )
            )

        logger.debug(f"Ranked {len(path_scores)} operations from {len(matches)} matches")
        return candidates


__all__ = ["CandidateRanker", "SpecMap", "find_operation"]
