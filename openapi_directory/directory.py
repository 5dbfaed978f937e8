"""
OpenAPI Directory

Composition root of the retrieval engine. Indexing runs a specification through the
`SpecIndexer` into the `EmbeddingIndex`. A query embeds the (optionally summarized)
objective, searches the index with the caller's scopes, ranks the operations with the
`CandidateRanker` and lets a language model shortlist the best ones. For the chosen
operation, the `SchemaNegotiator` trims the input schemas down to what the objective needs.

Example Usage:
    from openapi_directory.directory import Directory

    directory = Directory(embedding_index, llm=OpenRouterClient())
    directory.embed(document, "petstore")
    candidates = directory.identify({"petstore": document}, ["read:pets"], "update my pet")
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from pydantic import BaseModel, Field

from .config import config
from .constants import OBJECTIVE_SUMMARY_PROMPT
from .embedding.index import EmbeddingIndex, UpsertReport
from .evaluator import SchemaNegotiator
from .exceptions import ConfigurationError, LLMUnavailableError, OperationNotFoundError
from .integrations.llm.base import LLMProvider
from .monitoring.metrics import MetricsManager
from .openapi.dereference import SpecDereferencer
from .openapi.indexer import SpecIndexer
from .openapi.operation import extract_operation_schemas, qualify_scopes
from .schema.required import extract_required_schema
from .search.ranking import CandidateRanker, SpecMap
from .search.reranking import LLMReranker
from .search.search_models import APICandidate

logger = logging.getLogger(__name__)


class ObjectiveSummary(BaseModel):
    """The summary of the given task."""

    short_objective: str = Field(description="Generic one paragraph summary of the task")


@dataclass
class OperationComponents:
    """Dereferenced operation with its request and response schemas."""

    operation: Dict[str, Any]
    body: Optional[Dict[str, Any]] = None
    query: Optional[Dict[str, Any]] = None
    path: Optional[Dict[str, Any]] = None
    request_content_type: Optional[str] = None
    required: Dict[str, Optional[Dict[str, Any]]] = field(default_factory=dict)
    response: Optional[Dict[str, Any]] = None
    response_content_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "operation": self.operation,
            "request_schema": {
                "body": self.body,
                "query": self.query,
                "path": self.path,
                "content_type": self.request_content_type,
                "required": self.required,
            },
            "response": {
                "content_type": self.response_content_type,
                "schema": self.response,
            },
        }


class Directory:
    """Index API specifications and retrieve the operations fitting an objective."""

    def __init__(
        self,
        embedding_index: EmbeddingIndex,
        llm: Optional[LLMProvider] = None,
        shortlist_size: Optional[int] = None,
        search_limit: Optional[int] = None,
        metrics: Optional[MetricsManager] = None,
    ):
        """Initialize directory.

        Args:
            embedding_index: Embedding index holding the token entries
            llm: Optional language model for summarizing and shortlisting
            shortlist_size: Candidates kept after ranking (default: SHORTLIST_SIZE)
            search_limit: Nearest neighbours fetched per query (default: SEARCH_LIMIT)
            metrics: Optional metrics manager
        """
        self.embedding_index = embedding_index
        self.llm = llm
        self.search_limit = search_limit or config.search_limit
        self.metrics = metrics
        self.ranker = CandidateRanker(shortlist_size)
        self.reranker = LLMReranker(llm) if llm is not None else None
        self.negotiator = SchemaNegotiator(llm) if llm is not None else None

    def embed(self, document: Dict[str, Any], spec_id: str) -> UpsertReport:
        """Index a specification.

        Args:
            document: Parsed OpenAPI/Swagger document
            spec_id: Unique identifier of the document

        Returns:
            Upsert report of the embedding index
        """
        logger.info(f"Preparing token entries for {spec_id}")
        token_map = SpecIndexer(spec_id, document, metrics=self.metrics).build_token_map()

        logger.info(f"Embedding {spec_id}: {len(token_map)} entries")
        report = self.embedding_index.upsert(token_map)

        if report.failed_batches:
            logger.warning(
                f"Embedding of {spec_id} finished with {len(report.failed_ids)} failed entries"
            )
        else:
            logger.info(f"Embedding of {spec_id} completed without errors")
        return report

    def summarize_objective(self, objective: str) -> str:
        """Generic summary of an objective, or the objective itself without a model."""
        if self.llm is None:
            return objective
        try:
            summary = self.llm.generate_structured(
                OBJECTIVE_SUMMARY_PROMPT.format(objective=objective), ObjectiveSummary
            )
        except LLMUnavailableError as e:
            logger.warning(f"Objective summary unavailable, using raw objective: {e}")
            return objective
        return summary.short_objective.strip() or objective

    def query(
        self, spec_map: SpecMap, scopes: Sequence[str], objective: str
    ) -> List[APICandidate]:
        """Ranked candidates for an objective.

        Args:
            spec_map: Specification id to document
            scopes: Scopes available to the caller
            objective: Objective to accomplish

        Returns:
            Candidates by descending score
        """
        caller_scopes = qualify_scopes(scopes, list(spec_map))
        short_objective = self.summarize_objective(objective)
        logger.info(f"Vector search called: {short_objective!r} with scopes {caller_scopes}")

        query_vector = self.embedding_index.embed_query(short_objective)
        matches = self.embedding_index.search(
            short_objective,
            query_vector,
            limit=self.search_limit,
            scope_filter=caller_scopes,
        )
        return self.ranker.rank(matches, spec_map, caller_scopes)

    def shortlist(
        self,
        candidates: Sequence[APICandidate],
        spec_map: SpecMap,
        objective: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> List[APICandidate]:
        """Let the language model pick the best candidates, if one is configured."""
        if self.reranker is None:
            return list(candidates)
        return self.reranker.rerank(candidates, spec_map, objective, context)

    def identify(
        self,
        spec_map: SpecMap,
        scopes: Sequence[str],
        objective: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> List[APICandidate]:
        """Query then shortlist."""
        matches = self.query(spec_map, scopes, objective)
        logger.debug(f"Matches: {[candidate.operation_path for candidate in matches]}")
        shortlist = self.shortlist(matches, spec_map, objective, context)
        logger.debug(f"Shortlist: {[candidate.operation_path for candidate in shortlist]}")
        return shortlist

    def extract_operation_components(
        self, document: Dict[str, Any], url_path: str, http_method: str
    ) -> OperationComponents:
        """Dereferenced operation with its request schemas and their required parts."""
        return extract_operation_components(document, url_path, http_method)

    def filter_input_schemas(
        self,
        objective: str,
        components: OperationComponents,
        operation_label: str,
        context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Optional[Dict[str, Any]]]:
        """Body, query and path schemas reduced to what the objective needs.

        Args:
            objective: Objective to accomplish
            components: Components of the chosen operation
            operation_label: Operation shown to the model, e.g. "PUT /pets"
            context: Caller context

        Returns:
            Filtered schema per kind

        Raises:
            ConfigurationError: If no language model is configured
            LLMUnavailableError: If the model cannot be reached
        """
        if self.negotiator is None:
            raise ConfigurationError("Filtering input schemas requires a language model")
        return self.negotiator.filter_input_schemas(
            objective,
            operation_label,
            components.required,
            {"body": components.body, "query": components.query, "path": components.path},
            context,
        )


def extract_operation_components(
    document: Dict[str, Any], url_path: str, http_method: str
) -> OperationComponents:
    """Dereferenced operation with its request schemas and their required parts.

    Path item parameters apply unless the operation redefines them.

    Raises:
        OperationNotFoundError: If the operation does not exist
        RefResolutionError: If a reference cannot be resolved
    """
    dereferencer = SpecDereferencer(document)
    operation = dereferencer.dereference_operation(url_path, http_method)

    path_item = (document.get("paths") or {}).get(url_path)
    if not isinstance(path_item, dict):
        raise OperationNotFoundError(url_path, http_method)
    shared = dereferencer.inline(path_item.get("parameters") or [])
    if shared:
        own = operation.get("parameters") or []
        overridden = {(p.get("name"), p.get("in")) for p in own if isinstance(p, dict)}
        operation["parameters"] = [
            p for p in shared if (p.get("name"), p.get("in")) not in overridden
        ] + list(own)

    schemas = extract_operation_schemas(operation)
    return OperationComponents(
        operation=operation,
        body=schemas.body,
        query=schemas.query,
        path=schemas.path,
        request_content_type=schemas.request_content_type,
        required={
            "body": extract_required_schema(schemas.body),
            "query": extract_required_schema(schemas.query),
            "path": extract_required_schema(schemas.path),
        },
        response=schemas.response,
        response_content_type=schemas.response_content_type,
    )


__all__ = ["Directory", "ObjectiveSummary", "OperationComponents", "extract_operation_components"]
