"""Specification indexer building the token map of a whole document."""

import logging
from typing import Any, Dict, Optional

from ..exceptions import OperationNotFoundError, RefResolutionError
from ..monitoring.metrics import MetricsManager
from .dereference import SpecDereferencer
from .operation import get_oauth_security_scheme_name, iter_operations
from .tokenizer import OperationTokenizer, TokenMap

logger = logging.getLogger(__name__)


class SpecIndexer:
    """Drive the operation tokenizer across every operation of a specification."""

    def __init__(
        self,
        spec_id: str,
        document: Dict[str, Any],
        metrics: Optional[MetricsManager] = None,
        token_limit: Optional[int] = None,
    ):
        """Initialize indexer.

        Args:
            spec_id: Specification identifier
            document: Parsed OpenAPI/Swagger document
            metrics: Optional metrics manager
            token_limit: Token budget per entry text
        """
        self.spec_id = spec_id
        self.document = document
        self.metrics = metrics
        self.token_limit = token_limit
        self.skipped_operations: Dict[str, str] = {}

    def build_token_map(self) -> TokenMap:
        """Tokenize every operation into a fresh token map.

        An operation whose references cannot be resolved is skipped and recorded in
        `skipped_operations`; the rest of the specification is still indexed.

        Returns:
            Token map keyed by entry id
        """
        token_map: TokenMap = {}
        self.skipped_operations = {}

        dereferencer = SpecDereferencer(self.document)
        scheme_name = get_oauth_security_scheme_name(self.document)
        resolved_parameters: Dict[str, Any] = {}
        operation_count = 0

        for url_path, method, _, parameters in iter_operations(self.document):
            try:
                if url_path not in resolved_parameters:
                    resolved_parameters[url_path] = dereferencer.inline(parameters)
                operation = dereferencer.dereference_operation(url_path, method)
            except (RefResolutionError, OperationNotFoundError) as e:
                logger.warning(f"Skipping {method.upper()} {url_path}: {e}")
                self.skipped_operations[f"{method}:{url_path}"] = str(e)
                if self.metrics:
                    self.metrics.track_operation_skipped(self.spec_id)
                continue

            OperationTokenizer(
                token_map,
                self.spec_id,
                url_path,
                method,
                operation,
                resolved_parameters[url_path],
                scheme_name,
                token_limit=self.token_limit,
            ).tokenize()
            operation_count += 1

        logger.info(
            f"Indexed {operation_count} operations of {self.spec_id} into {len(token_map)} entries"
        )
        if self.metrics:
            self.metrics.set_token_map_size(self.spec_id, len(token_map))
        return token_map


def build_token_map(spec_id: str, document: Dict[str, Any]) -> TokenMap:
    """Token map of a specification."""
    return SpecIndexer(spec_id, document).build_token_map()


__all__ = ["SpecIndexer", "build_token_map"]
