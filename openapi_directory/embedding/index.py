"""
Embedding index with change detection.

`upsert` embeds only token entries whose metadata hash (paths, scopes, text) differs from the
stored one. Entries are sent to the embedding provider in bounded batches, one batch at a
time. A batch is retried once with backoff. If it still fails, it is reported back and the
remaining batches continue. A batch is all-or-nothing: vectors reach the backend and the
store together or not at all, so an interrupted run can simply be repeated.

Example Usage:
    from openapi_directory.embedding import EmbeddingIndex, EmbeddingStore
    from openapi_directory.embedding.models import SentenceTransformerEmbeddings
    from openapi_directory.storage import create_vector_store

    index = EmbeddingIndex(
        provider=SentenceTransformerEmbeddings(),
        vector_store=create_vector_store("faiss"),
        store=EmbeddingStore(".cache/embeddings.sqlite"),
    )
    report = index.upsert(token_map)
"""

import hashlib
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from ..config import config
from ..exceptions import ProviderBatchError
from ..monitoring.metrics import MetricsManager
from ..openapi.tokenizer import TokenEntry, TokenMap
from ..search.search_models import Match
from ..storage.base import Collection, VectorItem, VectorStoreClient
from .models import EmbeddingProvider
from .store import EmbeddingStore, StoredEmbedding

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 2


def entry_metadata(entry: TokenEntry) -> Dict[str, Any]:
    """Metadata stored beside an entry's vector."""
    return {
        "paths": sorted(entry.paths),
        "scopes": sorted(entry.scopes),
        "spec_id": entry.spec_id,
        "text": entry.text,
    }


def metadata_hash(entry: TokenEntry) -> str:
    """Hash deciding whether an entry must be embedded again."""
    payload = json.dumps(entry_metadata(entry), sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


@dataclass
class FailedBatch:
    """Batch that could not be embedded or stored."""

    ids: List[str]
    error: str


@dataclass
class UpsertReport:
    """Outcome of an upsert."""

    embedded: int = 0
    skipped: int = 0
    failed_batches: List[FailedBatch] = field(default_factory=list)

    @property
    def failed_ids(self) -> List[str]:
        return [entry_id for batch in self.failed_batches for entry_id in batch.ids]

    @property
    def ok(self) -> bool:
        return not self.failed_batches

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "embedded": self.embedded,
            "skipped": self.skipped,
            "failed_batches": [
                {"ids": batch.ids, "error": batch.error} for batch in self.failed_batches
            ],
        }


class EmbeddingIndex:
    """Embeddings of token entries over a pluggable vector backend."""

    def __init__(
        self,
        provider: EmbeddingProvider,
        vector_store: VectorStoreClient,
        store: EmbeddingStore,
        collection_name: str = "openapi",
        batch_size: Optional[int] = None,
        retry_delay: Optional[float] = None,
        metrics: Optional[MetricsManager] = None,
    ):
        """Initialize embedding index.

        Args:
            provider: Embedding provider
            vector_store: Vector backend
            store: Persistence of vectors and metadata hashes
            collection_name: Backend collection holding the entries
            batch_size: Maximum entries per provider call (default: EMBEDDING_BATCH_SIZE)
            retry_delay: Base delay before retrying a failed batch (default: RETRY_DELAY)
            metrics: Optional metrics manager
        """
        self.provider = provider
        self.vector_store = vector_store
        self.store = store
        self.collection_name = collection_name
        self.batch_size = batch_size or config.embedding_batch_size
        self.retry_delay = config.retry_delay if retry_delay is None else retry_delay
        self.metrics = metrics
        self._collection: Optional[Collection] = None

    def _get_collection(self, dimension: Optional[int] = None) -> Collection:
        if self._collection is None or (self._collection.dimension is None and dimension):
            self._collection = self.vector_store.find_or_create_collection(
                self.collection_name, dimension
            )
        return self._collection

    def upsert(self, token_map: TokenMap) -> UpsertReport:
        """Embed new and changed entries of a token map.

        Args:
            token_map: Entries to index

        Returns:
            Counts of embedded and skipped entries and the batches that failed
        """
        report = UpsertReport()
        entries = list(token_map.values())
        stored = self.store.retrieve(entry.id for entry in entries)

        pending: List[TokenEntry] = []
        hashes: Dict[str, str] = {}
        for entry in entries:
            if not entry.text:
                report.skipped += 1
                continue
            entry_hash = metadata_hash(entry)
            previous = stored.get(entry.id)
            if previous is not None and previous.metadata_hash == entry_hash:
                report.skipped += 1
                continue
            hashes[entry.id] = entry_hash
            pending.append(entry)

        logger.info(
            f"Embedding {len(pending)} of {len(entries)} entries "
            f"({report.skipped} unchanged or empty)"
        )

        for start in range(0, len(pending), self.batch_size):
            batch = pending[start : start + self.batch_size]
            try:
                self._upsert_batch_with_retry(batch, hashes)
                report.embedded += len(batch)
            except ProviderBatchError as e:
                logger.error(f"Skipping batch of {len(batch)} entries: {e}")
                report.failed_batches.append(FailedBatch(ids=e.ids, error=str(e)))
                if self.metrics:
                    self.metrics.track_batch_error()

        if self.metrics:
            spec_id = entries[0].spec_id if entries else ""
            self.metrics.track_entries_embedded(spec_id, report.embedded)
            self.metrics.track_entries_skipped(spec_id, report.skipped)

        return report

    def _upsert_batch_with_retry(self, batch: Sequence[TokenEntry], hashes: Dict[str, str]) -> None:
        for attempt in range(MAX_ATTEMPTS):
            try:
                self._upsert_batch(batch, hashes)
                return
            except Exception as e:
                if attempt == MAX_ATTEMPTS - 1:
                    if isinstance(e, ProviderBatchError):
                        raise
                    raise ProviderBatchError(
                        f"Embedding batch failed: {e}",
                        [entry.id for entry in batch],
                        e,
                    ) from e
                logger.warning(f"Embedding batch failed (attempt {attempt + 1}), retrying: {e}")
                time.sleep(self.retry_delay * (2 ** attempt))

    def _upsert_batch(self, batch: Sequence[TokenEntry], hashes: Dict[str, str]) -> None:
        texts = list(dict.fromkeys(entry.text for entry in batch))
        vectors = self.provider.create_embeddings(texts)

        missing = [entry.id for entry in batch if entry.text not in vectors]
        if missing:
            raise ProviderBatchError(
                f"Embedding provider returned no vector for {len(missing)} entries",
                [entry.id for entry in batch],
            )

        items = [
            VectorItem(id=entry.id, vector=list(vectors[entry.text]), metadata=entry_metadata(entry))
            for entry in batch
        ]
        collection = self._get_collection(len(items[0].vector))
        # Rows are written first and committed only once the backend accepted the vectors
        with self.store.transaction():
            self.store.store(
                [StoredEmbedding(item.id, item.vector, hashes[item.id]) for item in items]
            )
            self.vector_store.upsert_items(collection, items)
        logger.debug(f"Stored batch of {len(items)} embeddings")

    def embed_query(self, text: str) -> List[float]:
        """Vector of a query text."""
        vectors = self.provider.create_embeddings([text])
        return list(vectors[text])

    def search(
        self,
        query_text: str,
        query_vector: Optional[List[float]] = None,
        limit: int = 20,
        scope_filter: Optional[List[str]] = None,
    ) -> List[Match]:
        """Nearest entries of a query whose scopes intersect the filter.

        Args:
            query_text: Query text (embedded when no vector is given)
            query_vector: Precomputed query vector
            limit: Maximum number of matches
            scope_filter: Allowed scopes; None disables the filter

        Returns:
            Matches ordered by increasing distance
        """
        if query_vector is None:
            query_vector = self.embed_query(query_text)

        logger.debug(f"Searching for {query_text!r} (limit {limit}, scopes {scope_filter})")
        collection = self._get_collection()
        if self.metrics:
            with self.metrics.search_timer():
                results = self.vector_store.query_items(collection, query_vector, limit, scope_filter)
        else:
            results = self.vector_store.query_items(collection, query_vector, limit, scope_filter)

        return [Match(id=r.id, metadata=r.metadata, distance=r.distance) for r in results]


__all__ = [
    "EmbeddingIndex",
    "UpsertReport",
    "FailedBatch",
    "entry_metadata",
    "metadata_hash",
]
