"""Embedding index, providers and persistence."""

from .index import EmbeddingIndex, FailedBatch, UpsertReport, metadata_hash
from .models import EmbeddingProvider, SentenceTransformerEmbeddings
from .store import EmbeddingStore, StoredEmbedding

__all__ = [
    "EmbeddingIndex",
    "EmbeddingProvider",
    "EmbeddingStore",
    "FailedBatch",
    "SentenceTransformerEmbeddings",
    "StoredEmbedding",
    "UpsertReport",
    "metadata_hash",
]
