"""Vector storage backends."""

import os
from typing import Optional

from ..config import VectorBackend, config
from ..exceptions import ConfigurationError
from .base import Collection, QueryResult, VectorItem, VectorStoreClient
from .faiss_client import FAISSClient
from .pinecone_client import PineconeClient


def create_vector_store(backend: Optional[str] = None) -> VectorStoreClient:
    """Build the configured vector backend.

    Args:
        backend: Backend name (default: VECTOR_STORE setting)
    """
    backend = (backend or config.vector_store).lower()
    if backend == VectorBackend.FAISS.value:
        return FAISSClient(persist_dir=os.path.join(config.cache_dir, "faiss"))
    if backend == VectorBackend.PINECONE.value:
        return PineconeClient(
            api_key=config.pinecone_api_key,
            index_name=config.pinecone_index_name,
            cloud=config.pinecone_cloud,
            region=config.pinecone_region,
            metric=config.pinecone_metric,
        )
    raise ConfigurationError(f"Unknown vector store backend: {backend}", {"backend": backend})


__all__ = [
    "Collection",
    "QueryResult",
    "VectorItem",
    "VectorStoreClient",
    "FAISSClient",
    "PineconeClient",
    "create_vector_store",
]
