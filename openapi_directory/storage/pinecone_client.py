"""Pinecone vector backend."""

import logging
from typing import Any, Dict, List, Optional

from pinecone import Pinecone, ServerlessSpec

from ..exceptions import ConfigurationError
from .base import Collection, QueryResult, VectorItem, VectorStoreClient

logger = logging.getLogger(__name__)


class PineconeClient(VectorStoreClient):
    """Managed vector backend; each collection is a namespace of one serverless index."""

    def __init__(
        self,
        api_key: Optional[str],
        index_name: str,
        cloud: str = "aws",
        region: str = "us-east-1",
        metric: str = "cosine",
    ):
        """Initialize Pinecone client.

        Args:
            api_key: Pinecone API key
            index_name: Serverless index holding every collection
            cloud: Cloud of the serverless index
            region: Region of the serverless index
            metric: Similarity metric used when the index is created
        """
        if not api_key:
            raise ConfigurationError("PINECONE_API_KEY is required for the pinecone backend")
        self.pc = Pinecone(api_key=api_key)
        self.index_name = index_name
        self.cloud = cloud
        self.region = region
        self.metric = metric
        self.index = None

    def _connect(self, dimension: Optional[int]) -> bool:
        if self.index is not None:
            return True

        if self.index_name not in self.pc.list_indexes().names():
            if dimension is None:
                return False
            logger.info(f"Creating Pinecone index {self.index_name} ({dimension} dimensions)")
            self.pc.create_index(
                name=self.index_name,
                dimension=dimension,
                metric=self.metric,
                spec=ServerlessSpec(cloud=self.cloud, region=self.region),
            )

        self.index = self.pc.Index(self.index_name)
        return True

    def find_or_create_collection(self, name: str, dimension: Optional[int] = None) -> Collection:
        self._connect(dimension)
        return Collection(name=name, dimension=dimension)

    def upsert_items(self, collection: Collection, items: List[VectorItem]) -> None:
        if not items:
            return
        self._connect(len(items[0].vector))

        vectors: List[Dict[str, Any]] = [
            {"id": item.id, "values": list(item.vector), "metadata": item.metadata}
            for item in items
        ]
        try:
            self.index.upsert(vectors=vectors, namespace=collection.name)
        except Exception as e:
            logger.error(f"Failed to upsert vectors into {collection.name}: {e}")
            raise
        logger.debug(f"Upserted {len(items)} vectors into {collection.name}")

    def query_items(
        self,
        collection: Collection,
        vector: List[float],
        limit: int,
        scopes: Optional[List[str]] = None,
    ) -> List[QueryResult]:
        if not self._connect(None) or (scopes is not None and not scopes):
            return []

        query_filter = {"scopes": {"$in": list(scopes)}} if scopes is not None else None
        results = self.index.query(
            vector=list(vector),
            top_k=limit,
            namespace=collection.name,
            filter=query_filter,
            include_metadata=True,
        )
        return [
            QueryResult(
                id=match.id,
                metadata=dict(match.metadata or {}),
                distance=1.0 - float(match.score),
            )
            for match in results.matches
        ]

    def purge_collection(self, collection: Collection) -> None:
        if not self._connect(None):
            return
        self.index.delete(delete_all=True, namespace=collection.name)
        logger.info(f"Purged Pinecone namespace {collection.name}")


__all__ = ["PineconeClient"]
