"""FAISS vector backend with on-disk persistence."""

import hashlib
import logging
import pickle
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import faiss
import numpy as np

from .base import Collection, QueryResult, VectorItem, VectorStoreClient

logger = logging.getLogger(__name__)


def faiss_id(item_id: str) -> int:
    """Stable positive int64 id for a string id."""
    return int(hashlib.sha256(item_id.encode("utf-8")).hexdigest()[:15], 16)


class FAISSClient(VectorStoreClient):
    """Inner product search over normalized vectors, one index per collection.

    FAISS only stores vectors, so metadata lives beside the index in a pickle file. With
    normalized vectors the inner product is the cosine similarity and the reported
    distance is `1 - similarity`.
    """

    def __init__(self, persist_dir: Optional[str] = None):
        """Initialize FAISS client.

        Args:
            persist_dir: Directory for index and metadata files (None keeps everything
                in memory)
        """
        self.persist_dir = persist_dir
        self.indexes: Dict[str, Any] = {}
        self.metadata: Dict[str, Dict[int, Tuple[str, Dict[str, Any]]]] = {}

    def _paths(self, name: str) -> Tuple[Path, Path]:
        directory = Path(self.persist_dir)
        directory.mkdir(parents=True, exist_ok=True)
        return directory / f"{name}.faiss", directory / f"{name}.metadata.pkl"

    def _load(self, name: str) -> bool:
        if not self.persist_dir:
            return False
        index_path, metadata_path = self._paths(name)
        if not index_path.exists():
            return False

        try:
            self.indexes[name] = faiss.read_index(str(index_path))
            with open(metadata_path, "rb") as f:
                self.metadata[name] = pickle.load(f)
        except (OSError, RuntimeError, pickle.UnpicklingError) as e:
            logger.error(f"Failed to load FAISS collection {name}: {e}")
            raise
        logger.info(f"Loaded FAISS collection {name} with {self.indexes[name].ntotal} vectors")
        return True

    def _save(self, name: str) -> None:
        if not self.persist_dir:
            return
        index_path, metadata_path = self._paths(name)
        faiss.write_index(self.indexes[name], str(index_path))
        with open(metadata_path, "wb") as f:
            pickle.dump(self.metadata[name], f)
        logger.debug(f"Saved FAISS collection {name}")

    def find_or_create_collection(self, name: str, dimension: Optional[int] = None) -> Collection:
        if name not in self.indexes and not self._load(name):
            if dimension is None:
                # Created lazily on the first upsert, once the dimension is known
                return Collection(name=name, dimension=None)
            self.indexes[name] = faiss.IndexIDMap(faiss.IndexFlatIP(dimension))
            self.metadata[name] = {}
            logger.info(f"Created FAISS collection {name} with dimension {dimension}")
        return Collection(name=name, dimension=self.indexes[name].d)

    def upsert_items(self, collection: Collection, items: List[VectorItem]) -> None:
        if not items:
            return

        vectors = np.array([item.vector for item in items], dtype=np.float32)
        if collection.name not in self.indexes:
            collection = self.find_or_create_collection(collection.name, vectors.shape[1])

        index = self.indexes[collection.name]
        if vectors.shape[1] != index.d:
            raise ValueError(
                f"Vector dimension {vectors.shape[1]} does not match "
                f"index dimension {index.d}"
            )

        faiss.normalize_L2(vectors)
        ids = np.array([faiss_id(item.id) for item in items], dtype=np.int64)

        # Replace items that are already present
        index.remove_ids(ids)
        index.add_with_ids(vectors, ids)

        metadata = self.metadata[collection.name]
        for int_id, item in zip(ids, items):
            metadata[int(int_id)] = (item.id, dict(item.metadata))

        logger.debug(f"Upserted {len(items)} vectors into {collection.name}")
        self._save(collection.name)

    def query_items(
        self,
        collection: Collection,
        vector: List[float],
        limit: int,
        scopes: Optional[List[str]] = None,
    ) -> List[QueryResult]:
        index = self.indexes.get(collection.name)
        if index is None or index.ntotal == 0 or limit <= 0:
            return []

        query = np.array([vector], dtype=np.float32)
        faiss.normalize_L2(query)

        # FAISS has no metadata filter: rank everything, then filter
        k = index.ntotal if scopes is not None else min(limit, index.ntotal)
        similarities, int_ids = index.search(query, k)

        allowed = set(scopes or [])
        metadata = self.metadata[collection.name]
        results: List[QueryResult] = []
        for similarity, int_id in zip(similarities[0], int_ids[0]):
            if int_id == -1:
                continue
            item_id, item_metadata = metadata[int(int_id)]
            if scopes is not None and not allowed.intersection(item_metadata.get("scopes") or []):
                continue
            results.append(
                QueryResult(id=item_id, metadata=item_metadata, distance=1.0 - float(similarity))
            )
            if len(results) >= limit:
                break
        return results

    def purge_collection(self, collection: Collection) -> None:
        index = self.indexes.get(collection.name)
        if index is not None:
            self.indexes[collection.name] = faiss.IndexIDMap(faiss.IndexFlatIP(index.d))
            self.metadata[collection.name] = {}
            self._save(collection.name)
        logger.info(f"Purged FAISS collection {collection.name}")


__all__ = ["FAISSClient", "faiss_id"]
