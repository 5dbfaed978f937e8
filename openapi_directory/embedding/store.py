"""SQLite persistence of embeddings and their metadata hashes."""

import json
import logging
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

logger = logging.getLogger(__name__)

# SQLite's default limit on bound parameters is 999
_SELECT_CHUNK = 500


@dataclass
class StoredEmbedding:
    """Persisted state of one token entry."""

    id: str
    vector: List[float]
    metadata_hash: str


class EmbeddingStore:
    """Embedding rows keyed by token entry id.

    The store is passed explicitly to each index, so separate specifications (or tests)
    can use separate databases. Pass ":memory:" for a throwaway store.
    """

    def __init__(self, db_path: str = ":memory:"):
        """Initialize embedding store.

        Args:
            db_path: SQLite database file, or ":memory:"
        """
        self.db_path = db_path
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn: Optional[sqlite3.Connection] = sqlite3.connect(db_path)
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS embeddings ("
            " id TEXT PRIMARY KEY,"
            " vector TEXT NOT NULL,"
            " metadata_hash TEXT NOT NULL)"
        )
        self.conn.commit()
        self._in_transaction = False
        logger.debug(f"Opened embedding store at {db_path}")

    def _connection(self) -> sqlite3.Connection:
        if self.conn is None:
            raise RuntimeError("EmbeddingStore is closed")
        return self.conn

    def retrieve(self, ids: Iterable[str]) -> Dict[str, StoredEmbedding]:
        """Stored rows for the given ids; unknown ids are absent from the result."""
        id_list = list(dict.fromkeys(ids))
        rows: Dict[str, StoredEmbedding] = {}
        conn = self._connection()
        for start in range(0, len(id_list), _SELECT_CHUNK):
            chunk = id_list[start : start + _SELECT_CHUNK]
            placeholders = ",".join("?" for _ in chunk)
            cursor = conn.execute(
                f"SELECT id, vector, metadata_hash FROM embeddings WHERE id IN ({placeholders})",
                chunk,
            )
            for row_id, vector, metadata_hash in cursor.fetchall():
                rows[row_id] = StoredEmbedding(row_id, json.loads(vector), metadata_hash)
        return rows

    @contextmanager
    def transaction(self) -> Iterator["EmbeddingStore"]:
        """Hold the writes made inside the block until it exits.

        Writes commit together when the block completes and roll back together when it
        raises. Example:

            with store.transaction():
                store.store(rows)
                vector_store.upsert_items(collection, items)
        """
        conn = self._connection()
        if self._in_transaction:
            raise RuntimeError("EmbeddingStore transaction already open")
        self._in_transaction = True
        try:
            yield self
        except BaseException:
            conn.rollback()
            raise
        else:
            conn.commit()
        finally:
            self._in_transaction = False

    def store(self, embeddings: List[StoredEmbedding]) -> None:
        """Insert or replace rows in one transaction.

        Inside `transaction()` the rows are committed when that block exits.
        """
        if not embeddings:
            return
        conn = self._connection()
        try:
            conn.executemany(
                "INSERT OR REPLACE INTO embeddings (id, vector, metadata_hash) VALUES (?, ?, ?)",
                [(e.id, json.dumps(e.vector), e.metadata_hash) for e in embeddings],
            )
        except sqlite3.Error:
            if not self._in_transaction:
                conn.rollback()
            raise
        if not self._in_transaction:
            conn.commit()
        logger.debug(f"Stored {len(embeddings)} embeddings")

    def count(self) -> int:
        return self._connection().execute("SELECT COUNT(*) FROM embeddings").fetchone()[0]

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self) -> "EmbeddingStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


__all__ = ["EmbeddingStore", "StoredEmbedding"]
