"""Persistent storage of chunk embeddings in SQLite."""

from __future__ import annotations

import hashlib
import json
import sqlite3
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from os import PathLike
from typing import Sequence

from codetect.chunker import Chunk

_SCHEMA = """
CREATE TABLE IF NOT EXISTS embeddings (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    repo_root TEXT NOT NULL,
    path TEXT NOT NULL,
    start_line INTEGER NOT NULL,
    end_line INTEGER NOT NULL,
    content_hash TEXT NOT NULL,
    embedding TEXT NOT NULL,
    model TEXT NOT NULL,
    created_at INTEGER NOT NULL,
    UNIQUE(repo_root, path, start_line, end_line, model)
);

CREATE INDEX IF NOT EXISTS idx_embeddings_path ON embeddings(path);
CREATE INDEX IF NOT EXISTS idx_embeddings_hash ON embeddings(content_hash);
CREATE INDEX IF NOT EXISTS idx_embeddings_repo_path ON embeddings(repo_root, path);
"""

_UPSERT = """
INSERT INTO embeddings
    (repo_root, path, start_line, end_line, content_hash, embedding, model, created_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?)
ON CONFLICT(repo_root, path, start_line, end_line, model) DO UPDATE SET
    content_hash = excluded.content_hash,
    embedding = excluded.embedding,
    created_at = excluded.created_at
"""

_SELECT = """
SELECT id, path, start_line, end_line, content_hash, embedding, model, created_at
FROM embeddings
"""


def hash_content(content: str) -> str:
    """Hex SHA-256 digest of the UTF-8 encoded content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


@dataclass(frozen=True)
class EmbeddingRecord:
    """An embedding as stored for one chunk."""

    id: int
    path: str
    start_line: int
    end_line: int
    content_hash: str
    embedding: list[float] = field(default_factory=list)
    model: str = ""
    created_at: datetime = field(
        default_factory=lambda: datetime.fromtimestamp(0, tz=timezone.utc)
    )


class EmbeddingStore:
    """Embeddings of one repository, kept in an SQLite database.

    ``database`` is a filesystem path, ``":memory:"``, or an open
    :class:`sqlite3.Connection`; a connection passed in is not closed by
    :meth:`close`. Several repositories may share one database, each store
    seeing only the rows of its own ``repo_root``.
    """

    def __init__(
        self,
        database: str | PathLike[str] | sqlite3.Connection,
        repo_root: str,
    ) -> None:
        if isinstance(database, sqlite3.Connection):
            self._conn = database
            self._owns_connection = False
        else:
            self._conn = sqlite3.connect(str(database))
            self._owns_connection = True
        self.repo_root = repo_root
        self._conn.executescript(_SCHEMA)

    @staticmethod
    def _row(chunk: Chunk, embedding: Sequence[float], model: str, now: int, repo: str):
        return (
            repo,
            chunk.path,
            chunk.start_line,
            chunk.end_line,
            hash_content(chunk.content),
            json.dumps([float(x) for x in embedding]),
            model,
            now,
        )

    def save(self, chunk: Chunk, embedding: Sequence[float], model: str) -> None:
        """Store or replace the embedding of one chunk."""
        with self._conn:
            self._conn.execute(
                _UPSERT,
                self._row(chunk, embedding, model, int(time.time()), self.repo_root),
            )

    def save_batch(
        self,
        chunks: Sequence[Chunk],
        embeddings: Sequence[Sequence[float]],
        model: str,
    ) -> None:
        """Store many embeddings in one transaction."""
        if len(chunks) != len(embeddings):
            raise ValueError("chunks and embeddings length mismatch")
        now = int(time.time())
        rows = [
            self._row(chunk, emb, model, now, self.repo_root)
            for chunk, emb in zip(chunks, embeddings)
        ]
        with self._conn:
            self._conn.executemany(_UPSERT, rows)

    def _records(self, query: str, params: tuple) -> list[EmbeddingRecord]:
        records = []
        for row in self._conn.execute(query, params):
            rec_id, path, start, end, content_hash, emb_json, model, created = row
            try:
                embedding = [float(x) for x in json.loads(emb_json)]
            except (ValueError, TypeError) as exc:
                raise ValueError(f"unmarshaling embedding: {exc}") from exc
            records.append(
                EmbeddingRecord(
                    id=rec_id,
                    path=path,
                    start_line=start,
                    end_line=end,
                    content_hash=content_hash,
                    embedding=embedding,
                    model=model,
                    created_at=datetime.fromtimestamp(created, tz=timezone.utc),
                )
            )
        return records

    def get_by_path(self, path: str) -> list[EmbeddingRecord]:
        """Embeddings of one file, ordered by start line."""
        return self._records(
            _SELECT + "WHERE repo_root = ? AND path = ? ORDER BY start_line",
            (self.repo_root, path),
        )

    def get_all(self) -> list[EmbeddingRecord]:
        """All embeddings of this repository, ordered by path and start line."""
        return self._records(
            _SELECT + "WHERE repo_root = ? ORDER BY path, start_line",
            (self.repo_root,),
        )

    def get_all_vectors(self) -> list[EmbeddingRecord]:
        """All embeddings, for searching."""
        return self.get_all()

    def has_embedding(self, chunk: Chunk, model: str) -> bool:
        """Whether the chunk, with its current content, is already embedded."""
        (count,) = self._conn.execute(
            "SELECT COUNT(*) FROM embeddings WHERE repo_root = ? AND path = ? "
            "AND start_line = ? AND end_line = ? AND content_hash = ? AND model = ?",
            (
                self.repo_root,
                chunk.path,
                chunk.start_line,
                chunk.end_line,
                hash_content(chunk.content),
                model,
            ),
        ).fetchone()
        return count > 0

    def delete_by_path(self, path: str) -> None:
        """Remove the embeddings of one file."""
        with self._conn:
            self._conn.execute(
                "DELETE FROM embeddings WHERE repo_root = ? AND path = ?",
                (self.repo_root, path),
            )

    def delete_all(self) -> None:
        """Remove every embedding of this repository."""
        with self._conn:
            self._conn.execute(
                "DELETE FROM embeddings WHERE repo_root = ?", (self.repo_root,)
            )

    def count(self) -> int:
        """Number of stored embeddings."""
        (count,) = self._conn.execute(
            "SELECT COUNT(*) FROM embeddings WHERE repo_root = ?", (self.repo_root,)
        ).fetchone()
        return count

    def stats(self) -> tuple[int, int]:
        """Number of embeddings and number of distinct files."""
        count, files = self._conn.execute(
            "SELECT COUNT(*), COUNT(DISTINCT path) FROM embeddings WHERE repo_root = ?",
            (self.repo_root,),
        ).fetchone()
        return count, files

    def close(self) -> None:
        """Close the database if this store opened it."""
        if self._owns_connection:
            self._conn.close()

    def __enter__(self) -> EmbeddingStore:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()