"""Semantic search over embedded code chunks."""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field
from typing import Callable, Sequence

from codetect.chunker import Chunk
from codetect.embedder import Embedder, EmbeddingError
from codetect.store import EmbeddingStore
from codetect.vectors import top_k_by_cosine_similarity

DEFAULT_LIMIT = 10
MAX_SNIPPET_LENGTH = 500


@dataclass
class SemanticResult:
    """One matching chunk."""

    path: str
    start_line: int
    end_line: int
    snippet: str
    score: float


@dataclass
class SemanticSearchResult:
    """Outcome of a semantic search."""

    available: bool
    results: list[SemanticResult] = field(default_factory=list)
    error: str = ""

    def to_dict(self) -> dict:
        """JSON-ready form; ``error`` is left out when empty."""
        data = asdict(self)
        if not self.error:
            del data["error"]
        return data


def _placeholder_snippet(path: str, start_line: int, end_line: int) -> str:
    return f"[{path}:{start_line}-{end_line}] ({end_line - start_line + 1} lines)"


class SemanticSearcher:
    """Embeds queries and ranks stored chunks by cosine similarity."""

    def __init__(self, store: EmbeddingStore, embedder: Embedder | None) -> None:
        self.store = store
        self.embedder = embedder

    def available(self) -> bool:
        """Whether an embedder is configured and ready."""
        return self.embedder is not None and self.embedder.available()

    def provider_id(self) -> str:
        """Identifier of the embedder, or ``off`` when there is none."""
        return "off" if self.embedder is None else self.embedder.provider_id()

    def search(self, query: str, limit: int = DEFAULT_LIMIT) -> SemanticSearchResult:
        """Chunks most similar to ``query``, best first; non-positive scores are dropped."""
        if limit <= 0:
            limit = DEFAULT_LIMIT

        if not self.available():
            return SemanticSearchResult(
                available=False, error="Embedding provider not available"
            )

        records = self.store.get_all()
        if not records:
            return SemanticSearchResult(
                available=True, error="No embeddings indexed. Run 'make embed' first."
            )

        assert self.embedder is not None
        try:
            query_embeddings = self.embedder.embed([query])
        except EmbeddingError as exc:
            raise EmbeddingError(f"embedding query: {exc}") from exc
        if not query_embeddings:
            raise EmbeddingError("no embedding returned for query")

        top = top_k_by_cosine_similarity(
            query_embeddings[0], [r.embedding for r in records], limit
        )
        results = []
        for item in top:
            if item.score <= 0:
                continue
            record = records[item.index]
            results.append(
                SemanticResult(
                    path=record.path,
                    start_line=record.start_line,
                    end_line=record.end_line,
                    snippet=_placeholder_snippet(
                        record.path, record.start_line, record.end_line
                    ),
                    score=item.score,
                )
            )
        return SemanticSearchResult(available=True, results=results)

    def search_with_snippets(
        self,
        query: str,
        limit: int = DEFAULT_LIMIT,
        snippet_fn: Callable[[str, int, int], str] | None = None,
    ) -> SemanticSearchResult:
        """Search, filling snippets from ``snippet_fn`` cut to 500 characters."""
        result = self.search(query, limit)
        if snippet_fn is not None and result.available:
            for item in result.results:
                snippet = snippet_fn(item.path, item.start_line, item.end_line)
                if len(snippet) > MAX_SNIPPET_LENGTH:
                    snippet = snippet[:MAX_SNIPPET_LENGTH] + "..."
                item.snippet = snippet
        return result

    def index_chunks(
        self,
        chunks: Sequence[Chunk],
        progress: Callable[[int, int], None] | None = None,
    ) -> int:
        """Embed and store the chunks not yet indexed; returns how many were stored.

        Chunks that fail to embed are skipped and counted on stderr.
        """
        if not chunks:
            return 0
        if not self.available():
            raise EmbeddingError("embedding provider not available")
        assert self.embedder is not None

        provider_id = self.embedder.provider_id()
        to_embed = [c for c in chunks if not self.store.has_embedding(c, provider_id)]
        if not to_embed:
            return 0

        done_chunks: list[Chunk] = []
        done_vectors: list[list[float]] = []
        skipped = 0
        total = len(to_embed)
        for position, chunk in enumerate(to_embed, start=1):
            if progress is not None:
                progress(position, total)
            try:
                embeddings = self.embedder.embed([chunk.content])
            except EmbeddingError:
                skipped += 1
                continue
            if not embeddings or not embeddings[0]:
                skipped += 1
                continue
            done_chunks.append(chunk)
            done_vectors.append(list(embeddings[0]))

        if skipped:
            print(
                f"\n[codetect-index] skipped {skipped} chunks that failed to embed",
                file=sys.stderr,
            )

        if done_chunks:
            self.store.save_batch(done_chunks, done_vectors, provider_id)
        return len(done_chunks)


def truncate_snippet(s: str, max_len: int) -> str:
    """Cut ``s`` to at most ``max_len`` characters, at a line break where possible."""
    if len(s) <= max_len:
        return s

    kept: list[str] = []
    length = 0
    for line in s.split("\n"):
        if length + len(line) + 1 > max_len:
            break
        length += len(line) + (1 if kept else 0)
        kept.append(line)

    if length == 0:
        return s[:max_len] + "..."
    return "\n".join(kept) + "\n..."