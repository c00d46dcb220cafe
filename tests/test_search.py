from typing import Sequence

import pytest

from codetect.chunker import Chunk
from codetect.embedder import Embedder, EmbeddingError, NullEmbedder
from codetect.search import SemanticSearcher, truncate_snippet
from codetect.store import EmbeddingStore


class FakeEmbedder(Embedder):
    def __init__(self, vectors, available=True):
        self.vectors = vectors
        self._available = available
        self.calls = []

    def embed(self, texts: Sequence[str]):
        self.calls.append(list(texts))
        result = []
        for text in texts:
            if text not in self.vectors:
                raise EmbeddingError(f"cannot embed {text}")
            result.append(self.vectors[text])
        return result

    def available(self):
        return self._available

    def provider_id(self):
        return "fake:model"

    def dimensions(self):
        return 3


VECTORS = {
    "alpha": [1.0, 0.0, 0.0],
    "beta": [0.0, 1.0, 0.0],
    "gamma": [-1.0, 0.0, 0.0],
    "close": [1.0, 0.1, 0.0],
    "empty": [],
}


@pytest.fixture
def store():
    with EmbeddingStore(":memory:", "/test/repo") as s:
        yield s


def _chunks():
    return [
        Chunk("a.go", 1, 10, "alpha"),
        Chunk("b.go", 1, 5, "beta"),
        Chunk("c.go", 3, 8, "gamma"),
    ]


@pytest.fixture
def indexed(store):
    embedder = FakeEmbedder(VECTORS)
    searcher = SemanticSearcher(store, embedder)
    assert searcher.index_chunks(_chunks()) == 3
    return searcher


@pytest.mark.parametrize(
    "text, max_len, want",
    [
        ("hello", 10, "hello"),
        ("hello", 5, "hello"),
        ("line1\nline2\nline3", 12, "line1\nline2\n..."),
        ("verylonglinewithnonewlines", 10, "verylonglinewithnonewlines"[:10] + "..."),
    ],
)
def test_truncate_snippet(text, max_len, want):
    assert truncate_snippet(text, max_len) == want


def test_unavailable_embedder(store):
    result = SemanticSearcher(store, NullEmbedder()).search("anything")
    assert result.available is False
    assert result.results == []
    assert result.error == "Embedding provider not available"


def test_no_embedder_at_all(store):
    searcher = SemanticSearcher(store, None)
    assert searcher.available() is False
    assert searcher.provider_id() == "off"
    assert searcher.search("q").available is False


def test_empty_index(store):
    result = SemanticSearcher(store, FakeEmbedder(VECTORS)).search("alpha")
    assert result.available is True
    assert result.results == []
    assert result.error == "No embeddings indexed. Run 'make embed' first."


def test_search_ranks_and_drops_non_positive(indexed):
    result = indexed.search("close", 10)
    assert result.available is True
    assert result.error == ""
    assert [r.path for r in result.results] == ["a.go", "b.go"]
    assert result.results[0].score > result.results[1].score > 0
    assert result.results[0].snippet == "[a.go:1-10] (10 lines)"


def test_search_respects_limit(indexed):
    result = indexed.search("close", 1)
    assert [r.path for r in result.results] == ["a.go"]


def test_search_default_limit_for_non_positive(indexed):
    result = indexed.search("close", 0)
    assert len(result.results) == 2


def test_search_query_failure_raises(indexed):
    with pytest.raises(EmbeddingError, match="embedding query"):
        indexed.search("unknown text")


def test_search_with_snippets_truncates(indexed):
    long_text = "x" * 600
    result = indexed.search_with_snippets(
        "alpha", 5, lambda path, start, end: long_text if path == "a.go" else "short"
    )
    assert [r.path for r in result.results] == ["a.go"]
    assert result.results[0].snippet == "x" * 500 + "..."


def test_search_with_snippets_uses_callback(indexed):
    result = indexed.search_with_snippets(
        "close", 5, lambda path, start, end: f"{path}:{start}:{end}"
    )
    assert [r.snippet for r in result.results] == ["a.go:1:10", "b.go:1:5"]


def test_to_dict_omits_empty_error(indexed):
    data = indexed.search("alpha").to_dict()
    assert "error" not in data
    assert data["results"][0]["path"] == "a.go"


def test_index_chunks_stores_with_provider_id(store):
    searcher = SemanticSearcher(store, FakeEmbedder(VECTORS))
    assert searcher.index_chunks(_chunks()) == 3
    assert {r.model for r in store.get_all()} == {"fake:model"}
    assert store.count() == 3


def test_index_chunks_skips_existing_and_failures(store):
    embedder = FakeEmbedder(VECTORS)
    searcher = SemanticSearcher(store, embedder)
    calls = []
    chunks = [*_chunks()[:2], Chunk("d.go", 1, 5, "broken"), Chunk("e.go", 1, 5, "empty")]
    stored = searcher.index_chunks(chunks, lambda cur, total: calls.append((cur, total)))
    assert stored == 2
    assert calls == [(1, 4), (2, 4), (3, 4), (4, 4)]
    assert store.count() == 2

    calls.clear()
    assert searcher.index_chunks(chunks, lambda cur, total: calls.append((cur, total))) == 0
    assert calls == [(1, 2), (2, 2)]


def test_index_chunks_empty_input(store):
    searcher = SemanticSearcher(store, NullEmbedder())
    assert searcher.index_chunks([]) == 0


def test_index_chunks_unavailable_raises(store):
    searcher = SemanticSearcher(store, FakeEmbedder(VECTORS, available=False))
    with pytest.raises(EmbeddingError, match="not available"):
        searcher.index_chunks(_chunks())
    assert store.count() == 0