"""Embedding client for an Ollama server."""

from __future__ import annotations

from typing import Sequence

import requests

from codetect.embedder import Embedder, EmbeddingError

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_MODEL = "nomic-embed-text"
DEFAULT_TIMEOUT = 30.0
DEFAULT_DIMENSIONS = 768

_PROBE_TIMEOUT = 5.0

_MODEL_DIMENSIONS = {
    "nomic-embed-text": 768,
    "nomic-embed-text:latest": 768,
    "mxbai-embed-large": 1024,
    "mxbai-embed-large:latest": 1024,
    "all-minilm": 384,
    "all-minilm:latest": 384,
}


class OllamaClient(Embedder):
    """Generates embeddings through the Ollama HTTP API."""

    def __init__(
        self,
        base_url: str = DEFAULT_OLLAMA_URL,
        model: str = DEFAULT_MODEL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self._session = requests.Session()

    def _get_tags(self) -> requests.Response | None:
        try:
            return self._session.get(
                self.base_url + "/api/tags",
                timeout=min(_PROBE_TIMEOUT, self.timeout),
            )
        except requests.RequestException:
            return None

    def available(self) -> bool:
        """Whether the Ollama server answers."""
        resp = self._get_tags()
        return resp is not None and resp.status_code == 200

    def model_available(self) -> bool:
        """Whether the configured model is installed on the server."""
        resp = self._get_tags()
        if resp is None or resp.status_code != 200:
            return False
        try:
            payload = resp.json()
        except ValueError:
            return False
        if not isinstance(payload, dict):
            return False
        names = {
            entry.get("name")
            for entry in payload.get("models") or []
            if isinstance(entry, dict)
        }
        return self.model in names or f"{self.model}:latest" in names

    def embed_single(self, text: str) -> list[float]:
        """Embedding of one text."""
        try:
            resp = self._session.post(
                self.base_url + "/api/embeddings",
                json={"model": self.model, "prompt": text},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise EmbeddingError(f"sending request: {exc}") from exc

        if resp.status_code != 200:
            raise EmbeddingError(
                f"ollama returned status {resp.status_code}: {resp.text}"
            )
        try:
            payload = resp.json()
        except ValueError as exc:
            raise EmbeddingError(f"decoding response: {exc}") from exc

        embedding = payload.get("embedding") if isinstance(payload, dict) else None
        if not embedding:
            raise EmbeddingError("empty embedding returned")
        return [float(x) for x in embedding]

    def embed_batch(self, texts: Sequence[str]) -> list[list[float]]:
        """Embeddings of several texts, one request each, in order."""
        embeddings = []
        for i, text in enumerate(texts):
            try:
                embeddings.append(self.embed_single(text))
            except EmbeddingError as exc:
                raise EmbeddingError(f"embedding text {i}: {exc}") from exc
        return embeddings

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        return self.embed_batch(texts)

    def provider_id(self) -> str:
        return "ollama:" + self.model

    def dimensions(self) -> int:
        return _MODEL_DIMENSIONS.get(self.model, DEFAULT_DIMENSIONS)