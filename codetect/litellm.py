"""Embedding client for OpenAI-compatible APIs such as a LiteLLM proxy."""

from __future__ import annotations

from typing import Sequence

import requests

from codetect.embedder import Embedder, EmbeddingError

DEFAULT_LITELLM_URL = "http://localhost:4000"
DEFAULT_LITELLM_MODEL = "text-embedding-3-small"
DEFAULT_LITELLM_DIMENSIONS = 1536
DEFAULT_LITELLM_TIMEOUT = 30.0

_PROBE_TIMEOUT = 5.0


class LiteLLMClient(Embedder):
    """Generates embeddings through an OpenAI-compatible ``/v1/embeddings`` API."""

    def __init__(
        self,
        base_url: str = DEFAULT_LITELLM_URL,
        api_key: str = "",
        model: str = DEFAULT_LITELLM_MODEL,
        dimensions: int = DEFAULT_LITELLM_DIMENSIONS,
        timeout: float = DEFAULT_LITELLM_TIMEOUT,
    ) -> None:
        self.base_url = base_url
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._dimensions = dimensions
        self._session = requests.Session()

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": "Bearer " + self.api_key} if self.api_key else {}

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []

        try:
            resp = self._session.post(
                self.base_url + "/v1/embeddings",
                json={"model": self.model, "input": list(texts)},
                headers=self._auth_headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise EmbeddingError(f"sending request: {exc}") from exc

        if resp.status_code != 200:
            raise EmbeddingError(
                f"LiteLLM returned status {resp.status_code}: {resp.text}"
            )
        try:
            payload = resp.json()
        except ValueError as exc:
            raise EmbeddingError(f"decoding response: {exc}") from exc
        if not isinstance(payload, dict):
            raise EmbeddingError("decoding response: expected a JSON object")

        error = payload.get("error")
        if error:
            message = error.get("message", "") if isinstance(error, dict) else str(error)
            raise EmbeddingError(f"LiteLLM error: {message}")

        data = payload.get("data") or []
        if len(data) != len(texts):
            raise EmbeddingError(
                f"unexpected response: got {len(data)} embeddings for {len(texts)} texts"
            )

        embeddings: list[list[float] | None] = [None] * len(texts)
        for item in data:
            index = item.get("index", 0)
            if not isinstance(index, int) or not 0 <= index < len(texts):
                raise EmbeddingError(f"invalid index {index} in response")
            embeddings[index] = [float(x) for x in item.get("embedding") or []]
        return embeddings  # type: ignore[return-value]

    def available(self) -> bool:
        """Whether the server answers; 401 counts, as the server is running."""
        try:
            resp = self._session.get(
                self.base_url + "/health",
                headers=self._auth_headers(),
                timeout=min(_PROBE_TIMEOUT, self.timeout),
            )
        except requests.RequestException:
            return False
        return resp.status_code in (200, 401)

    def provider_id(self) -> str:
        return "litellm:" + self.model

    def dimensions(self) -> int:
        return self._dimensions