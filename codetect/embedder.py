"""The interface shared by embedding providers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence


class EmbeddingError(Exception):
    """Raised when a provider fails to produce embeddings."""


class Embedder(ABC):
    """A source of embedding vectors for text."""

    @abstractmethod
    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        """Embeddings for ``texts``, in the same order."""

    @abstractmethod
    def available(self) -> bool:
        """Whether the provider is ready to serve requests."""

    @abstractmethod
    def provider_id(self) -> str:
        """Identifier of the form ``provider:model`` used to separate indexes."""

    @abstractmethod
    def dimensions(self) -> int:
        """Length of the vectors the provider produces."""


class NullEmbedder(Embedder):
    """An embedder used when embedding is switched off."""

    def embed(self, texts: Sequence[str]) -> list[list[float]]:
        return []

    def available(self) -> bool:
        return False

    def provider_id(self) -> str:
        return "off"

    def dimensions(self) -> int:
        return 0