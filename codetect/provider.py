"""Choosing and configuring an embedding provider."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Mapping

from codetect.embedder import Embedder, NullEmbedder
from codetect.litellm import DEFAULT_LITELLM_URL, LiteLLMClient
from codetect.ollama import DEFAULT_OLLAMA_URL, OllamaClient


class Provider(str, Enum):
    """Kind of embedding provider."""

    OLLAMA = "ollama"
    LITELLM = "litellm"
    OFF = "off"

    def __str__(self) -> str:
        return _DISPLAY_NAMES[self]

    def is_enabled(self) -> bool:
        """Whether embedding is switched on."""
        return self is not Provider.OFF


_DISPLAY_NAMES = {
    Provider.OLLAMA: "Ollama",
    Provider.LITELLM: "LiteLLM",
    Provider.OFF: "Disabled",
}

_PROVIDER_ALIASES = {
    "ollama": Provider.OLLAMA,
    "litellm": Provider.LITELLM,
    "off": Provider.OFF,
    "disabled": Provider.OFF,
    "none": Provider.OFF,
}


@dataclass
class ProviderConfig:
    """Settings for building an embedder; empty model and zero dimensions mean provider defaults."""

    provider: Provider | str = Provider.OLLAMA
    ollama_url: str = DEFAULT_OLLAMA_URL
    litellm_url: str = DEFAULT_LITELLM_URL
    litellm_key: str = ""
    model: str = ""
    dimensions: int = 0


def load_config_from_env(environ: Mapping[str, str] | None = None) -> ProviderConfig:
    """Build a configuration from ``CODETECT_*`` environment variables."""
    env = os.environ if environ is None else environ
    config = ProviderConfig()

    name = env.get("CODETECT_EMBEDDING_PROVIDER", "")
    if name:
        provider = _PROVIDER_ALIASES.get(name.lower())
        if provider is None:
            print(
                f'warning: unknown embedding provider "{name}", using ollama',
                file=sys.stderr,
            )
        else:
            config.provider = provider

    if url := env.get("CODETECT_OLLAMA_URL", ""):
        config.ollama_url = url
    if url := env.get("CODETECT_LITELLM_URL", ""):
        config.litellm_url = url
    if key := env.get("CODETECT_LITELLM_API_KEY", ""):
        config.litellm_key = key
    if model := env.get("CODETECT_EMBEDDING_MODEL", ""):
        config.model = model
    if dim := env.get("CODETECT_EMBEDDING_DIMENSIONS", ""):
        try:
            value = int(dim)
        except ValueError:
            value = 0
        if value > 0:
            config.dimensions = value

    return config


def new_embedder(config: ProviderConfig) -> Embedder:
    """Create the embedder a configuration describes."""
    try:
        provider = Provider(config.provider)
    except ValueError:
        raise ValueError(f"unknown provider: {config.provider}") from None

    if provider is Provider.OFF:
        return NullEmbedder()

    if provider is Provider.OLLAMA:
        ollama_options = {"base_url": config.ollama_url}
        if config.model:
            ollama_options["model"] = config.model
        return OllamaClient(**ollama_options)

    litellm_options: dict[str, object] = {"base_url": config.litellm_url}
    if config.litellm_key:
        litellm_options["api_key"] = config.litellm_key
    if config.model:
        litellm_options["model"] = config.model
    if config.dimensions > 0:
        litellm_options["dimensions"] = config.dimensions
    return LiteLLMClient(**litellm_options)


def new_embedder_from_env(environ: Mapping[str, str] | None = None) -> Embedder:
    """Create an embedder from environment configuration."""
    return new_embedder(load_config_from_env(environ))