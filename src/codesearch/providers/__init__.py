"""Embedding providers — protocol, implementations, and name-based dispatch."""

from __future__ import annotations

from enum import StrEnum

from codesearch.exceptions import ConfigurationError
from codesearch.providers._protocol import EmbeddingProvider
from codesearch.providers.litellm import LiteLLMEmbedding
from codesearch.providers.ollama import OllamaEmbedding


class ProviderKind(StrEnum):
    """Closed set of supported embedding providers."""

    LITELLM = "litellm"
    OLLAMA = "ollama"

    @classmethod
    def parse(cls, name: str) -> ProviderKind:
        """Resolve *name* to a provider kind, or raise ``ConfigurationError``."""
        try:
            return cls(name.strip().lower())
        except ValueError:
            choices = ", ".join(k.value for k in cls)
            raise ConfigurationError(
                f"unsupported client: {name!r} (choose from {choices})"
            ) from None


def create_provider(name: str, model: str) -> EmbeddingProvider:
    """Build the provider registered under *name* for *model*."""
    if not model.strip():
        raise ConfigurationError("model name cannot be empty")
    kind = ProviderKind.parse(name)
    if kind is ProviderKind.OLLAMA:
        return OllamaEmbedding(model=model)
    return LiteLLMEmbedding(model=model)


__all__ = [
    "EmbeddingProvider",
    "LiteLLMEmbedding",
    "OllamaEmbedding",
    "ProviderKind",
    "create_provider",
]
