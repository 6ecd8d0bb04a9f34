"""EmbeddingProvider protocol."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Async protocol for text-to-vector embedding.

    Implementations raise :class:`~codesearch.exceptions.ProviderError` on
    any failure, including an empty embedding in the response.  Retries for
    transient errors happen inside the provider.
    """

    async def embed(self, text: str) -> list[float]:
        """Embed a single text string into a vector."""
        ...

    @property
    def model_name(self) -> str:
        """Name of the embedding model."""
        ...

    async def close(self) -> None:
        """Release the underlying HTTP client."""
        ...
