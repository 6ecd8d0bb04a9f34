"""LiteLLMEmbedding — embeddings from a LiteLLM proxy's OpenAI-compatible API."""

from __future__ import annotations

from openai import AsyncOpenAI, OpenAIError

from codesearch.config import ProviderProfile, litellm_profile
from codesearch.exceptions import ProviderError


class LiteLLMEmbedding:
    """Async embedding provider for a LiteLLM proxy (``POST /v1/embeddings``).

    Uses ``AsyncOpenAI`` pointed at the proxy; transient failures are
    retried by the SDK up to *max_retries* times with exponential backoff.
    """

    def __init__(
        self,
        *,
        model: str,
        profile: ProviderProfile | None = None,
        max_retries: int = 4,
    ) -> None:
        profile = profile or litellm_profile()
        self._model = model
        self._client = AsyncOpenAI(
            api_key=profile.api_key or "unused",
            base_url=profile.base_url.rstrip("/") + "/v1",
            max_retries=max_retries,
            timeout=profile.timeout,
        )

    async def embed(self, text: str) -> list[float]:
        """Embed *text* via the proxy."""
        if not text:
            raise ProviderError("input text cannot be empty")

        try:
            response = await self._client.embeddings.create(
                input=text,
                model=self._model,
                encoding_format="float",
            )
        except OpenAIError as exc:
            raise ProviderError(f"litellm embedding request failed: {exc}") from exc

        data = sorted(response.data, key=lambda e: e.index)
        if not data or not data[0].embedding:
            raise ProviderError("litellm returned an empty embedding")
        return list(data[0].embedding)

    @property
    def model_name(self) -> str:
        return self._model

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._client.close()
