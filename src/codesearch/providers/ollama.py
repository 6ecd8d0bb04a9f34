"""OllamaEmbedding — embeddings from a local Ollama server (``POST /api/embed``)."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from codesearch.config import ProviderProfile, ollama_profile
from codesearch.exceptions import ProviderError

logger = logging.getLogger(__name__)

_EMBED_PATH = "/api/embed"


class OllamaEmbedding:
    """Async embedding provider backed by Ollama's native embed endpoint.

    Timeouts and transport errors are retried up to *max_retries* times,
    sleeping ``backoff * 2**attempt`` seconds between attempts.  HTTP
    error statuses, other httpx errors and malformed bodies are not retried
    and surface as ``ProviderError``.
    """

    def __init__(
        self,
        *,
        model: str,
        profile: ProviderProfile | None = None,
        max_retries: int = 3,
        backoff: float = 1.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        profile = profile or ollama_profile()
        headers = {"Accept": "application/json"}
        if profile.api_key:
            headers["Authorization"] = f"Bearer {profile.api_key}"

        self._model = model
        self._max_retries = max_retries
        self._backoff = backoff
        self._client = httpx.AsyncClient(
            base_url=profile.base_url,
            timeout=profile.timeout,
            headers=headers,
            follow_redirects=True,
            transport=transport,
        )

    async def embed(self, text: str) -> list[float]:
        """Embed *text* via Ollama."""
        if not text:
            raise ProviderError("input text cannot be empty")

        response = await self._post({"model": self._model, "input": text})
        if response.is_error:
            raise ProviderError(
                f"ollama returned HTTP {response.status_code}: {response.text.strip()}"
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise ProviderError(f"failed to parse ollama response: {exc}") from exc

        try:
            vector = [float(x) for x in _first_embedding(payload) or ()]
        except (TypeError, ValueError, AttributeError, KeyError, IndexError) as exc:
            raise ProviderError(f"malformed ollama embedding response: {exc}") from exc
        if not vector:
            raise ProviderError("ollama returned an empty embedding")
        return vector

    @property
    def model_name(self) -> str:
        return self._model

    async def close(self) -> None:
        """Close the underlying httpx client."""
        await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    async def _post(self, body: dict[str, Any]) -> httpx.Response:
        attempt = 0
        while True:
            try:
                return await self._client.post(_EMBED_PATH, json=body)
            except (httpx.TimeoutException, httpx.TransportError) as exc:
                if attempt >= self._max_retries:
                    raise ProviderError(f"failed to send request to ollama: {exc}") from exc
                delay = self._backoff * 2**attempt
                logger.debug("Ollama request failed (%s), retrying in %.1fs", exc, delay)
                await asyncio.sleep(delay)
                attempt += 1
            except httpx.HTTPError as exc:
                raise ProviderError(f"ollama request failed: {exc}") from exc


def _first_embedding(payload: Any) -> list[float] | None:
    """Pick the first vector from an ``/api/embed`` or OpenAI-style response."""
    if not isinstance(payload, dict):
        return None
    embeddings = payload.get("embeddings")
    if embeddings:
        return embeddings[0]
    data = payload.get("data")
    if data:
        return data[0]["embedding"]
    return None
