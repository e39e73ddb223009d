"""Gemini embedding provider adapter.

Calls the Generative Language REST API directly through a shared
``httpx.AsyncClient``: ``embedContent`` for single texts and
``batchEmbedContents`` for batches.
"""

from __future__ import annotations

import httpx
import structlog

from brandrag.config.settings import Settings
from brandrag.interfaces.embedding_provider import IEmbeddingProvider
from brandrag.utils.errors import EmbeddingUnavailableError

logger = structlog.get_logger(logger_name=__name__)

# batchEmbedContents accepts at most 100 requests per call.
_GEMINI_BATCH_LIMIT = 100

_MODEL_DIMENSIONS: dict[str, int] = {
    "embedding-001": 768,
    "text-embedding-004": 768,
    "gemini-embedding-001": 3072,
}


class GeminiEmbeddingProvider(IEmbeddingProvider):
    """Embedding provider backed by the Gemini embeddings REST endpoints."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self._api_key = settings.gemini_api_key
        self._base_url = settings.gemini_base_url.rstrip("/")
        self._model = settings.gemini_embedding_model or "embedding-001"
        self._dimension = _MODEL_DIMENSIONS.get(self._model, 768)
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(15.0, connect=5.0)
        )

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Embed *texts* in slices of 100 using ``batchEmbedContents``."""
        if not texts:
            return []

        all_embeddings: list[list[float]] = []
        for start in range(0, len(texts), _GEMINI_BATCH_LIMIT):
            batch = texts[start : start + _GEMINI_BATCH_LIMIT]
            payload = {
                "requests": [
                    {"model": f"models/{self._model}", "content": {"parts": [{"text": t}]}}
                    for t in batch
                ]
            }
            data = await self._post(f"models/{self._model}:batchEmbedContents", payload)
            embeddings = data.get("embeddings") or []
            if len(embeddings) != len(batch):
                raise EmbeddingUnavailableError(
                    message=(
                        f"Gemini returned {len(embeddings)} embeddings for "
                        f"{len(batch)} inputs"
                    ),
                    provider_name=self.get_provider_name(),
                )
            all_embeddings.extend(list(item.get("values") or []) for item in embeddings)
            logger.info("gemini_embedding_batch", model=self._model, batch_size=len(batch))
        return all_embeddings

    async def embed_single(self, text: str) -> list[float]:
        """Embed one text with ``embedContent``."""
        data = await self._post(
            f"models/{self._model}:embedContent",
            {"content": {"parts": [{"text": text}]}},
        )
        values = (data.get("embedding") or {}).get("values")
        if not values:
            raise EmbeddingUnavailableError(
                message="Gemini response contained no embedding values",
                provider_name=self.get_provider_name(),
            )
        return list(values)

    def get_dimension(self) -> int:
        return self._dimension

    def get_provider_name(self) -> str:
        return "gemini_embedding"

    def is_available(self) -> bool:
        """Return ``True`` if an API key is configured."""
        return bool(self._api_key)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _post(self, path: str, payload: dict) -> dict:
        try:
            response = await self._client.post(
                f"{self._base_url}/{path}",
                headers={"x-goog-api-key": self._api_key},
                json=payload,
            )
            response.raise_for_status()
            return response.json()
        except httpx.TimeoutException as exc:
            raise EmbeddingUnavailableError(
                message="Gemini embedding request timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise EmbeddingUnavailableError(
                message=f"Gemini embedding API returned HTTP {exc.response.status_code}",
                provider_name=self.get_provider_name(),
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise EmbeddingUnavailableError(
                message=f"Gemini embedding request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
