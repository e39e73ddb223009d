"""Single-text embedding calls with a timeout and one failure type.

:class:`EmbeddingClient` is what ingestion and retrieval call.  It wraps an
:class:`IEmbeddingProvider` and guarantees that every failure mode (provider
error, timeout, empty vector, no provider configured) surfaces as
:class:`EmbeddingUnavailableError`, which both callers recover from locally.
"""

from __future__ import annotations

import asyncio

import structlog

from brandrag.interfaces.embedding_provider import IEmbeddingProvider
from brandrag.utils.errors import BrandRAGError, EmbeddingUnavailableError

logger = structlog.get_logger(logger_name=__name__)


class EmbeddingClient:
    """Embeds one text per call, bounded by ``timeout_seconds``.

    Parameters
    ----------
    provider:
        The embedding backend, or ``None`` when none is configured (every
        call then fails with :class:`EmbeddingUnavailableError`).
    timeout_seconds:
        Upper bound for a single embedding call.
    """

    def __init__(self, provider: IEmbeddingProvider | None, timeout_seconds: float = 20.0) -> None:
        self._provider = provider
        self._timeout = timeout_seconds

    @property
    def provider_name(self) -> str | None:
        return self._provider.get_provider_name() if self._provider else None

    def is_available(self) -> bool:
        return self._provider is not None and self._provider.is_available()

    async def embed(self, text: str) -> list[float]:
        """Return the embedding vector for *text*.

        Raises
        ------
        EmbeddingUnavailableError
            On provider failure, timeout, or an empty vector.
        """
        if self._provider is None:
            raise EmbeddingUnavailableError(message="No embedding provider configured")

        provider_name = self._provider.get_provider_name()
        try:
            vector = await asyncio.wait_for(self._provider.embed_single(text), self._timeout)
        except asyncio.TimeoutError as exc:
            raise EmbeddingUnavailableError(
                message=f"Embedding call exceeded {self._timeout}s",
                provider_name=provider_name,
            ) from exc
        except EmbeddingUnavailableError:
            raise
        except BrandRAGError as exc:
            raise EmbeddingUnavailableError(
                message=exc.message, provider_name=provider_name
            ) from exc
        except Exception as exc:
            raise EmbeddingUnavailableError(
                message=f"Embedding call failed: {exc}", provider_name=provider_name
            ) from exc

        if not vector:
            raise EmbeddingUnavailableError(
                message="Embedding provider returned an empty vector",
                provider_name=provider_name,
            )
        return [float(v) for v in vector]
