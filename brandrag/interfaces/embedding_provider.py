"""Abstract base class for text-embedding service providers.

Defines the contract for generating embedding vectors from text.
Implementations may wrap the Gemini REST API, an OpenAI-compatible
embeddings endpoint, or any other backend returning fixed-dimension vectors.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   GeminiEmbeddingProvider : Gemini embedContent / batchEmbedContents (httpx)
#   OpenAIEmbeddingProvider : OpenAI-compatible embeddings API (openai SDK)
# Located in: brandrag/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for text-embedding services used by ingestion and retrieval.

    Callers go through :class:`~brandrag.services.embedding_client.EmbeddingClient`,
    which adds the timeout and failure conversion.
    """

    @abstractmethod
    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embedding vectors for a batch of texts.

        Parameters
        ----------
        texts:
            One or more text strings to embed.

        Returns
        -------
        list[list[float]]
            Embedding vectors corresponding positionally to *texts*.

        Raises
        ------
        brandrag.utils.errors.EmbeddingUnavailableError
            If the embedding API call fails.
        """

    @abstractmethod
    async def embed_single(self, text: str) -> list[float]:
        """Generate an embedding vector for a single text string.

        Raises
        ------
        brandrag.utils.errors.EmbeddingUnavailableError
            If the embedding API call fails.
        """

    @abstractmethod
    def get_dimension(self) -> int:
        """Return the dimensionality of the embedding vectors.

        Must stay constant for the lifetime of the provider; vectors of a
        different dimension never match at ranking time.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"gemini_embedding"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs."""
