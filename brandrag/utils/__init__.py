"""Utility modules for brandrag.

- **errors** -- Domain exception hierarchy rooted at BrandRAGError.
- **logging** -- structlog setup with console/JSON renderers.
- **concurrency** -- semaphore-bounded ``asyncio.gather`` for embedding fan-out.
- **similarity** -- cosine similarity used by the ranker.
"""

from brandrag.utils.concurrency import throttled_gather
from brandrag.utils.errors import (
    BrandRAGError,
    ConfigurationError,
    DocumentNotFoundError,
    DocumentStateError,
    EmbeddingUnavailableError,
    LLMError,
    MissingContentError,
    StoreError,
    StoreReadError,
    StoreWriteError,
)
from brandrag.utils.logging import configure_logging, get_logger
from brandrag.utils.similarity import cosine_similarity

__all__ = [
    "BrandRAGError",
    "ConfigurationError",
    "DocumentNotFoundError",
    "DocumentStateError",
    "EmbeddingUnavailableError",
    "LLMError",
    "MissingContentError",
    "StoreError",
    "StoreReadError",
    "StoreWriteError",
    "configure_logging",
    "cosine_similarity",
    "get_logger",
    "throttled_gather",
]
