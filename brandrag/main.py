"""brandrag FastAPI application entry point.

Wires providers and services together and stores them on ``app.state``.
Loads configuration from ``.env`` and ``config/config.yaml`` and configures
structured logging at import time.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from brandrag import __version__
from brandrag.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from brandrag.api.routes import router as api_router
from brandrag.config.loader import load_rag_config
from brandrag.config.rag_config import RAGConfig
from brandrag.config.settings import Settings
from brandrag.interfaces.embedding_provider import IEmbeddingProvider
from brandrag.interfaces.llm_provider import ILLMProvider
from brandrag.providers.embedding.gemini_embedding_provider import GeminiEmbeddingProvider
from brandrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from brandrag.providers.llm.gemini_provider import GeminiLLMProvider
from brandrag.providers.llm.openai_provider import OpenAILLMProvider
from brandrag.providers.store.sqlite_chunk_store import SQLiteChunkStore
from brandrag.services.context_assembler import ContextAssembler
from brandrag.services.embedding_client import EmbeddingClient
from brandrag.services.generation_service import GenerationService
from brandrag.services.ingestion_service import IngestionService
from brandrag.services.retrieval_service import RetrievalService
from brandrag.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_embedding_provider(
    app_settings: Settings, http_client: httpx.AsyncClient | None = None
) -> IEmbeddingProvider | None:
    """Select the first configured embedding provider.

    Priority: Gemini -> OpenAI/OpenAI-compatible.  Returns ``None`` when no
    key is set; retrieval then always uses the unranked fallback.
    """
    if app_settings.gemini_api_key:
        return GeminiEmbeddingProvider(settings=app_settings, http_client=http_client)
    if app_settings.openai_api_key:
        return OpenAIEmbeddingProvider(settings=app_settings)
    return None


def _build_llm_provider(
    app_settings: Settings, http_client: httpx.AsyncClient | None = None
) -> ILLMProvider | None:
    """Select the first configured LLM provider (Gemini -> OpenAI), or ``None``."""
    if app_settings.gemini_api_key:
        return GeminiLLMProvider(settings=app_settings, http_client=http_client)
    if app_settings.openai_api_key:
        return OpenAILLMProvider(settings=app_settings)
    return None


# ---------------------------------------------------------------------------
# Full DI assembly
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, rag_config: RAGConfig | None = None) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    rag_config = rag_config or load_rag_config(settings=app_settings)
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(60.0, connect=5.0))

    # -- Providers --
    embedding_provider = _build_embedding_provider(app_settings, http_client)
    llm = _build_llm_provider(app_settings, http_client)
    chunk_store = SQLiteChunkStore(db_path=app_settings.database_path)

    # -- Services --
    embedding_client = EmbeddingClient(
        embedding_provider, timeout_seconds=rag_config.embedding_timeout_seconds
    )
    ingestion_service = IngestionService(
        embedding_client=embedding_client, chunk_store=chunk_store, config=rag_config
    )
    retrieval_service = RetrievalService(
        embedding_client=embedding_client, chunk_store=chunk_store, config=rag_config
    )
    context_assembler = ContextAssembler(retrieval_service)
    generation_service = (
        GenerationService(context_assembler=context_assembler, llm=llm) if llm else None
    )

    if embedding_provider is None:
        _logger.warning("embedding_provider_missing", fallback="unranked_retrieval")
    if llm is None:
        _logger.warning("llm_provider_missing", generation_enabled=False)

    provider_registry: dict[str, Any] = {
        "embedding": embedding_provider is not None,
        "embedding_provider": embedding_client.provider_name,
        "llm": llm is not None,
        "llm_provider": llm.get_provider_name() if llm else None,
    }

    return {
        "http_client": http_client,
        "rag_config": rag_config,
        "chunk_store": chunk_store,
        "embedding_client": embedding_client,
        "ingestion_service": ingestion_service,
        "retrieval_service": retrieval_service,
        "context_assembler": context_assembler,
        "generation_service": generation_service,
        "provider_registry": provider_registry,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise providers, services and the store schema; close the HTTP client."""
    components = _build_all(settings)
    for key, value in components.items():
        setattr(application.state, key, value)

    await components["chunk_store"].initialize()

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        database=settings.database_path,
        **components["provider_registry"],
    )

    yield

    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    _logger.info("app_shutdown", message="HTTP client closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="brandrag API",
        version=__version__,
        description=(
            "Brand guideline knowledge base: review and ingest guideline "
            "documents, then retrieve master-weighted context for content "
            "generation."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "brandrag.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
