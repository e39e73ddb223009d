"""Shared pytest fixtures for the brandrag test suite."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from brandrag.config.rag_config import RAGConfig
from brandrag.interfaces.llm_provider import ILLMProvider
from brandrag.providers.store.sqlite_chunk_store import SQLiteChunkStore
from tests.fakes import KeywordEmbeddingProvider


@pytest.fixture
def rag_config() -> RAGConfig:
    """Default retrieval configuration."""
    return RAGConfig()


@pytest.fixture
def keyword_provider() -> KeywordEmbeddingProvider:
    return KeywordEmbeddingProvider()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "brandrag.db"


@pytest_asyncio.fixture
async def chunk_store(db_path: Path) -> SQLiteChunkStore:
    """An initialised SQLite Chunk Store in a temporary directory."""
    store = SQLiteChunkStore(db_path=db_path)
    await store.initialize()
    return store


@pytest.fixture
def mock_llm_provider() -> ILLMProvider:
    """Mock ILLMProvider; override ``complete.return_value`` per test."""
    mock = MagicMock(spec=ILLMProvider)
    mock.get_provider_name.return_value = "mock-llm"
    mock.is_available.return_value = True
    mock.complete = AsyncMock(return_value="Fresh spring copy.")
    return mock
