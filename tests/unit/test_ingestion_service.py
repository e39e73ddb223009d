"""Unit tests for IngestionService against a temporary SQLite Chunk Store."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from brandrag.config.rag_config import RAGConfig
from brandrag.interfaces.chunk_store import IChunkStore
from brandrag.models.rag import DocumentStatus
from brandrag.providers.store.sqlite_chunk_store import SQLiteChunkStore
from brandrag.services.embedding_client import EmbeddingClient
from brandrag.services.ingestion_service import IngestionService
from brandrag.utils.errors import (
    DocumentNotFoundError,
    DocumentStateError,
    MissingContentError,
    StoreWriteError,
)
from tests.fakes import KeywordEmbeddingProvider

# Five 100-character segments; with chunk_size=100 / overlap=0 each becomes one chunk.
_SEGMENTS = [f"segment-{i} tone of voice ".ljust(100, ".") for i in range(5)]
_FIVE_CHUNK_TEXT = "".join(_SEGMENTS)
_SMALL_WINDOWS = RAGConfig(chunk_size=100, chunk_overlap=0)


def _service(
    store: IChunkStore,
    provider: KeywordEmbeddingProvider | None = None,
    config: RAGConfig = _SMALL_WINDOWS,
) -> IngestionService:
    client = EmbeddingClient(provider or KeywordEmbeddingProvider(), timeout_seconds=5.0)
    return IngestionService(client, store, config=config)


class TestIngest:
    @pytest.mark.asyncio
    async def test_ingest_stores_chunks_and_approves(self, chunk_store: SQLiteChunkStore) -> None:
        doc = await chunk_store.create_document("acme", "guide.txt", _FIVE_CHUNK_TEXT)

        result = await _service(chunk_store).ingest(doc.document_id)

        assert result.chunk_count == 5
        assert result.embedded_count == 5
        assert result.failed_embedding_count == 0
        stored = await chunk_store.get_document(doc.document_id)
        assert stored.status is DocumentStatus.APPROVED
        chunks = await chunk_store.load_approved_chunks_for_brand("acme")
        assert [c.chunk_index for c in chunks] == [0, 1, 2, 3, 4]
        assert [c.start_offset for c in chunks] == [0, 100, 200, 300, 400]
        assert all(c.source_file_name == "guide.txt" for c in chunks)

    @pytest.mark.asyncio
    async def test_partial_embedding_failure_stores_null_vector(
        self, chunk_store: SQLiteChunkStore
    ) -> None:
        doc = await chunk_store.create_document("acme", "guide.txt", _FIVE_CHUNK_TEXT)
        provider = KeywordEmbeddingProvider(fail_on=("segment-2",))

        result = await _service(chunk_store, provider).ingest(doc.document_id)

        assert result.chunk_count == 5
        assert result.embedded_count == 4
        assert result.failed_embedding_count == 1
        chunks = await chunk_store.load_approved_chunks_for_brand("acme")
        assert [c.has_embedding for c in chunks] == [True, True, False, True, True]
        assert chunks[2].embedding is None
        assert (await chunk_store.get_document(doc.document_id)).status is DocumentStatus.APPROVED

    @pytest.mark.asyncio
    async def test_all_embeddings_failing_still_approves(self, chunk_store: SQLiteChunkStore) -> None:
        doc = await chunk_store.create_document("acme", "guide.txt", _FIVE_CHUNK_TEXT)
        provider = KeywordEmbeddingProvider(fail_on=("segment",))

        result = await _service(chunk_store, provider).ingest(doc.document_id)

        assert result.embedded_count == 0
        assert result.failed_embedding_count == 5
        assert await chunk_store.count_chunks(doc.document_id) == 5

    @pytest.mark.asyncio
    async def test_primary_flag_is_copied_to_chunks(self, chunk_store: SQLiteChunkStore) -> None:
        primary = await chunk_store.create_document("acme", "master.pdf", "tone " * 30, is_primary=True)
        other = await chunk_store.create_document("acme", "notes.txt", "logo " * 30)
        service = _service(chunk_store)

        await service.ingest(primary.document_id)
        await service.ingest(other.document_id)

        chunks = await chunk_store.load_approved_chunks_for_brand("acme")
        flags = {c.source_file_name: c.is_master_source for c in chunks}
        assert flags == {"master.pdf": True, "notes.txt": False}

    @pytest.mark.asyncio
    async def test_master_flag_is_a_snapshot(self, chunk_store: SQLiteChunkStore) -> None:
        first = await chunk_store.create_document("acme", "old.pdf", "tone " * 30, is_primary=True)
        service = _service(chunk_store)
        await service.ingest(first.document_id)

        await chunk_store.create_document("acme", "new.pdf", "logo " * 30, is_primary=True)

        chunks = await chunk_store.load_approved_chunks_for_brand("acme")
        assert all(c.is_master_source for c in chunks)

        # Re-ingestion refreshes the snapshot.
        await service.ingest(first.document_id)
        chunks = await chunk_store.load_approved_chunks_for_brand("acme")
        assert not any(c.is_master_source for c in chunks)

    @pytest.mark.asyncio
    async def test_reingestion_replaces_chunks(self, chunk_store: SQLiteChunkStore) -> None:
        doc = await chunk_store.create_document("acme", "guide.txt", _FIVE_CHUNK_TEXT)
        service = _service(chunk_store)

        await service.ingest(doc.document_id)
        result = await service.ingest(doc.document_id)

        assert result.chunk_count == 5
        assert await chunk_store.count_chunks(doc.document_id) == 5

    @pytest.mark.asyncio
    async def test_embedding_calls_respect_concurrency_limit(
        self, chunk_store: SQLiteChunkStore
    ) -> None:
        in_flight = 0
        peak = 0

        class _Tracking(KeywordEmbeddingProvider):
            async def embed_single(self, text: str) -> list[float]:
                nonlocal in_flight, peak
                in_flight += 1
                peak = max(peak, in_flight)
                await asyncio.sleep(0.01)
                in_flight -= 1
                return await super().embed_single(text)

        config = RAGConfig(chunk_size=100, chunk_overlap=0, embedding_concurrency=2)
        doc = await chunk_store.create_document("acme", "guide.txt", _FIVE_CHUNK_TEXT)

        await _service(chunk_store, _Tracking(), config=config).ingest(doc.document_id)

        assert peak == 2


class TestIngestErrors:
    @pytest.mark.asyncio
    async def test_unknown_document_raises_not_found(self, chunk_store: SQLiteChunkStore) -> None:
        with pytest.raises(DocumentNotFoundError):
            await _service(chunk_store).ingest("does-not-exist")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("raw_text", [None, "", "   \n\t  "])
    async def test_missing_content_leaves_status_unchanged(
        self, chunk_store: SQLiteChunkStore, raw_text: str | None
    ) -> None:
        doc = await chunk_store.create_document("acme", "empty.txt", raw_text)

        with pytest.raises(MissingContentError):
            await _service(chunk_store).ingest(doc.document_id)

        assert (await chunk_store.get_document(doc.document_id)).status is DocumentStatus.PENDING
        assert await chunk_store.count_chunks(doc.document_id) == 0

    @pytest.mark.asyncio
    async def test_rejected_document_cannot_be_ingested(self, chunk_store: SQLiteChunkStore) -> None:
        doc = await chunk_store.create_document("acme", "bad.txt", "tone " * 10)
        await chunk_store.reject_document(doc.document_id)

        with pytest.raises(DocumentStateError):
            await _service(chunk_store).ingest(doc.document_id)

    @pytest.mark.asyncio
    async def test_rejection_during_embedding_is_not_overwritten(
        self, chunk_store: SQLiteChunkStore
    ) -> None:
        doc = await chunk_store.create_document("acme", "guide.txt", _FIVE_CHUNK_TEXT)

        rejected = False

        class _RejectingMidway(KeywordEmbeddingProvider):
            async def embed_single(self, text: str) -> list[float]:
                nonlocal rejected
                if not rejected:
                    rejected = True
                    await chunk_store.reject_document(doc.document_id)
                return await super().embed_single(text)

        with pytest.raises(DocumentStateError):
            await _service(chunk_store, _RejectingMidway()).ingest(doc.document_id)

        stored = await chunk_store.get_document(doc.document_id)
        assert stored.status is DocumentStatus.REJECTED
        assert await chunk_store.count_chunks(doc.document_id) == 0
        assert await chunk_store.load_approved_chunks_for_brand("acme") == []

    @pytest.mark.asyncio
    async def test_store_write_failure_propagates(self, keyword_provider: KeywordEmbeddingProvider) -> None:
        store = MagicMock(spec=SQLiteChunkStore)
        store.get_document = AsyncMock(
            return_value=MagicMock(
                status=DocumentStatus.PENDING,
                raw_text="tone " * 10,
                is_primary=False,
                file_name="g.txt",
                brand_id="acme",
            )
        )
        store.save_chunks = AsyncMock(side_effect=StoreWriteError("disk full"))

        with pytest.raises(StoreWriteError):
            await _service(store, keyword_provider).ingest("doc-1")
