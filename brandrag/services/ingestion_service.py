"""Orchestrator for guideline ingestion: **chunk -> embed -> store**.

:class:`IngestionService` turns an approved guideline document into stored,
embedded chunks.  It coordinates three collaborators that know nothing about
each other:

    1. TextChunker      -- fixed-size overlapping windows over the raw text
    2. EmbeddingClient  -- one vector per chunk, fanned out concurrently
    3. IChunkStore      -- chunks + ``approved`` status in one transaction

A chunk whose embedding fails is still stored, with a null vector: ranking
skips it but the unranked fallback can still serve it.  The parent's
``is_primary`` flag is copied onto every chunk as ``is_master_source`` at this
point; later primary changes only reach existing chunks through re-ingestion.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from typing import TYPE_CHECKING

import structlog

from brandrag.config.rag_config import RAGConfig
from brandrag.models.rag import DocumentStatus, IngestionResult, KnowledgeChunk
from brandrag.services.chunker import TextChunker
from brandrag.utils.concurrency import throttled_gather
from brandrag.utils.errors import (
    DocumentNotFoundError,
    DocumentStateError,
    EmbeddingUnavailableError,
    MissingContentError,
)

if TYPE_CHECKING:
    from brandrag.interfaces.chunk_store import IChunkStore
    from brandrag.services.embedding_client import EmbeddingClient

logger = structlog.get_logger(logger_name=__name__)


class IngestionService:
    """Ingests one document per call.

    Parameters
    ----------
    embedding_client:
        Embeds chunk text; failures are recovered per chunk.
    chunk_store:
        Persists chunks and flips the document to ``approved``.
    config:
        Window sizes and embedding fan-out limits.
    chunker:
        Optional pre-built chunker; defaults to one sized from *config*.
    """

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        chunk_store: IChunkStore,
        config: RAGConfig | None = None,
        chunker: TextChunker | None = None,
    ) -> None:
        self._config = config or RAGConfig()
        self._embedding_client = embedding_client
        self._store = chunk_store
        self._chunker = chunker or TextChunker(
            chunk_size=self._config.chunk_size,
            overlap=self._config.chunk_overlap,
        )

    async def ingest(self, document_id: str) -> IngestionResult:
        """Chunk, embed and store *document_id*, marking it ``approved``.

        Re-ingesting an approved document replaces its chunks.

        Raises
        ------
        DocumentNotFoundError
            If the document does not exist.
        DocumentStateError
            If the document was rejected.
        MissingContentError
            If the document has no text.  Its status is left unchanged.
        brandrag.utils.errors.StoreWriteError
            If the final batch write fails; nothing is committed.
        """
        start = time.monotonic()
        log = logger.bind(document_id=document_id)

        document = await self._store.get_document(document_id)
        if document is None:
            raise DocumentNotFoundError(message=f"Document not found: {document_id}")
        if document.status is DocumentStatus.REJECTED:
            raise DocumentStateError(message=f"Document {document_id} was rejected")
        if not document.raw_text or not document.raw_text.strip():
            raise MissingContentError(message=f"Document {document_id} has no text content")

        spans = self._chunker.chunk(document.raw_text)
        vectors = await self._embed_all([span.text for span in spans], log)

        chunks = [
            KnowledgeChunk(
                chunk_id=str(uuid.uuid4()),
                document_id=document_id,
                chunk_index=index,
                text=span.text,
                start_offset=span.start_offset,
                end_offset=span.end_offset,
                embedding=vector,
                is_master_source=document.is_primary,
                source_file_name=document.file_name,
            )
            for index, (span, vector) in enumerate(zip(spans, vectors))
        ]

        stored = await self._store.save_chunks(document_id, chunks)

        failed = sum(1 for v in vectors if v is None)
        result = IngestionResult(
            document_id=document_id,
            chunk_count=stored,
            embedded_count=stored - failed,
            failed_embedding_count=failed,
            ingestion_time=round(time.monotonic() - start, 3),
        )
        log.info(
            "ingestion_complete",
            brand_id=document.brand_id,
            chunks=result.chunk_count,
            failed_embeddings=result.failed_embedding_count,
            master_source=document.is_primary,
            time_s=result.ingestion_time,
        )
        return result

    async def _embed_all(
        self, texts: list[str], log: structlog.BoundLogger
    ) -> list[list[float] | None]:
        """Embed every text concurrently; failed embeddings become ``None``."""
        semaphore = asyncio.Semaphore(self._config.embedding_concurrency)
        results = await throttled_gather(
            [self._embedding_client.embed(t) for t in texts],
            semaphore=semaphore,
            return_exceptions=True,
        )

        vectors: list[list[float] | None] = []
        for index, result in enumerate(results):
            if isinstance(result, EmbeddingUnavailableError):
                log.warning("chunk_embedding_failed", chunk_index=index, error=str(result))
                vectors.append(None)
            elif isinstance(result, BaseException):
                raise result
            else:
                vectors.append(result)
        return vectors
