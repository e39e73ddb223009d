"""Brand-wide retrieval: embed the query, rank every approved chunk, format.

Ranking is brute force over the brand's whole approved-chunk set, loaded
fresh on every call:

    final_score = cosine(query, chunk) + (master_source_bonus if master else 0)

The additive bonus lets a chunk from the brand's master guideline outrank a
somewhat more similar chunk from a supporting document (0.70 + 0.15 beats
0.80).  Sorting is stable, so equal scores keep storage order.

When the query cannot be embedded, retrieval degrades to the first
``fallback_limit`` chunks in storage order, unscored.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

import structlog

from brandrag.config.rag_config import RAGConfig
from brandrag.models.rag import KnowledgeChunk, ScoredChunk
from brandrag.utils.errors import EmbeddingUnavailableError
from brandrag.utils.similarity import cosine_similarity

if TYPE_CHECKING:
    from brandrag.interfaces.chunk_store import IChunkStore
    from brandrag.services.embedding_client import EmbeddingClient

logger = structlog.get_logger(logger_name=__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"
FALLBACK_SEPARATOR = "\n\n"


def format_chunk(chunk: KnowledgeChunk) -> str:
    """Render *chunk* with its inline source tag."""
    master = " - MASTER" if chunk.is_master_source else ""
    return f"[Source: {chunk.source_file_name}{master}] {chunk.text}"


class RetrievalService:
    """Query planner and ranker over one brand's consolidated knowledge base."""

    def __init__(
        self,
        embedding_client: EmbeddingClient,
        chunk_store: IChunkStore,
        config: RAGConfig | None = None,
    ) -> None:
        self._embedding_client = embedding_client
        self._store = chunk_store
        self._config = config or RAGConfig()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def retrieve_context(
        self,
        brand_id: str,
        query_text: str,
        top_k: int | None = None,
    ) -> str:
        """Return the formatted context block for *query_text*.

        Returns ``""`` when the brand has no approved chunks, or when none of
        them carry an embedding.  Store read failures propagate as
        :class:`~brandrag.utils.errors.StoreReadError`.
        """
        limit = top_k if top_k is not None else self._config.top_k
        log = logger.bind(brand_id=brand_id)

        query_vector: list[float] | None
        try:
            query_vector = await self._embedding_client.embed(query_text)
        except EmbeddingUnavailableError as exc:
            log.warning("query_embedding_failed_unranked_fallback", error=str(exc))
            query_vector = None

        chunks = await self._store.load_approved_chunks_for_brand(brand_id)
        if not chunks:
            log.info("retrieval_empty_brand")
            return ""

        if query_vector is None:
            fallback = chunks[: self._config.fallback_limit]
            log.info("retrieval_unranked", chunks=len(fallback), available=len(chunks))
            return FALLBACK_SEPARATOR.join(c.text for c in fallback)

        ranked = self.rank(query_vector, chunks)[:limit]
        log.info(
            "retrieval_ranked",
            available=len(chunks),
            returned=len(ranked),
            top_score=round(ranked[0].final_score, 4) if ranked else None,
        )
        return CONTEXT_SEPARATOR.join(format_chunk(s.chunk) for s in ranked)

    def rank(
        self,
        query_vector: Sequence[float],
        chunks: Sequence[KnowledgeChunk],
    ) -> list[ScoredChunk]:
        """Score and sort *chunks* against *query_vector*, best first.

        Chunks without an embedding are left out entirely.
        """
        bonus = self._config.master_source_bonus
        scored: list[ScoredChunk] = []
        for chunk in chunks:
            if not chunk.has_embedding:
                continue
            similarity = cosine_similarity(query_vector, chunk.embedding)
            final_score = similarity + (bonus if chunk.is_master_source else 0.0)
            scored.append(ScoredChunk(chunk=chunk, similarity=similarity, final_score=final_score))

        scored.sort(key=lambda s: s.final_score, reverse=True)
        return scored
