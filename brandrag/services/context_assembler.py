"""Entry point the generation handler calls before the LLM request.

Builds the ranking query from the post's topic and platform, fetches the
brand's context block, and attaches one coarse citation label.  Per-chunk
attribution stays inside the block as ``[Source: ...]`` tags.
"""

from __future__ import annotations

import structlog

from brandrag.models.brand import BrandProfile
from brandrag.models.rag import GenerationContext
from brandrag.services.retrieval_service import RetrievalService
from brandrag.utils.errors import StoreError

logger = structlog.get_logger(logger_name=__name__)

KNOWLEDGE_BASE_CITATION = "Knowledge Base Consolidated"


class ContextAssembler:
    """Turns a generation request into a :class:`GenerationContext`."""

    def __init__(self, retrieval_service: RetrievalService) -> None:
        self._retrieval = retrieval_service

    @staticmethod
    def build_query(topic: str, platform: str) -> str:
        return f"{topic} {platform}".strip()

    async def build_generation_context(
        self,
        brand: BrandProfile,
        topic: str,
        platform: str,
    ) -> GenerationContext:
        """Return the context block and citation labels for one request.

        Never raises for retrieval-layer failures: a store error yields an
        empty context, which tells the caller to use the brand profile.
        """
        query = self.build_query(topic, platform)
        try:
            block = await self._retrieval.retrieve_context(brand.brand_id, query)
        except StoreError as exc:
            logger.error("context_retrieval_failed", brand_id=brand.brand_id, error=str(exc))
            block = ""

        context = GenerationContext(
            context_block=block,
            citation_labels=[KNOWLEDGE_BASE_CITATION] if block else [],
        )
        logger.info(
            "context_assembled",
            brand_id=brand.brand_id,
            has_context=context.has_context,
            context_chars=len(block),
        )
        return context
