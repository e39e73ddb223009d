"""Pydantic models for documents, chunks, retrieval and generation."""

from brandrag.models.brand import BrandProfile, GenerationResult
from brandrag.models.rag import (
    BrandDocument,
    ChunkSpan,
    DocumentStatus,
    GenerationContext,
    IngestionResult,
    KnowledgeChunk,
    ScoredChunk,
)

__all__ = [
    "BrandDocument",
    "BrandProfile",
    "ChunkSpan",
    "DocumentStatus",
    "GenerationContext",
    "GenerationResult",
    "IngestionResult",
    "KnowledgeChunk",
    "ScoredChunk",
]
