"""Data models for the brand knowledge base and retrieval pipeline.

Pydantic v2 models for guideline documents, chunks, ranking results and the
context handed to content generation.  Rows read from the Chunk Store are
validated into these models at the persistence boundary.

Lifecycle overview:

    1. SUBMISSION: a guideline document is stored as ``pending`` with its
       extracted text.
    2. INGESTION: on approval the text is split into overlapping chunks,
       each chunk is embedded, and chunks + the ``approved`` status flip are
       written in one transaction.
    3. RETRIEVAL: on every generation request the brand's approved chunks are
       ranked against the query embedding and the top results are formatted
       into a source-tagged context block.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DocumentStatus(str, Enum):  # noqa: UP042 (StrEnum requires Python 3.11+)
    """Review status of a brand guideline document.

    ``pending -> approved`` happens through ingestion; ``pending -> rejected``
    is a reviewer decision.
    """

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


# ---------------------------------------------------------------------------
# BrandDocument: a knowledge-base source owned by one brand.
# ---------------------------------------------------------------------------
class BrandDocument(BaseModel):
    """A brand guideline document and its extracted text.

    At most one document per brand has ``is_primary`` set; that document is
    the brand's master guideline.
    """

    model_config = ConfigDict(frozen=True)

    document_id: str = Field(description="Unique identifier (UUID) for this document.")
    brand_id: str = Field(description="Identifier of the owning brand.")
    status: DocumentStatus = Field(default=DocumentStatus.PENDING)
    raw_text: str | None = Field(default=None, description="Extracted document text.")
    is_primary: bool = Field(default=False, description="True for the brand's master guideline.")
    file_name: str = Field(default="", description="Original source file name.")
    created_at: datetime = Field(description="Submission timestamp (UTC).")


# ---------------------------------------------------------------------------
# ChunkSpan: chunker output before embedding.
# ---------------------------------------------------------------------------
class ChunkSpan(BaseModel):
    """One window produced by the chunker.

    ``start_offset``/``end_offset`` are half-open offsets into the original
    text; ``text`` is that slice with surrounding whitespace trimmed.
    """

    model_config = ConfigDict(frozen=True)

    text: str
    start_offset: int = Field(ge=0)
    end_offset: int = Field(ge=0)


# ---------------------------------------------------------------------------
# KnowledgeChunk: the unit of retrieval.
# ---------------------------------------------------------------------------
class KnowledgeChunk(BaseModel):
    """A stored chunk of a guideline document.

    ``embedding`` is ``None`` when the embedding call failed at ingestion
    time; such chunks are skipped by ranking but still returned by the
    unranked fallback.  ``is_master_source`` is copied from the parent
    document when the chunk is written and is not updated afterwards.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Unique identifier (UUID) for this chunk.")
    document_id: str = Field(description="Identifier of the parent document.")
    chunk_index: int = Field(ge=0, description="Zero-based position within the document.")
    text: str
    start_offset: int = Field(default=0, ge=0)
    end_offset: int = Field(default=0, ge=0)
    embedding: list[float] | None = None
    is_master_source: bool = False
    # Joined from the parent document on load; not stored per chunk.
    source_file_name: str = ""

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)


# ---------------------------------------------------------------------------
# ScoredChunk: a ranking result (ephemeral, never persisted).
# ---------------------------------------------------------------------------
class ScoredChunk(BaseModel):
    """A chunk annotated with its cosine similarity and weighted final score."""

    model_config = ConfigDict(frozen=True)

    chunk: KnowledgeChunk
    similarity: float = Field(ge=-1.0, le=1.0)
    final_score: float


# ---------------------------------------------------------------------------
# IngestionResult: output of one ingestion run.
# ---------------------------------------------------------------------------
class IngestionResult(BaseModel):
    """Summary of a single document ingestion run."""

    model_config = ConfigDict(frozen=True)

    document_id: str
    chunk_count: int = Field(default=0, ge=0, description="Chunks stored.")
    embedded_count: int = Field(default=0, ge=0, description="Chunks stored with a vector.")
    failed_embedding_count: int = Field(
        default=0, ge=0, description="Chunks stored without a vector."
    )
    ingestion_time: float = Field(default=0.0, ge=0.0, description="Wall-clock seconds.")


# ---------------------------------------------------------------------------
# GenerationContext: what the generation layer receives.
# ---------------------------------------------------------------------------
class GenerationContext(BaseModel):
    """Context block plus coarse citation labels for one generation request.

    An empty ``context_block`` means the caller should use the brand's
    static profile fields instead of knowledge-base material.
    """

    model_config = ConfigDict(frozen=True)

    context_block: str = ""
    citation_labels: list[str] = Field(default_factory=list)

    @property
    def has_context(self) -> bool:
        return bool(self.context_block)
