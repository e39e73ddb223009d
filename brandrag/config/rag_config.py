"""Explicit retrieval configuration handed to the RAG services at construction."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class RAGConfig(BaseModel):
    """Chunking windows, ranking constants and embedding limits.

    ``master_source_bonus`` is the additive score given to chunks whose
    parent document was the brand's primary guideline at ingestion time.
    """

    model_config = ConfigDict(frozen=True)

    chunk_size: int = Field(default=1000, gt=0)
    chunk_overlap: int = Field(default=150, ge=0)
    top_k: int = Field(default=12, ge=1)
    fallback_limit: int = Field(default=10, ge=1)
    master_source_bonus: float = 0.15
    embedding_timeout_seconds: float = Field(default=20.0, gt=0)
    embedding_concurrency: int = Field(default=8, ge=1)

    @model_validator(mode="after")
    def _overlap_below_chunk_size(self) -> RAGConfig:
        if self.chunk_overlap >= self.chunk_size:
            msg = (
                f"chunk_overlap ({self.chunk_overlap}) must be smaller than "
                f"chunk_size ({self.chunk_size})"
            )
            raise ValueError(msg)
        return self
