"""Pydantic request/response schemas for the brand knowledge-base API.

Request schemas end with ``Request``, response schemas with ``Response``.
Internal models (``BrandDocument``) are never returned directly; routes map
them onto these shapes so raw document text stays server-side.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from brandrag.models.rag import BrandDocument


class SubmitDocumentRequest(BaseModel):
    """A guideline document submitted for review."""

    brand_id: str = Field(..., min_length=1)
    file_name: str = Field(default="", max_length=512)
    raw_text: str | None = None
    is_primary: bool = False


class DocumentResponse(BaseModel):
    """Public view of a guideline document (without its raw text)."""

    document_id: str
    brand_id: str
    status: str
    is_primary: bool
    file_name: str
    created_at: datetime
    text_length: int = 0

    @classmethod
    def from_document(cls, document: BrandDocument) -> DocumentResponse:
        return cls(
            document_id=document.document_id,
            brand_id=document.brand_id,
            status=document.status.value,
            is_primary=document.is_primary,
            file_name=document.file_name,
            created_at=document.created_at,
            text_length=len(document.raw_text or ""),
        )


class DocumentListResponse(BaseModel):
    """All documents owned by one brand, in submission order."""

    brand_id: str
    documents: list[DocumentResponse] = Field(default_factory=list)
    total: int = 0


class IngestResponse(BaseModel):
    """Outcome of approve-and-ingest."""

    success: bool = True
    document_id: str
    chunks_created: int
    embedded_count: int
    failed_embedding_count: int
    ingestion_time: float


class BrandProfileInput(BaseModel):
    """Brand profile sent with context and generation requests."""

    brand_id: str = Field(..., min_length=1)
    name: str = ""
    personality: str = ""
    voice: str = ""
    usp: list[str] = Field(default_factory=list)


class ContextRequest(BaseModel):
    """Build the knowledge-base context for a topic/platform pair."""

    brand: BrandProfileInput
    topic: str = Field(..., min_length=1, max_length=1000)
    platform: str = Field(default="", max_length=100)


class ContextResponse(BaseModel):
    """Formatted context block and its citation labels."""

    context: str
    citations: list[str] = Field(default_factory=list)
    has_context: bool = False


class GenerateRequest(BaseModel):
    """Generate brand content for a topic on a platform."""

    brand: BrandProfileInput
    topic: str = Field(..., min_length=1, max_length=1000)
    platform: str = Field(default="", max_length=100)
    user_text: str = Field(default="", max_length=4000)
    system_prompt: str = Field(default="", max_length=8000)


class GenerateResponse(BaseModel):
    """Generated content with the citations of the context it used."""

    result: str
    citations: list[str] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    providers: dict[str, Any]


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None
