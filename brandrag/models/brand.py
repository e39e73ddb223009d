"""Brand profile and content-generation models.

Brands are managed outside this service; the profile carries only the fields
generation needs when no knowledge-base context is available.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class BrandProfile(BaseModel):
    """Static brand profile used as prompt material and as the RAG fallback."""

    model_config = ConfigDict(frozen=True)

    brand_id: str = Field(min_length=1)
    name: str = ""
    personality: str = ""
    voice: str = ""
    usp: list[str] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """Completion text and the citation labels of the context it was built on."""

    model_config = ConfigDict(frozen=True)

    result: str
    citations: list[str] = Field(default_factory=list)
