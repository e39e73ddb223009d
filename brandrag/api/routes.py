"""FastAPI routes for the brand knowledge base.

Endpoint                                      Method  Description
--------------------------------------------  ------  -------------------------------
/api/v1/documents                             POST    Submit a guideline (pending)
/api/v1/brands/{brand_id}/documents           GET     List a brand's documents
/api/v1/documents/{document_id}/approve       POST    Approve and ingest
/api/v1/documents/{document_id}/reject        POST    Reject a pending document
/api/v1/documents/{document_id}/primary       POST    Make the brand's master guideline
/api/v1/context                               POST    Build the generation context
/api/v1/generate                              POST    Generate brand content
/api/v1/health                                GET     Health check + provider status

Service singletons are resolved from ``app.state`` (populated by
``main._build_all``) through ``Annotated[..., Depends(...)]`` aliases.
Domain errors raised by services are converted to JSON by
``ErrorHandlingMiddleware``.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request

from brandrag import __version__
from brandrag.api.schemas import (
    ContextRequest,
    ContextResponse,
    DocumentListResponse,
    DocumentResponse,
    ErrorResponse,
    GenerateRequest,
    GenerateResponse,
    HealthResponse,
    IngestResponse,
    SubmitDocumentRequest,
)
from brandrag.models.brand import BrandProfile
from brandrag.utils.errors import DocumentNotFoundError
from brandrag.utils.logging import bind_context, get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _require(request: Request, name: str, label: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise HTTPException(status_code=503, detail=f"{label} not available")
    return service


def _get_chunk_store(request: Request) -> Any:
    """Return the Chunk Store from application state."""
    return _require(request, "chunk_store", "Chunk store")


def _get_ingestion_service(request: Request) -> Any:
    return _require(request, "ingestion_service", "Ingestion service")


def _get_context_assembler(request: Request) -> Any:
    return _require(request, "context_assembler", "Context assembler")


def _get_generation_service(request: Request) -> Any:
    """Return the generation service, or 503 when no LLM is configured."""
    return _require(request, "generation_service", "Generation service")


ChunkStoreDep = Annotated[Any, Depends(_get_chunk_store)]
IngestionDep = Annotated[Any, Depends(_get_ingestion_service)]
AssemblerDep = Annotated[Any, Depends(_get_context_assembler)]
GenerationDep = Annotated[Any, Depends(_get_generation_service)]


def _to_profile(body: ContextRequest | GenerateRequest) -> BrandProfile:
    return BrandProfile(**body.brand.model_dump())


# ---------------------------------------------------------------------------
# Document lifecycle
# ---------------------------------------------------------------------------


@router.post(
    "/documents",
    response_model=DocumentResponse,
    status_code=201,
    summary="Submit a guideline document for review",
)
async def submit_document(body: SubmitDocumentRequest, store: ChunkStoreDep) -> DocumentResponse:
    """Store a document as ``pending``.  Nothing is chunked until approval."""
    bind_context(brand_id=body.brand_id)
    document = await store.create_document(
        brand_id=body.brand_id,
        file_name=body.file_name,
        raw_text=body.raw_text,
        is_primary=body.is_primary,
    )
    return DocumentResponse.from_document(document)


@router.get(
    "/brands/{brand_id}/documents",
    response_model=DocumentListResponse,
    summary="List a brand's guideline documents",
)
async def list_documents(brand_id: str, store: ChunkStoreDep) -> DocumentListResponse:
    bind_context(brand_id=brand_id)
    documents = await store.list_documents(brand_id)
    return DocumentListResponse(
        brand_id=brand_id,
        documents=[DocumentResponse.from_document(d) for d in documents],
        total=len(documents),
    )


@router.post(
    "/documents/{document_id}/approve",
    response_model=IngestResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
        409: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Approve a document and ingest it into the knowledge base",
)
async def approve_document(document_id: str, ingestion: IngestionDep) -> IngestResponse:
    """Chunk, embed and store the document; it becomes ``approved`` atomically."""
    bind_context(document_id=document_id)
    result = await ingestion.ingest(document_id)
    return IngestResponse(
        document_id=result.document_id,
        chunks_created=result.chunk_count,
        embedded_count=result.embedded_count,
        failed_embedding_count=result.failed_embedding_count,
        ingestion_time=result.ingestion_time,
    )


@router.post(
    "/documents/{document_id}/reject",
    response_model=DocumentResponse,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
    summary="Reject a pending document",
)
async def reject_document(document_id: str, store: ChunkStoreDep) -> DocumentResponse:
    document = await store.reject_document(document_id)
    return DocumentResponse.from_document(document)


@router.post(
    "/documents/{document_id}/primary",
    response_model=DocumentResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Make a document the brand's master guideline",
)
async def set_primary_document(document_id: str, store: ChunkStoreDep) -> DocumentResponse:
    """Promote the document; the brand's previous primary is demoted.

    Chunks already stored keep their master flag until they are re-ingested.
    """
    document = await store.set_primary(document_id)
    return DocumentResponse.from_document(document)


@router.get(
    "/documents/{document_id}",
    response_model=DocumentResponse,
    responses={404: {"model": ErrorResponse}},
    summary="Get a single document",
)
async def get_document(document_id: str, store: ChunkStoreDep) -> DocumentResponse:
    document = await store.get_document(document_id)
    if document is None:
        raise DocumentNotFoundError(message=f"Document not found: {document_id}")
    return DocumentResponse.from_document(document)


# ---------------------------------------------------------------------------
# Retrieval and generation
# ---------------------------------------------------------------------------


@router.post(
    "/context",
    response_model=ContextResponse,
    summary="Build the knowledge-base context for a generation request",
)
async def build_context(body: ContextRequest, assembler: AssemblerDep) -> ContextResponse:
    bind_context(brand_id=body.brand.brand_id)
    context = await assembler.build_generation_context(
        _to_profile(body), body.topic, body.platform
    )
    return ContextResponse(
        context=context.context_block,
        citations=context.citation_labels,
        has_context=context.has_context,
    )


@router.post(
    "/generate",
    response_model=GenerateResponse,
    responses={502: {"model": ErrorResponse}, 503: {"model": ErrorResponse}},
    summary="Generate brand content grounded in the knowledge base",
)
async def generate_content(body: GenerateRequest, generation: GenerationDep) -> GenerateResponse:
    bind_context(brand_id=body.brand.brand_id)
    result = await generation.generate(
        brand=_to_profile(body),
        topic=body.topic,
        platform=body.platform,
        user_text=body.user_text,
        system_prompt=body.system_prompt,
    )
    return GenerateResponse(result=result.result, citations=result.citations)


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(request: Request) -> HealthResponse:
    """Report provider availability.

    ``degraded`` means retrieval works but without embeddings (unranked
    fallback) or generation is disabled.
    """
    providers: dict[str, Any] = {}
    if hasattr(request.app.state, "provider_registry"):
        providers = dict(request.app.state.provider_registry)

    store_ok = getattr(request.app.state, "chunk_store", None) is not None
    providers["store"] = store_ok

    if not store_ok:
        status = "unhealthy"
    elif providers.get("embedding", False) and providers.get("llm", False):
        status = "healthy"
    else:
        status = "degraded"

    return HealthResponse(status=status, version=__version__, providers=providers)
