"""Operator CLI for the brand knowledge base.

Usage::

    python -m brandrag.cli submit --brand acme --file guidelines.txt --primary
    python -m brandrag.cli approve <document_id>
    python -m brandrag.cli reject <document_id>
    python -m brandrag.cli set-primary <document_id>
    python -m brandrag.cli list --brand acme
    python -m brandrag.cli context --brand acme --topic "spring launch" --platform instagram

Reads the same ``.env`` / ``config/config.yaml`` as the API server and works
directly against the configured SQLite database.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import httpx

from brandrag.config.settings import Settings
from brandrag.utils.errors import BrandRAGError
from brandrag.utils.logging import bind_context, clear_context


@dataclass
class _Services:
    store: Any
    ingestion: Any
    assembler: Any
    embedding_label: str
    http_client: httpx.AsyncClient


def _build_embedding_provider(app_settings: Settings, http_client: httpx.AsyncClient):  # noqa: ANN202
    """Select the first configured embedding provider (Gemini -> OpenAI).

    Mirrors ``main.py`` so chunks embedded from the CLI are comparable with
    query vectors computed by the server.
    """
    if app_settings.gemini_api_key:
        from brandrag.providers.embedding.gemini_embedding_provider import (
            GeminiEmbeddingProvider,
        )

        return GeminiEmbeddingProvider(settings=app_settings, http_client=http_client)
    if app_settings.openai_api_key:
        from brandrag.providers.embedding.openai_embedding_provider import (
            OpenAIEmbeddingProvider,
        )

        return OpenAIEmbeddingProvider(settings=app_settings)
    return None


def _build_services(app_settings: Settings) -> _Services:
    """Wire the store, ingestion and retrieval services for one CLI run."""
    from brandrag.config.loader import load_rag_config
    from brandrag.providers.store.sqlite_chunk_store import SQLiteChunkStore
    from brandrag.services.context_assembler import ContextAssembler
    from brandrag.services.embedding_client import EmbeddingClient
    from brandrag.services.ingestion_service import IngestionService
    from brandrag.services.retrieval_service import RetrievalService

    rag_config = load_rag_config(settings=app_settings)
    http_client = httpx.AsyncClient(timeout=httpx.Timeout(60.0, connect=5.0))
    store = SQLiteChunkStore(db_path=app_settings.database_path)
    embedding_client = EmbeddingClient(
        _build_embedding_provider(app_settings, http_client),
        timeout_seconds=rag_config.embedding_timeout_seconds,
    )
    return _Services(
        store=store,
        ingestion=IngestionService(embedding_client, store, config=rag_config),
        assembler=ContextAssembler(RetrievalService(embedding_client, store, config=rag_config)),
        embedding_label=embedding_client.provider_name or "none (unranked retrieval)",
        http_client=http_client,
    )


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


async def _handle_submit(args: argparse.Namespace, services: _Services) -> int:
    path = Path(args.file)
    if not path.is_file():
        print(f"Error: file not found: {path}", file=sys.stderr)
        return 1

    document = await services.store.create_document(
        brand_id=args.brand,
        file_name=path.name,
        raw_text=path.read_text(encoding="utf-8"),
        is_primary=args.primary,
    )
    print(f"Submitted {path.name} for brand {args.brand}")
    print(f"  Document ID: {document.document_id}")
    print(f"  Status:      {document.status.value}")
    print(f"  Primary:     {'yes' if document.is_primary else 'no'}")
    return 0


async def _handle_approve(args: argparse.Namespace, services: _Services) -> int:
    print(f"Ingesting document {args.document_id} (embedding: {services.embedding_label})")
    result = await services.ingestion.ingest(args.document_id)

    print("\nIngestion complete:")
    print(f"  Chunks created:    {result.chunk_count}")
    print(f"  Embedded:          {result.embedded_count}")
    print(f"  Without embedding: {result.failed_embedding_count}")
    print(f"  Time:              {result.ingestion_time:.2f}s")
    return 0


async def _handle_reject(args: argparse.Namespace, services: _Services) -> int:
    document = await services.store.reject_document(args.document_id)
    print(f"Rejected {document.file_name or document.document_id}")
    return 0


async def _handle_set_primary(args: argparse.Namespace, services: _Services) -> int:
    document = await services.store.set_primary(args.document_id)
    print(f"{document.file_name or document.document_id} is now the master guideline "
          f"for brand {document.brand_id}")
    print("  Existing chunks keep their master flag until re-approved.")
    return 0


async def _handle_list(args: argparse.Namespace, services: _Services) -> int:
    documents = await services.store.list_documents(args.brand)
    if not documents:
        print(f"No documents for brand {args.brand}.")
        return 0

    print(f"Documents for brand {args.brand}")
    print("=" * 72)
    for doc in documents:
        chunks = await services.store.count_chunks(doc.document_id)
        marker = "*" if doc.is_primary else " "
        print(f"{marker} {doc.document_id}  {doc.status.value:<9} {chunks:>4} chunks  {doc.file_name}")
    return 0


async def _handle_context(args: argparse.Namespace, services: _Services) -> int:
    from brandrag.models.brand import BrandProfile

    context = await services.assembler.build_generation_context(
        BrandProfile(brand_id=args.brand), args.topic, args.platform
    )
    if not context.has_context:
        print("No knowledge-base context; generation would use the brand profile.")
        return 0

    print(context.context_block)
    print()
    print(f"Citations: {', '.join(context.citation_labels)}")
    return 0


_HANDLERS = {
    "submit": _handle_submit,
    "approve": _handle_approve,
    "reject": _handle_reject,
    "set-primary": _handle_set_primary,
    "list": _handle_list,
    "context": _handle_context,
}


async def _run(args: argparse.Namespace, services: _Services) -> int:
    bind_context(command=args.command, document_id=getattr(args, "document_id", None))
    try:
        await services.store.initialize()
        return await _HANDLERS[args.command](args, services)
    finally:
        await services.http_client.aclose()
        clear_context()


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the knowledge-base CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m brandrag.cli",
        description="Manage brand guideline documents and inspect retrieval context.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    submit_parser = subparsers.add_parser("submit", help="Submit a guideline text file")
    submit_parser.add_argument("--brand", required=True, help="Brand identifier")
    submit_parser.add_argument("--file", required=True, help="Path to a UTF-8 text file")
    submit_parser.add_argument(
        "--primary", action="store_true", help="Mark as the brand's master guideline"
    )

    for name, help_text in (
        ("approve", "Approve and ingest a document"),
        ("reject", "Reject a pending document"),
        ("set-primary", "Make a document the brand's master guideline"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("document_id", help="Document identifier")

    list_parser = subparsers.add_parser("list", help="List a brand's documents")
    list_parser.add_argument("--brand", required=True, help="Brand identifier")

    context_parser = subparsers.add_parser("context", help="Show the retrieval context block")
    context_parser.add_argument("--brand", required=True, help="Brand identifier")
    context_parser.add_argument("--topic", required=True, help="Post topic")
    context_parser.add_argument("--platform", default="", help="Target platform")

    return parser


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Exits non-zero on domain errors."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    services = _build_services(Settings())
    try:
        exit_code = asyncio.run(_run(args, services))
    except BrandRAGError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
