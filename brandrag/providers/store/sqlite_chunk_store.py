"""SQLite-backed Chunk Store.

Persists guideline documents and their chunks to a local SQLite database
using ``aiosqlite`` for async I/O.  Chunks live in their own table with a
cascading foreign key to the parent document.

Every mutation runs inside an explicit ``BEGIN IMMEDIATE`` transaction, so
a chunk batch and its document's ``approved`` flip commit together or not
at all, and concurrent primary-toggles on the same brand are serialised by
SQLite's write lock.  A partial unique index additionally guarantees that a
brand never has more than one primary document.
"""

from __future__ import annotations

import json
import sqlite3
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

import aiosqlite
import structlog
from pydantic import ValidationError

from brandrag.interfaces.chunk_store import IChunkStore
from brandrag.models.rag import BrandDocument, DocumentStatus, KnowledgeChunk
from brandrag.utils.errors import (
    DocumentNotFoundError,
    DocumentStateError,
    StoreReadError,
    StoreWriteError,
)

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_DB_PATH = Path("data/brandrag.db")

_CREATE_DOCUMENTS_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    id          TEXT    PRIMARY KEY,
    brand_id    TEXT    NOT NULL,
    status      TEXT    NOT NULL DEFAULT 'pending'
                        CHECK (status IN ('pending', 'approved', 'rejected')),
    raw_text    TEXT,
    is_primary  INTEGER NOT NULL DEFAULT 0,
    file_name   TEXT    NOT NULL DEFAULT '',
    created_at  TEXT    NOT NULL,
    updated_at  TEXT    NOT NULL
);
"""

_CREATE_CHUNKS_SQL = """\
CREATE TABLE IF NOT EXISTS chunks (
    id                TEXT    PRIMARY KEY,
    document_id       TEXT    NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
    chunk_index       INTEGER NOT NULL,
    text              TEXT    NOT NULL,
    start_offset      INTEGER NOT NULL,
    end_offset        INTEGER NOT NULL,
    embedding         TEXT,
    is_master_source  INTEGER NOT NULL DEFAULT 0,
    created_at        TEXT    NOT NULL
);
"""

_CREATE_INDICES_SQL = [
    "CREATE INDEX IF NOT EXISTS idx_documents_brand_status ON documents(brand_id, status);",
    "CREATE INDEX IF NOT EXISTS idx_chunks_document ON chunks(document_id, chunk_index);",
    "CREATE UNIQUE INDEX IF NOT EXISTS idx_documents_one_primary "
    "ON documents(brand_id) WHERE is_primary = 1;",
]

_SELECT_DOCUMENT_SQL = """\
SELECT id, brand_id, status, raw_text, is_primary, file_name, created_at
FROM documents
WHERE id = ?;
"""

_INSERT_DOCUMENT_SQL = """\
INSERT INTO documents (id, brand_id, status, raw_text, is_primary, file_name, created_at, updated_at)
VALUES (?, ?, 'pending', ?, ?, ?, ?, ?);
"""

_CLEAR_PRIMARY_SQL = """\
UPDATE documents SET is_primary = 0, updated_at = ?
WHERE brand_id = ? AND is_primary = 1;
"""

_INSERT_CHUNK_SQL = """\
INSERT INTO chunks (
    id, document_id, chunk_index, text, start_offset, end_offset,
    embedding, is_master_source, created_at
)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_SELECT_APPROVED_CHUNKS_SQL = """\
SELECT c.id, c.document_id, c.chunk_index, c.text, c.start_offset, c.end_offset,
       c.embedding, c.is_master_source, d.file_name
FROM chunks c
JOIN documents d ON d.id = c.document_id
WHERE d.brand_id = ? AND d.status = 'approved'
ORDER BY d.created_at, d.rowid, c.chunk_index;
"""


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteChunkStore(IChunkStore):
    """SQLite-backed document and chunk persistence."""

    def __init__(self, db_path: str | Path = _DEFAULT_DB_PATH, busy_timeout: float = 10.0) -> None:
        self._db_path = Path(db_path)
        self._busy_timeout = busy_timeout

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def _connect(self) -> AsyncIterator[aiosqlite.Connection]:
        # isolation_level=None: transactions are opened explicitly below.
        async with aiosqlite.connect(
            str(self._db_path), isolation_level=None, timeout=self._busy_timeout
        ) as db:
            db.row_factory = aiosqlite.Row
            await db.execute("PRAGMA foreign_keys = ON")
            yield db

    @asynccontextmanager
    async def _write_transaction(self) -> AsyncIterator[aiosqlite.Connection]:
        """Open a connection holding the database write lock until commit."""
        async with self._connect() as db:
            await db.execute("BEGIN IMMEDIATE")
            try:
                yield db
            except BaseException:
                if db.in_transaction:
                    await db.execute("ROLLBACK")
                raise
            await db.execute("COMMIT")

    # ------------------------------------------------------------------
    # IChunkStore implementation
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create tables and indices if they don't exist."""
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        async with self._connect() as db:
            await db.execute(_CREATE_DOCUMENTS_SQL)
            await db.execute(_CREATE_CHUNKS_SQL)
            for idx_sql in _CREATE_INDICES_SQL:
                await db.execute(idx_sql)
        logger.info("chunk_store_initialized", path=str(self._db_path))

    async def create_document(
        self,
        brand_id: str,
        file_name: str,
        raw_text: str | None,
        is_primary: bool = False,
    ) -> BrandDocument:
        document_id = str(uuid.uuid4())
        now = _utcnow()
        try:
            async with self._write_transaction() as db:
                if is_primary:
                    await db.execute(_CLEAR_PRIMARY_SQL, (now, brand_id))
                await db.execute(
                    _INSERT_DOCUMENT_SQL,
                    (document_id, brand_id, raw_text, int(is_primary), file_name, now, now),
                )
                document = await self._fetch_document(db, document_id)
        except sqlite3.Error as exc:
            logger.error("document_create_failed", brand_id=brand_id, error=str(exc))
            raise StoreWriteError(
                message=f"Failed to create document: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info(
            "document_created",
            document_id=document_id,
            brand_id=brand_id,
            file_name=file_name,
            is_primary=is_primary,
        )
        return document  # type: ignore[return-value]

    async def get_document(self, document_id: str) -> BrandDocument | None:
        try:
            async with self._connect() as db:
                return await self._fetch_document(db, document_id)
        except sqlite3.Error as exc:
            raise StoreReadError(
                message=f"Failed to read document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def list_documents(self, brand_id: str) -> list[BrandDocument]:
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    "SELECT id, brand_id, status, raw_text, is_primary, file_name, created_at "
                    "FROM documents WHERE brand_id = ? ORDER BY created_at, rowid",
                    (brand_id,),
                )
                rows = await cursor.fetchall()
        except sqlite3.Error as exc:
            raise StoreReadError(
                message=f"Failed to list documents for brand {brand_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return [self._row_to_document(r) for r in rows]

    async def save_chunks(self, document_id: str, chunks: list[KnowledgeChunk]) -> int:
        now = _utcnow()
        rows = [
            (
                c.chunk_id,
                document_id,
                c.chunk_index,
                c.text,
                c.start_offset,
                c.end_offset,
                json.dumps(c.embedding) if c.embedding is not None else None,
                int(c.is_master_source),
                now,
            )
            for c in chunks
        ]
        try:
            async with self._write_transaction() as db:
                cursor = await db.execute(
                    "SELECT status FROM documents WHERE id = ?", (document_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    raise DocumentNotFoundError(message=f"Document not found: {document_id}")
                # Rejection can land while chunks are being embedded.
                if row["status"] == DocumentStatus.REJECTED.value:
                    raise DocumentStateError(
                        message=f"Document {document_id} was rejected during ingestion"
                    )
                # Re-ingestion replaces the previous chunk set.
                await db.execute("DELETE FROM chunks WHERE document_id = ?", (document_id,))
                await db.executemany(_INSERT_CHUNK_SQL, rows)
                await db.execute(
                    "UPDATE documents SET status = 'approved', updated_at = ? WHERE id = ?",
                    (now, document_id),
                )
        except sqlite3.Error as exc:
            logger.error(
                "chunk_batch_write_failed",
                document_id=document_id,
                chunks=len(rows),
                error=str(exc),
            )
            raise StoreWriteError(
                message=f"Failed to store chunks for document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chunk_batch_committed", document_id=document_id, chunks=len(rows))
        return len(rows)

    async def load_approved_chunks_for_brand(self, brand_id: str) -> list[KnowledgeChunk]:
        try:
            async with self._connect() as db:
                cursor = await db.execute(_SELECT_APPROVED_CHUNKS_SQL, (brand_id,))
                rows = await cursor.fetchall()
        except sqlite3.Error as exc:
            raise StoreReadError(
                message=f"Failed to load chunks for brand {brand_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return [self._row_to_chunk(r) for r in rows]

    async def set_primary(self, document_id: str) -> BrandDocument:
        now = _utcnow()
        try:
            async with self._write_transaction() as db:
                cursor = await db.execute(
                    "SELECT brand_id FROM documents WHERE id = ?", (document_id,)
                )
                row = await cursor.fetchone()
                if row is None:
                    raise DocumentNotFoundError(message=f"Document not found: {document_id}")
                brand_id = row["brand_id"]
                # Clear first: the unique index rejects two primaries even mid-statement.
                await db.execute(_CLEAR_PRIMARY_SQL, (now, brand_id))
                await db.execute(
                    "UPDATE documents SET is_primary = 1, updated_at = ? WHERE id = ?",
                    (now, document_id),
                )
                document = await self._fetch_document(db, document_id)
        except sqlite3.Error as exc:
            logger.error("set_primary_failed", document_id=document_id, error=str(exc))
            raise StoreWriteError(
                message=f"Failed to set primary document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("primary_document_set", document_id=document_id, brand_id=brand_id)
        return document  # type: ignore[return-value]

    async def reject_document(self, document_id: str) -> BrandDocument:
        now = _utcnow()
        try:
            async with self._write_transaction() as db:
                document = await self._fetch_document(db, document_id)
                if document is None:
                    raise DocumentNotFoundError(message=f"Document not found: {document_id}")
                if document.status is not DocumentStatus.PENDING:
                    raise DocumentStateError(
                        message=(
                            f"Only pending documents can be rejected; "
                            f"{document_id} is {document.status.value}"
                        )
                    )
                await db.execute(
                    "UPDATE documents SET status = 'rejected', updated_at = ? WHERE id = ?",
                    (now, document_id),
                )
                document = await self._fetch_document(db, document_id)
        except sqlite3.Error as exc:
            raise StoreWriteError(
                message=f"Failed to reject document {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("document_rejected", document_id=document_id)
        return document  # type: ignore[return-value]

    async def count_chunks(self, document_id: str) -> int:
        try:
            async with self._connect() as db:
                cursor = await db.execute(
                    "SELECT COUNT(*) AS n FROM chunks WHERE document_id = ?", (document_id,)
                )
                row = await cursor.fetchone()
        except sqlite3.Error as exc:
            raise StoreReadError(
                message=f"Failed to count chunks for {document_id}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return int(row["n"])

    def get_provider_name(self) -> str:
        return "sqlite_chunk_store"

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    async def _fetch_document(
        self, db: aiosqlite.Connection, document_id: str
    ) -> BrandDocument | None:
        cursor = await db.execute(_SELECT_DOCUMENT_SQL, (document_id,))
        row = await cursor.fetchone()
        return self._row_to_document(row) if row is not None else None

    def _row_to_document(self, row: aiosqlite.Row) -> BrandDocument:
        try:
            return BrandDocument(
                document_id=row["id"],
                brand_id=row["brand_id"],
                status=row["status"],
                raw_text=row["raw_text"],
                is_primary=bool(row["is_primary"]),
                file_name=row["file_name"],
                created_at=row["created_at"],
            )
        except ValidationError as exc:
            raise StoreReadError(
                message=f"Malformed document row {row['id']}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    def _row_to_chunk(self, row: aiosqlite.Row) -> KnowledgeChunk:
        try:
            raw_embedding = row["embedding"]
            return KnowledgeChunk(
                chunk_id=row["id"],
                document_id=row["document_id"],
                chunk_index=row["chunk_index"],
                text=row["text"],
                start_offset=row["start_offset"],
                end_offset=row["end_offset"],
                embedding=json.loads(raw_embedding) if raw_embedding is not None else None,
                is_master_source=bool(row["is_master_source"]),
                source_file_name=row["file_name"],
            )
        except (ValidationError, ValueError) as exc:
            raise StoreReadError(
                message=f"Malformed chunk row {row['id']}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
