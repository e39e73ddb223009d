"""Abstract base class for the document / chunk persistence layer.

The Chunk Store owns guideline documents and the chunks derived from them.
It is the only shared mutable resource in the RAG core; consistency comes
from the backing store's transactions, never from in-process locks.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from brandrag.models.rag import BrandDocument, KnowledgeChunk


# Concrete implementation: SQLiteChunkStore (brandrag/providers/store/)
class IChunkStore(ABC):
    """Contract for document and chunk persistence.

    All methods are async so network-backed stores can be substituted.
    """

    @abstractmethod
    async def initialize(self) -> None:
        """Create the backing schema if it does not exist."""

    @abstractmethod
    async def create_document(
        self,
        brand_id: str,
        file_name: str,
        raw_text: str | None,
        is_primary: bool = False,
    ) -> BrandDocument:
        """Store a new ``pending`` document.

        When *is_primary* is true, every other document of the brand is
        demoted in the same transaction.
        """

    @abstractmethod
    async def get_document(self, document_id: str) -> BrandDocument | None:
        """Return the document, or ``None`` if it does not exist."""

    @abstractmethod
    async def list_documents(self, brand_id: str) -> list[BrandDocument]:
        """Return every document of *brand_id*, oldest first."""

    @abstractmethod
    async def save_chunks(self, document_id: str, chunks: list[KnowledgeChunk]) -> int:
        """Persist *chunks* and mark the document ``approved`` atomically.

        Any chunks previously stored for the document are replaced in the
        same transaction.  Either every write and the status flip succeed,
        or none of them are visible.

        Returns
        -------
        int
            The number of chunks written.

        Raises
        ------
        brandrag.utils.errors.DocumentNotFoundError
            If the document does not exist.
        brandrag.utils.errors.DocumentStateError
            If the document is ``rejected`` when the batch is written.
        brandrag.utils.errors.StoreWriteError
            If the batch fails; it is rolled back and may be retried.
        """

    @abstractmethod
    async def load_approved_chunks_for_brand(self, brand_id: str) -> list[KnowledgeChunk]:
        """Return all chunks of all ``approved`` documents of *brand_id*.

        Chunks come back in storage order: documents oldest first, then
        ``chunk_index`` ascending.  Each chunk carries its parent's file name
        in ``source_file_name``.

        Raises
        ------
        brandrag.utils.errors.StoreReadError
            If the read fails.
        """

    @abstractmethod
    async def set_primary(self, document_id: str) -> BrandDocument:
        """Make *document_id* the brand's only primary document.

        Raises
        ------
        brandrag.utils.errors.DocumentNotFoundError
            If the document does not exist.
        brandrag.utils.errors.StoreWriteError
            If the transaction fails.
        """

    @abstractmethod
    async def reject_document(self, document_id: str) -> BrandDocument:
        """Move a ``pending`` document to ``rejected``.

        Raises
        ------
        brandrag.utils.errors.DocumentNotFoundError
            If the document does not exist.
        brandrag.utils.errors.DocumentStateError
            If the document is not ``pending``.
        """

    @abstractmethod
    async def count_chunks(self, document_id: str) -> int:
        """Return the number of stored chunks for *document_id*."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this store."""
