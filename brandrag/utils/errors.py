"""Custom exception hierarchy for brandrag.

All application exceptions inherit from :class:`BrandRAGError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "gemini", "openai", "sqlite") caused the failure.

    BrandRAGError  (base -- catch-all for any brandrag error)
    +-- DocumentNotFoundError     (ingest / set-primary on an unknown id)
    +-- MissingContentError       (document has no extractable text)
    +-- DocumentStateError        (lifecycle transition not allowed)
    +-- EmbeddingUnavailableError (embedding call failed or timed out)
    +-- StoreError
    |   +-- StoreWriteError       (atomic batch rolled back)
    |   +-- StoreReadError        (chunk / document read failed)
    +-- LLMError                  (completion call failed)
    +-- ConfigurationError        (startup / missing config)

Each class carries an ``http_status`` hint that the API middleware uses
when converting the error into a JSON response.
"""


class BrandRAGError(Exception):
    """Base exception for all brandrag errors.

    The ``__str__`` method prefixes the provider name in brackets for
    structured log output, e.g. ``[gemini] Embedding request timed out``.
    """

    http_status: int = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Document lifecycle errors (client errors, never retried)
# ---------------------------------------------------------------------------

class DocumentNotFoundError(BrandRAGError):
    """Raised when an operation targets a document id that does not exist."""

    http_status = 404

    def __init__(
        self,
        message: str = "Document not found",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MissingContentError(BrandRAGError):
    """Raised when a document has no text to chunk.  Status is left unchanged."""

    http_status = 400

    def __init__(
        self,
        message: str = "Document has no extractable text content",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentStateError(BrandRAGError):
    """Raised when a document's status does not allow the requested transition."""

    http_status = 409

    def __init__(
        self,
        message: str = "Document status does not allow this operation",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Embedding errors (recovered locally by ingestion and retrieval)
# ---------------------------------------------------------------------------

class EmbeddingUnavailableError(BrandRAGError):
    """Raised when the upstream embedding call errors or times out.

    Ingestion catches this per chunk and stores a null vector; retrieval
    catches it for the query and falls back to unranked context.
    """

    http_status = 503

    def __init__(
        self,
        message: str = "Embedding service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Chunk Store errors
# ---------------------------------------------------------------------------

class StoreError(BrandRAGError):
    """Base class for persistence failures in the Chunk Store."""

    def __init__(
        self,
        message: str = "Chunk store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreWriteError(StoreError):
    """Raised when an atomic write batch fails.  Nothing from the batch is visible."""

    def __init__(
        self,
        message: str = "Chunk store write failed; batch rolled back",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class StoreReadError(StoreError):
    """Raised when reading documents or chunks from the store fails."""

    def __init__(
        self,
        message: str = "Chunk store read failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Generation / configuration errors
# ---------------------------------------------------------------------------

class LLMError(BrandRAGError):
    """Raised when an LLM completion call fails or returns an unusable response."""

    http_status = 502

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(BrandRAGError):
    """Raised when configuration is invalid or a required provider is missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
