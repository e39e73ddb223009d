"""Unit tests for the BrandRAGError hierarchy."""

from __future__ import annotations

import pytest

from brandrag.utils.errors import (
    BrandRAGError,
    ConfigurationError,
    DocumentNotFoundError,
    DocumentStateError,
    EmbeddingUnavailableError,
    LLMError,
    MissingContentError,
    StoreError,
    StoreReadError,
    StoreWriteError,
)


@pytest.mark.parametrize(
    ("exc_cls", "status"),
    [
        (DocumentNotFoundError, 404),
        (MissingContentError, 400),
        (DocumentStateError, 409),
        (EmbeddingUnavailableError, 503),
        (StoreWriteError, 500),
        (StoreReadError, 500),
        (LLMError, 502),
        (ConfigurationError, 500),
    ],
)
def test_http_status_hints(exc_cls: type[BrandRAGError], status: int) -> None:
    assert exc_cls().http_status == status
    assert issubclass(exc_cls, BrandRAGError)


def test_store_errors_share_a_base() -> None:
    assert issubclass(StoreWriteError, StoreError)
    assert issubclass(StoreReadError, StoreError)


def test_str_prefixes_provider_name() -> None:
    exc = EmbeddingUnavailableError(message="timed out", provider_name="gemini_embedding")

    assert str(exc) == "[gemini_embedding] timed out"
    assert exc.message == "timed out"
    assert exc.provider_name == "gemini_embedding"


def test_str_without_provider_is_message() -> None:
    assert str(MissingContentError(message="empty")) == "empty"
