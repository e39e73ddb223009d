"""Unit tests for embedding provider adapters: Gemini (httpx) and OpenAI."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from brandrag.config.settings import Settings
from brandrag.providers.embedding.gemini_embedding_provider import GeminiEmbeddingProvider
from brandrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from brandrag.utils.errors import EmbeddingUnavailableError


def _settings(**overrides) -> Settings:  # noqa: ANN003
    defaults = {
        "gemini_api_key": "gm-test",
        "gemini_base_url": "https://gemini.test/v1beta",
        "gemini_embedding_model": "",
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_embedding_model": "",
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _gemini(handler, **overrides) -> GeminiEmbeddingProvider:  # noqa: ANN001, ANN003
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return GeminiEmbeddingProvider(_settings(**overrides), http_client=client)


# ======================================================================
# Gemini Embedding Provider
# ======================================================================


class TestGeminiEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_embed_single_posts_embed_content(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"embedding": {"values": [0.1, 0.2, 0.3]}})

        result = await _gemini(handler).embed_single("brand voice")

        assert result == [0.1, 0.2, 0.3]
        assert str(seen[0].url) == "https://gemini.test/v1beta/models/embedding-001:embedContent"
        assert seen[0].headers["x-goog-api-key"] == "gm-test"
        assert json.loads(seen[0].content) == {"content": {"parts": [{"text": "brand voice"}]}}

    @pytest.mark.asyncio
    async def test_embed_batches_in_slices_of_100(self) -> None:
        batch_sizes: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests = json.loads(request.content)["requests"]
            batch_sizes.append(len(requests))
            return httpx.Response(200, json={"embeddings": [{"values": [1.0]} for _ in requests]})

        result = await _gemini(handler).embed([f"t{i}" for i in range(150)])

        assert batch_sizes == [100, 50]
        assert len(result) == 150

    @pytest.mark.asyncio
    async def test_embed_empty_list_makes_no_request(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        assert await _gemini(handler).embed([]) == []

    @pytest.mark.asyncio
    async def test_count_mismatch_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"embeddings": [{"values": [1.0]}]})

        with pytest.raises(EmbeddingUnavailableError):
            await _gemini(handler).embed(["a", "b"])

    @pytest.mark.asyncio
    async def test_http_error_raises_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(429, json={"error": {"message": "quota"}})

        with pytest.raises(EmbeddingUnavailableError, match="429"):
            await _gemini(handler).embed_single("x")

    @pytest.mark.asyncio
    async def test_timeout_raises_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        with pytest.raises(EmbeddingUnavailableError, match="timed out"):
            await _gemini(handler).embed_single("x")

    @pytest.mark.asyncio
    async def test_missing_values_raises_unavailable(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"embedding": {}})

        with pytest.raises(EmbeddingUnavailableError):
            await _gemini(handler).embed_single("x")

    def test_metadata(self) -> None:
        provider = GeminiEmbeddingProvider(_settings())

        assert provider.get_provider_name() == "gemini_embedding"
        assert provider.get_dimension() == 768
        assert provider.is_available() is True
        assert GeminiEmbeddingProvider(_settings(gemini_api_key="")).is_available() is False


# ======================================================================
# OpenAI Embedding Provider
# ======================================================================


def _openai_response(*vectors: list[float]) -> MagicMock:
    response = MagicMock()
    response.data = [MagicMock(embedding=v) for v in vectors]
    response.usage = MagicMock(total_tokens=10)
    return response


class TestOpenAIEmbeddingProvider:
    @pytest.mark.asyncio
    async def test_embed_single(self) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_openai_response([0.5] * 4))

        with patch(
            "brandrag.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(_settings())
            result = await provider.embed_single("hello")

        assert result == [0.5] * 4
        kwargs = mock_client.embeddings.create.call_args.kwargs
        assert kwargs["model"] == "text-embedding-3-small"
        assert kwargs["input"] == ["hello"]

    @pytest.mark.asyncio
    async def test_api_error_raises_unavailable(self) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(
            side_effect=openai.APIError(message="Rate limit", request=MagicMock(), body=None)
        )

        with patch(
            "brandrag.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingUnavailableError):
                await provider.embed_single("hello")

    @pytest.mark.asyncio
    async def test_empty_response_raises_unavailable(self) -> None:
        mock_client = AsyncMock()
        mock_client.embeddings.create = AsyncMock(return_value=_openai_response())

        with patch(
            "brandrag.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI",
            return_value=mock_client,
        ):
            provider = OpenAIEmbeddingProvider(_settings())
            with pytest.raises(EmbeddingUnavailableError):
                await provider.embed_single("hello")

    def test_compatible_endpoint_label(self) -> None:
        with patch("brandrag.providers.embedding.openai_embedding_provider.openai.AsyncOpenAI"):
            provider = OpenAIEmbeddingProvider(
                _settings(openai_base_url="https://api.together.xyz/v1",
                          openai_embedding_model="BAAI/bge-large-en-v1.5")
            )

        assert provider.get_provider_name() == "openai-compatible_embedding"
        assert provider.get_dimension() == 1024
