"""Unit tests for LLM provider adapters: Gemini (httpx) and OpenAI."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import openai
import pytest

from brandrag.config.settings import Settings
from brandrag.providers.llm.gemini_provider import GeminiLLMProvider
from brandrag.providers.llm.openai_provider import OpenAILLMProvider
from brandrag.utils.errors import LLMError


def _settings(**overrides) -> Settings:  # noqa: ANN003
    defaults = {
        "gemini_api_key": "gm-test",
        "gemini_base_url": "https://gemini.test/v1beta",
        "gemini_text_model": "",
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_text_model": "",
    }
    defaults.update(overrides)
    return Settings(**defaults)


class TestGeminiLLMProvider:
    @pytest.mark.asyncio
    async def test_complete_sends_system_instruction_and_joins_parts(self) -> None:
        seen: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={"candidates": [{"content": {"parts": [{"text": "Hello "}, {"text": "world"}]}}]},
            )

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        provider = GeminiLLMProvider(_settings(), http_client=client)

        text = await provider.complete("Be on brand.", "Write a post.", temperature=0.2, max_tokens=64)

        assert text == "Hello world"
        payload = seen[0]
        assert payload["systemInstruction"] == {"parts": [{"text": "Be on brand."}]}
        assert payload["contents"][0]["parts"][0]["text"] == "Write a post."
        assert payload["generationConfig"] == {"temperature": 0.2, "maxOutputTokens": 64}

    @pytest.mark.asyncio
    async def test_no_candidates_returns_empty_string(self) -> None:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(200, json={"candidates": []}))
        )
        provider = GeminiLLMProvider(_settings(), http_client=client)

        assert await provider.complete("", "prompt") == ""

    @pytest.mark.asyncio
    async def test_http_error_raises_llm_error(self) -> None:
        client = httpx.AsyncClient(
            transport=httpx.MockTransport(lambda r: httpx.Response(500, json={}))
        )
        provider = GeminiLLMProvider(_settings(), http_client=client)

        with pytest.raises(LLMError, match="500"):
            await provider.complete("", "prompt")

    def test_metadata(self) -> None:
        provider = GeminiLLMProvider(_settings())
        assert provider.get_provider_name() == "gemini"
        assert provider.is_available() is True


class TestOpenAILLMProvider:
    @pytest.mark.asyncio
    async def test_complete_returns_message_content(self) -> None:
        mock_response = MagicMock()
        mock_response.choices = [MagicMock(message=MagicMock(content="Spring is here."))]
        mock_response.usage = MagicMock(total_tokens=42)
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(return_value=mock_response)

        with patch("brandrag.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            result = await provider.complete("sys", "user")

        assert result == "Spring is here."
        messages = mock_client.chat.completions.create.call_args.kwargs["messages"]
        assert messages == [
            {"role": "system", "content": "sys"},
            {"role": "user", "content": "user"},
        ]

    @pytest.mark.asyncio
    async def test_api_error_raises_llm_error(self) -> None:
        mock_client = AsyncMock()
        mock_client.chat.completions.create = AsyncMock(
            side_effect=openai.APIError(message="boom", request=MagicMock(), body=None)
        )

        with patch("brandrag.providers.llm.openai_provider.openai.AsyncOpenAI", return_value=mock_client):
            provider = OpenAILLMProvider(_settings())
            with pytest.raises(LLMError):
                await provider.complete("sys", "user")

    def test_provider_label(self) -> None:
        with patch("brandrag.providers.llm.openai_provider.openai.AsyncOpenAI"):
            assert OpenAILLMProvider(_settings()).get_provider_name() == "openai"
            compatible = OpenAILLMProvider(_settings(openai_base_url="https://api.groq.com/openai/v1"))
        assert compatible.get_provider_name() == "openai-compatible"
