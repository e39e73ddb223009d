"""Gemini LLM provider adapter.

Calls ``models/{model}:generateContent`` through a shared
``httpx.AsyncClient`` and returns the first candidate's text.
"""

from __future__ import annotations

import httpx
import structlog

from brandrag.config.settings import Settings
from brandrag.interfaces.llm_provider import ILLMProvider
from brandrag.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


class GeminiLLMProvider(ILLMProvider):
    """LLM provider backed by the Gemini ``generateContent`` endpoint."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient | None = None) -> None:
        self._api_key = settings.gemini_api_key
        self._base_url = settings.gemini_base_url.rstrip("/")
        self._model = settings.gemini_text_model or "gemini-2.5-flash"
        # Generation calls are slower than embeddings; keep a longer read timeout.
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(60.0, connect=5.0)
        )

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a completion; returns ``""`` when the model sends no text."""
        payload: dict = {
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        if system_prompt:
            payload["systemInstruction"] = {"parts": [{"text": system_prompt}]}

        try:
            response = await self._client.post(
                f"{self._base_url}/models/{self._model}:generateContent",
                headers={"x-goog-api-key": self._api_key},
                json=payload,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as exc:
            raise LLMError(
                message=f"Gemini API returned HTTP {exc.response.status_code}",
                provider_name=self.get_provider_name(),
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise LLMError(
                message=f"Gemini request failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        candidates = data.get("candidates") or []
        parts = ((candidates[0].get("content") or {}).get("parts") or []) if candidates else []
        text = "".join(part.get("text", "") for part in parts)

        usage = data.get("usageMetadata") or {}
        logger.info(
            "gemini_completion",
            model=self._model,
            prompt_tokens=usage.get("promptTokenCount"),
            output_tokens=usage.get("candidatesTokenCount"),
        )
        return text

    def get_provider_name(self) -> str:
        return "gemini"

    def is_available(self) -> bool:
        return bool(self._api_key)
