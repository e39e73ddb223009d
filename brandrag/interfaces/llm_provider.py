"""Abstract base class for LLM completion providers.

The generation layer hands the assembled prompt to one of these; the RAG
core never inspects the call beyond supplying the context block.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations: GeminiLLMProvider, OpenAILLMProvider
# Located in: brandrag/providers/llm/
class ILLMProvider(ABC):
    """Contract for text-completion services."""

    @abstractmethod
    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> str:
        """Generate a text completion from the model.

        Parameters
        ----------
        system_prompt:
            The system/instruction message that sets the model's behaviour.
        user_prompt:
            The prompt containing the brand context and the request.
        temperature:
            Sampling temperature.
        max_tokens:
            Upper bound on the number of tokens in the response.

        Returns
        -------
        str
            The model's text response (may be empty).

        Raises
        ------
        brandrag.utils.errors.LLMError
            If the API call fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier, e.g. ``"gemini"``."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the provider has the credentials it needs."""
