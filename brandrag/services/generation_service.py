"""Brand content generation on top of the assembled knowledge-base context.

Assembles the final prompt (knowledge-base block or the brand-profile
fallback, strategy profile, request details, caller instructions) and sends
it to the configured :class:`ILLMProvider`.
"""

from __future__ import annotations

import structlog

from brandrag.interfaces.llm_provider import ILLMProvider
from brandrag.models.brand import BrandProfile, GenerationResult
from brandrag.services.context_assembler import ContextAssembler

logger = structlog.get_logger(logger_name=__name__)

_DIVIDER = "=" * 40
_PROFILE_FALLBACK = "Use the default brand profile below."
_EMPTY_COMPLETION = "The model returned no content."


class GenerationService:
    """Generates brand-compliant copy for one topic/platform request."""

    _SYSTEM_PROMPT = (
        "You are a brand content specialist. Write only in the brand's voice. "
        "When you use material from the knowledge base, repeat its [Source: ...] "
        "tag verbatim after the sentence that relies on it."
    )

    def __init__(self, context_assembler: ContextAssembler, llm: ILLMProvider) -> None:
        self._assembler = context_assembler
        self._llm = llm

    async def generate(
        self,
        brand: BrandProfile,
        topic: str,
        platform: str,
        user_text: str = "",
        system_prompt: str = "",
    ) -> GenerationResult:
        """Generate content and return it with the context's citation labels.

        Raises
        ------
        brandrag.utils.errors.LLMError
            If the completion call fails.
        """
        context = await self._assembler.build_generation_context(brand, topic, platform)
        prompt = self.build_prompt(
            brand, topic, platform, context.context_block, user_text, system_prompt
        )

        text = await self._llm.complete(system_prompt=self._SYSTEM_PROMPT, user_prompt=prompt)
        logger.info(
            "content_generated",
            brand_id=brand.brand_id,
            provider=self._llm.get_provider_name(),
            rag_used=context.has_context,
            output_chars=len(text),
        )
        return GenerationResult(
            result=text.strip() or _EMPTY_COMPLETION,
            citations=list(context.citation_labels),
        )

    @staticmethod
    def build_prompt(
        brand: BrandProfile,
        topic: str,
        platform: str,
        context_block: str,
        user_text: str = "",
        system_prompt: str = "",
    ) -> str:
        """Render the user prompt sent to the LLM."""
        lines = [
            f"You are the content expert for {brand.name or brand.brand_id}.",
            "Base your writing on the brand knowledge base below, consolidated "
            "from the master guideline and supporting documents.",
            "",
            _DIVIDER,
            "BRAND KNOWLEDGE BASE",
            _DIVIDER,
            context_block or _PROFILE_FALLBACK,
            _DIVIDER,
            "",
            "[STRATEGY PROFILE]",
            f"Personality: {brand.personality}",
            f"Voice: {brand.voice}",
            f"USP: {', '.join(brand.usp)}",
            "",
            "[REQUEST]",
            f"Topic: {topic}",
            f"Platform: {platform}",
        ]
        if user_text:
            lines.append(f"Notes: {user_text}")
        if system_prompt:
            lines.extend(["", system_prompt])
        return "\n".join(lines)
