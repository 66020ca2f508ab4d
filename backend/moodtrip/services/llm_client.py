"""Unified LLM client — tries OpenAI first, falls back to Anthropic."""

import logging

import anthropic
from openai import AsyncOpenAI

from moodtrip.config import settings
from moodtrip.services.personalization.exceptions import UpstreamUnavailable

logger = logging.getLogger(__name__)


class LLMClient:
    """Unified async LLM client with OpenAI primary + Anthropic fallback."""

    def __init__(
        self,
        openai_api_key: str | None = None,
        anthropic_api_key: str | None = None,
        openai_model: str | None = None,
        anthropic_model: str | None = None,
    ):
        self._openai = None
        self._anthropic = None
        self._openai_model = openai_model or settings.openai_model
        self._anthropic_model = anthropic_model or settings.anthropic_model

        openai_key = settings.openai_api_key if openai_api_key is None else openai_api_key
        anthropic_key = settings.anthropic_api_key if anthropic_api_key is None else anthropic_api_key

        if openai_key:
            self._openai = AsyncOpenAI(api_key=openai_key)
        if anthropic_key:
            self._anthropic = anthropic.AsyncAnthropic(api_key=anthropic_key)

    @property
    def configured(self) -> bool:
        return self._openai is not None or self._anthropic is not None

    async def complete(
        self,
        system: str,
        user: str,
        *,
        messages: list[dict] | None = None,
        max_tokens: int = 1000,
        temperature: float = 0,
        json_mode: bool = False,
    ) -> str:
        """Get a completion from the best available LLM.

        Args:
            system: System prompt
            user: User message (ignored if messages is provided)
            messages: Full message list (for multi-turn). Should NOT include system.
            max_tokens: Max output tokens
            temperature: Sampling temperature
            json_mode: If True, force JSON output (OpenAI response_format)

        Returns:
            Raw text response from the LLM.

        Raises:
            UpstreamUnavailable if no provider is configured or all providers fail.
        """
        errors = []

        if messages:
            chat_messages = list(messages)
        else:
            chat_messages = [{"role": "user", "content": user}]

        if self._openai:
            try:
                openai_messages = [{"role": "system", "content": system}] + chat_messages
                kwargs: dict = {
                    "model": self._openai_model,
                    "max_tokens": max_tokens,
                    "temperature": temperature,
                    "messages": openai_messages,
                }
                if json_mode:
                    kwargs["response_format"] = {"type": "json_object"}
                response = await self._openai.chat.completions.create(**kwargs)
                return (response.choices[0].message.content or "").strip()
            except Exception as e:
                errors.append(f"OpenAI: {e}")
                logger.warning(f"OpenAI failed, trying Anthropic: {e}")

        if self._anthropic:
            try:
                response = await self._anthropic.messages.create(
                    model=self._anthropic_model,
                    max_tokens=max_tokens,
                    temperature=temperature,
                    system=system,
                    messages=chat_messages,
                )
                return response.content[0].text.strip()
            except Exception as e:
                errors.append(f"Anthropic: {e}")
                logger.warning(f"Anthropic also failed: {e}")

        if not errors:
            raise UpstreamUnavailable("No LLM provider configured")
        raise UpstreamUnavailable(f"All LLM providers failed: {'; '.join(errors)}")


# Singleton
llm_client = LLMClient()
