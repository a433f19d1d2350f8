"""LLM Provider implementation using Anthropic Claude API."""

from typing import Protocol

import anthropic

from ..config import get_api_key, get_model
from ..errors import ReasoningTransportError


class ILLMProvider(Protocol):
    """Transport to the external reasoning service: prompt in, text out."""

    async def complete(
        self,
        messages: list[dict],  # [{"role": "user", "content": "..."}]
        system: str | None = None,
        max_tokens: int = 1024,
    ) -> str:
        """Generate completion."""
        ...


class LLMProvider:
    """Anthropic Claude API provider."""

    def __init__(self, api_key: str | None = None, model: str | None = None):
        self._api_key = api_key or get_api_key()
        if not self._api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")

        self._model = model or get_model()
        self._client = anthropic.AsyncAnthropic(api_key=self._api_key)

    @property
    def model(self) -> str:
        return self._model

    async def complete(
        self,
        messages: list[dict],  # [{"role": "user", "content": "..."}]
        system: str | None = None,
        max_tokens: int = 1024,
    ) -> str:
        """Generate completion using Claude API."""
        kwargs = {
            "model": self._model,
            "messages": messages,
            "max_tokens": max_tokens,
        }
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.messages.create(**kwargs)
        except Exception as e:
            raise ReasoningTransportError(f"LLM API error: {e}") from e

        text_blocks = [
            block.text
            for block in response.content
            if isinstance(getattr(block, "text", None), str)
        ]
        if not text_blocks:
            raise ReasoningTransportError("LLM API returned no text content")
        return "".join(text_blocks)
