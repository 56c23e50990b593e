"""
Groq provider.

Fast hosted inference with a free tier. Set GROQ_API_KEY to enable it
(keys at https://console.groq.com).
"""

import os
from typing import Optional, List

import groq

from ..errors import GenerationError
from .base import LLMProvider, LLMConfig, LLMResponse, Message, ProviderStatus


class GroqProvider(LLMProvider):
    """Chat completions through the Groq SDK."""

    DEFAULT_MODEL = "llama-3.3-70b-versatile"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        timeout: int = 30
    ):
        self.api_key = api_key or os.environ.get("GROQ_API_KEY")
        super().__init__(LLMConfig(
            provider_name="groq",
            model=model,
            api_key=self.api_key,
            timeout=timeout
        ))
        self._client = None
        if self.api_key:
            self._client = groq.Groq(api_key=self.api_key, timeout=timeout)
            self._status = ProviderStatus.AVAILABLE

    def is_available(self) -> bool:
        return self._client is not None and self._status == ProviderStatus.AVAILABLE

    def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> LLMResponse:
        if not self.is_available():
            raise GenerationError("Groq not available. Set GROQ_API_KEY.")

        try:
            response = self._client.chat.completions.create(
                model=self.config.model,
                messages=[m.to_dict() for m in messages],
                temperature=temperature if temperature is not None else self.config.temperature,
                max_tokens=max_tokens or self.config.max_tokens
            )
        except groq.RateLimitError as exc:
            self._status = ProviderStatus.RATE_LIMITED
            raise GenerationError("Groq rate limit exceeded") from exc
        except groq.GroqError as exc:
            self._status = ProviderStatus.ERROR
            raise GenerationError(f"Groq request failed: {exc}") from exc

        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            provider="groq",
            usage={
                "prompt_tokens": usage.prompt_tokens if usage else 0,
                "completion_tokens": usage.completion_tokens if usage else 0,
                "total_tokens": usage.total_tokens if usage else 0
            },
            finish_reason=response.choices[0].finish_reason or "stop",
            raw_response=response
        )
