"""
OpenAI provider.

Works with the standard OpenAI API and with compatible endpoints set through
OPENAI_BASE_URL.
"""

import os
from typing import Optional, List

import openai

from ..errors import GenerationError
from .base import LLMProvider, LLMConfig, LLMResponse, Message, ProviderStatus


class OpenAIProvider(LLMProvider):
    """Chat completions through the OpenAI SDK."""

    DEFAULT_MODEL = "gpt-4o-mini"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_MODEL,
        base_url: Optional[str] = None,
        timeout: int = 30
    ):
        """
        Initialize the provider.

        Args:
            api_key: API key (or set OPENAI_API_KEY)
            model: Model to use
            base_url: Custom endpoint (or set OPENAI_BASE_URL)
            timeout: Request timeout in seconds
        """
        self.api_key = api_key or os.getenv("OPENAI_API_KEY")
        self.base_url = base_url or os.getenv("OPENAI_BASE_URL")
        super().__init__(LLMConfig(
            provider_name="openai",
            model=model,
            api_key=self.api_key,
            base_url=self.base_url,
            timeout=timeout
        ))
        self._client = None
        if self.api_key:
            client_kwargs = {"api_key": self.api_key, "timeout": timeout}
            if self.base_url:
                client_kwargs["base_url"] = self.base_url
            self._client = openai.OpenAI(**client_kwargs)
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
            raise GenerationError("OpenAI provider is not available. Check OPENAI_API_KEY.")

        try:
            response = self._client.chat.completions.create(
                model=self.config.model,
                messages=[m.to_dict() for m in messages],
                temperature=temperature if temperature is not None else self.config.temperature,
                max_tokens=max_tokens or self.config.max_tokens
            )
        except openai.RateLimitError as exc:
            self._status = ProviderStatus.RATE_LIMITED
            raise GenerationError("OpenAI rate limit or quota exceeded") from exc
        except openai.OpenAIError as exc:
            self._status = ProviderStatus.ERROR
            raise GenerationError(f"OpenAI request failed: {exc}") from exc

        usage = response.usage
        return LLMResponse(
            content=response.choices[0].message.content or "",
            model=response.model,
            provider="openai",
            usage={
                "prompt_tokens": usage.prompt_tokens if usage else 0,
                "completion_tokens": usage.completion_tokens if usage else 0,
                "total_tokens": usage.total_tokens if usage else 0
            },
            finish_reason=response.choices[0].finish_reason or "stop",
            raw_response=response
        )
