"""
Ollama provider.

Runs the question generator against a local Ollama server, so interviews
never leave the machine. Start it with `ollama serve` and pull a model with
`ollama pull mistral:7b`.
"""

import logging
import os
from typing import Optional, List

import requests

from ..errors import GenerationError
from .base import LLMProvider, LLMConfig, LLMResponse, Message, ProviderStatus

logger = logging.getLogger(__name__)


class OllamaProvider(LLMProvider):
    """Chat completions from a local Ollama server."""

    DEFAULT_MODEL = "mistral:7b"
    DEFAULT_HOST = "http://localhost:11434"

    def __init__(
        self,
        model: str = DEFAULT_MODEL,
        host: Optional[str] = None,
        timeout: int = 120,
        check: bool = True
    ):
        """
        Initialize the provider.

        Args:
            model: Model to use
            host: Server URL (default: OLLAMA_HOST or http://localhost:11434)
            timeout: Request timeout in seconds; local inference can be slow
            check: Probe the server right away
        """
        self.host = (host or os.environ.get("OLLAMA_HOST", self.DEFAULT_HOST)).rstrip("/")
        super().__init__(LLMConfig(
            provider_name="ollama",
            model=model,
            base_url=self.host,
            timeout=timeout
        ))
        if check:
            self.check_availability()

    def check_availability(self) -> ProviderStatus:
        """Probe the server and check whether the model is installed."""
        try:
            response = requests.get(f"{self.host}/api/tags", timeout=5)
        except requests.RequestException:
            self._status = ProviderStatus.NOT_CONFIGURED
            return self._status

        if response.status_code != 200:
            self._status = ProviderStatus.ERROR
            return self._status

        self._status = ProviderStatus.AVAILABLE
        names = [m.get("name", "") for m in response.json().get("models", [])]
        if not any(self.config.model in name for name in names):
            logger.warning(
                "Ollama model %r not found locally (available: %s). Pull it with: ollama pull %s",
                self.config.model, names, self.config.model
            )
        return self._status

    def is_available(self) -> bool:
        return self._status == ProviderStatus.AVAILABLE

    def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> LLMResponse:
        if not self.is_available():
            raise GenerationError("Ollama not available. Start it with: ollama serve")

        payload = {
            "model": self.config.model,
            "messages": [m.to_dict() for m in messages],
            "stream": False,
            "options": {
                "temperature": temperature if temperature is not None else self.config.temperature,
                "num_predict": max_tokens or self.config.max_tokens
            }
        }

        try:
            response = requests.post(
                f"{self.host}/api/chat",
                json=payload,
                timeout=self.config.timeout
            )
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as exc:
            raise GenerationError(
                f"Ollama request timed out after {self.config.timeout}s"
            ) from exc
        except (requests.RequestException, ValueError) as exc:
            self._status = ProviderStatus.ERROR
            raise GenerationError(f"Ollama request failed: {exc}") from exc

        prompt_tokens = data.get("prompt_eval_count", 0)
        completion_tokens = data.get("eval_count", 0)
        return LLMResponse(
            content=data.get("message", {}).get("content", ""),
            model=data.get("model", self.config.model),
            provider="ollama",
            usage={
                "prompt_tokens": prompt_tokens,
                "completion_tokens": completion_tokens,
                "total_tokens": prompt_tokens + completion_tokens
            },
            finish_reason=data.get("done_reason", "stop"),
            raw_response=data
        )
