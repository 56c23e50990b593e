"""
LLM Manager - one chat interface over several providers.

Providers are tried in priority order. A provider that fails is benched for
a few minutes and a rate-limited one for an hour; once the bench time has
passed it is marked available again.
"""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional, List, Dict, Any

from ..errors import GenerationError
from .base import LLMConfig, LLMProvider, LLMResponse, Message, ProviderStatus

logger = logging.getLogger(__name__)


@dataclass
class ProviderUsage:
    """Per-provider counters."""
    requests: int = 0
    tokens: int = 0
    errors: int = 0
    last_error: Optional[str] = None
    rate_limit_reset: Optional[datetime] = None


@dataclass
class LLMManagerConfig:
    """Configuration for the manager."""
    provider_priority: List[str] = field(default_factory=lambda: ["groq", "ollama", "openai"])
    rate_limit_cooldown: timedelta = timedelta(hours=1)
    error_cooldown: timedelta = timedelta(minutes=5)

    @classmethod
    def from_env(cls) -> "LLMManagerConfig":
        """Read INTAKE_LLM_PROVIDERS (comma separated, highest priority first)."""
        raw = os.environ.get("INTAKE_LLM_PROVIDERS", "")
        names = [n.strip().lower() for n in raw.split(",") if n.strip()]
        return cls(provider_priority=names) if names else cls()


def _build_provider(name: str) -> Optional[LLMProvider]:
    if name == "groq":
        from .groq_provider import GroqProvider
        return GroqProvider()
    if name == "ollama":
        from .ollama_provider import OllamaProvider
        return OllamaProvider()
    if name == "openai":
        from .openai_provider import OpenAIProvider
        return OpenAIProvider()
    logger.warning("Unknown LLM provider %r ignored", name)
    return None


class LLMManager(LLMProvider):
    """
    Chains providers with automatic failover.

    Usage:
        manager = LLMManager()
        response = manager.chat([Message(role="user", content="Hello")])
    """

    def __init__(
        self,
        config: Optional[LLMManagerConfig] = None,
        providers: Optional[Dict[str, LLMProvider]] = None
    ):
        """
        Initialize the manager.

        Args:
            config: Provider priority and cooldown
            providers: Ready-made providers by name; when omitted every name
                in the priority list is constructed from the environment
        """
        super().__init__(LLMConfig(provider_name="manager", model=""))
        self.manager_config = config or LLMManagerConfig()
        if providers is None:
            providers = {}
            for name in self.manager_config.provider_priority:
                provider = _build_provider(name)
                if provider is not None and provider.is_available():
                    providers[name] = provider
                    logger.info("LLM provider %s initialized (%s)", name, provider.model)
        self._providers: Dict[str, LLMProvider] = providers
        self._usage: Dict[str, ProviderUsage] = {name: ProviderUsage() for name in providers}

    def _candidates(self) -> List[str]:
        names = [n for n in self.manager_config.provider_priority if n in self._providers]
        names += [n for n in self._providers if n not in names]
        now = datetime.now()
        ready = []
        for name in names:
            provider = self._providers[name]
            usage = self._usage[name]
            if usage.rate_limit_reset:
                if now < usage.rate_limit_reset:
                    continue  # Still benched
                usage.rate_limit_reset = None
                if provider.status in (ProviderStatus.RATE_LIMITED, ProviderStatus.ERROR):
                    provider._status = ProviderStatus.AVAILABLE
            if provider.is_available():
                ready.append(name)
        return ready

    @property
    def available_providers(self) -> List[str]:
        return self._candidates()

    @property
    def model(self) -> str:
        candidates = self._candidates()
        return self._providers[candidates[0]].model if candidates else ""

    def is_available(self) -> bool:
        return bool(self._candidates())

    def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> LLMResponse:
        """
        Send a chat request to the first provider that answers.

        Raises:
            GenerationError: If no provider is available or all of them fail
        """
        candidates = self._candidates()
        if not candidates:
            raise GenerationError(
                "No LLM providers available. Set GROQ_API_KEY or OPENAI_API_KEY, "
                "or run a local Ollama server."
            )

        last_error: Optional[GenerationError] = None
        for name in candidates:
            provider = self._providers[name]
            usage = self._usage[name]
            try:
                response = provider.chat(messages, temperature=temperature, max_tokens=max_tokens)
            except GenerationError as exc:
                usage.errors += 1
                usage.last_error = str(exc)[:200]
                if provider.status == ProviderStatus.RATE_LIMITED:
                    usage.rate_limit_reset = datetime.now() + self.manager_config.rate_limit_cooldown
                elif provider.status == ProviderStatus.ERROR:
                    usage.rate_limit_reset = datetime.now() + self.manager_config.error_cooldown
                logger.warning("LLM provider %s failed: %s", name, exc)
                last_error = exc
                continue
            usage.requests += 1
            usage.tokens += response.tokens_used
            return response

        raise GenerationError(f"All LLM providers failed: {last_error}") from last_error

    def get_status(self) -> Dict[str, Any]:
        return {
            name: {
                "status": provider.status.value,
                "model": provider.model,
                "requests": self._usage[name].requests,
                "tokens": self._usage[name].tokens,
                "errors": self._usage[name].errors,
                "last_error": self._usage[name].last_error,
            }
            for name, provider in self._providers.items()
        }
