"""
Base classes for text-generation providers.

The interview engine only needs one thing from a language model: the wording
of the next substantive question. Every backend implements the same small
chat interface so they can be swapped or chained.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, List, Dict, Any
from enum import Enum


class ProviderStatus(str, Enum):
    """Status of a provider."""
    AVAILABLE = "available"
    RATE_LIMITED = "rate_limited"
    ERROR = "error"
    NOT_CONFIGURED = "not_configured"


@dataclass
class LLMConfig:
    """Configuration for a provider."""
    provider_name: str
    model: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    temperature: float = 0.7
    max_tokens: int = 300
    timeout: int = 30


@dataclass
class Message:
    """A single message in a conversation."""
    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class LLMResponse:
    """Response from a provider."""
    content: str
    model: str
    provider: str
    usage: Dict[str, int] = field(default_factory=dict)
    finish_reason: str = "stop"
    raw_response: Optional[Any] = None

    @property
    def tokens_used(self) -> int:
        return self.usage.get("total_tokens", 0)


class LLMProvider(ABC):
    """
    Abstract base class for providers.

    Implementations raise GenerationError when a request fails.
    """

    def __init__(self, config: LLMConfig):
        self.config = config
        self._status = ProviderStatus.NOT_CONFIGURED

    @property
    def name(self) -> str:
        return self.config.provider_name

    @property
    def model(self) -> str:
        return self.config.model

    @property
    def status(self) -> ProviderStatus:
        return self._status

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the provider is configured and reachable."""

    @abstractmethod
    def chat(
        self,
        messages: List[Message],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None
    ) -> LLMResponse:
        """
        Send a chat completion request.

        Args:
            messages: Conversation messages, system prompt first
            temperature: Override default temperature
            max_tokens: Override default max tokens

        Returns:
            LLMResponse with the model's reply
        """

    def complete(self, prompt: str, system_prompt: Optional[str] = None) -> LLMResponse:
        """Single-prompt convenience wrapper around chat()."""
        messages = []
        if system_prompt:
            messages.append(Message(role="system", content=system_prompt))
        messages.append(Message(role="user", content=prompt))
        return self.chat(messages)
