"""
Text-generation providers for wording interview questions.

Supports:
- Groq (hosted, free tier)
- Ollama (local)
- OpenAI (hosted)
"""

from .base import LLMProvider, LLMResponse, LLMConfig, Message, ProviderStatus
from .manager import LLMManager, LLMManagerConfig

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LLMConfig",
    "Message",
    "ProviderStatus",
    "LLMManager",
    "LLMManagerConfig"
]
