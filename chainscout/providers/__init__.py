"""Model providers for the orchestrator."""

from .base import BaseProvider, ProviderConfig
from .gemini import GeminiChatSession, GeminiProvider
from .openai_provider import OpenAIProvider

__all__ = [
    "BaseProvider",
    "ProviderConfig",
    "GeminiProvider",
    "GeminiChatSession",
    "OpenAIProvider",
]
