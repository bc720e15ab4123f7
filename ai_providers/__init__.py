"""
AI Providers Package
AI Bookmaker - Generation Service Providers

Supports:
- Google Gemini (gemini-2.5-flash, gemini-2.5-pro, etc.)
- OpenAI GPT (gpt-4o, gpt-4.1, etc.)

Usage:
    from ai_providers import create_provider, AIMessage

    provider = create_provider(settings)
    response = await provider.complete(
        [AIMessage(role="user", content=prompt)],
        json_mode=True
    )
    print(response.content)
"""

from .base import (
    BaseAIProvider,
    AIProviderType,
    AIMessage,
    AIResponse,
    AIConfig
)

from .openai_provider import OpenAIProvider
from .gemini_provider import GeminiProvider

from .manager import (
    ProviderInfo,
    PROVIDER_REGISTRY,
    PROVIDER_INFO,
    resolve_provider_type,
    list_providers,
    create_provider,
)

__all__ = [
    # Base classes
    "BaseAIProvider",
    "AIProviderType",
    "AIMessage",
    "AIResponse",
    "AIConfig",

    # Providers
    "OpenAIProvider",
    "GeminiProvider",

    # Manager
    "ProviderInfo",
    "PROVIDER_REGISTRY",
    "PROVIDER_INFO",
    "resolve_provider_type",
    "list_providers",
    "create_provider",
]

__version__ = "1.0.0"
