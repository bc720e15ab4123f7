"""
AI Provider Manager
AI Bookmaker - Generation Service Providers

Registry of the supported providers and a factory that builds the one
selected in Settings.
"""

from typing import Optional, Dict, List, Type
from dataclasses import dataclass

from config.logging_config import get_logger
from config.settings import Settings

from .base import BaseAIProvider, AIProviderType, AIConfig
from .openai_provider import OpenAIProvider
from .gemini_provider import GeminiProvider

logger = get_logger(__name__)


@dataclass
class ProviderInfo:
    """Information about an AI provider"""
    type: AIProviderType
    name: str
    description: str
    models: Dict[str, str]
    default_model: str
    env_key: str  # Environment variable name for API key


# Registry of all available providers
PROVIDER_REGISTRY: Dict[AIProviderType, Type[BaseAIProvider]] = {
    AIProviderType.OPENAI: OpenAIProvider,
    AIProviderType.GEMINI: GeminiProvider,
}

# Provider information
PROVIDER_INFO: Dict[AIProviderType, ProviderInfo] = {
    AIProviderType.OPENAI: ProviderInfo(
        type=AIProviderType.OPENAI,
        name="OpenAI GPT",
        description="GPT-4o - long-form JSON book generation",
        models=OpenAIProvider.MODELS,
        default_model=OpenAIProvider.DEFAULT_MODEL,
        env_key="OPENAI_API_KEY"
    ),
    AIProviderType.GEMINI: ProviderInfo(
        type=AIProviderType.GEMINI,
        name="Google Gemini",
        description="Gemini - fast, large output window",
        models=GeminiProvider.MODELS,
        default_model=GeminiProvider.DEFAULT_MODEL,
        env_key="GEMINI_API_KEY"
    ),
}

# Accepted spellings for the provider setting
PROVIDER_ALIASES: Dict[str, AIProviderType] = {
    "openai": AIProviderType.OPENAI,
    "gpt": AIProviderType.OPENAI,
    "chatgpt": AIProviderType.OPENAI,
    "gemini": AIProviderType.GEMINI,
    "google": AIProviderType.GEMINI,
}


def resolve_provider_type(name: str) -> AIProviderType:
    """Map a provider name to its type, raising ValueError if unknown."""
    ptype = PROVIDER_ALIASES.get((name or "").lower())
    if ptype is None:
        raise ValueError(f"Unknown provider: {name}")
    return ptype


def list_providers() -> List[ProviderInfo]:
    """List all available providers"""
    return list(PROVIDER_INFO.values())


def create_provider(
    settings: Settings,
    provider_name: Optional[str] = None,
    model: Optional[str] = None
) -> BaseAIProvider:
    """
    Build the configured provider (not yet initialized).

    Args:
        settings: Application settings (provider, model, key, sampling)
        provider_name: Override settings.ai_provider
        model: Override settings.ai_model

    Raises:
        ValueError: Unknown provider or missing API key
    """
    ptype = resolve_provider_type(provider_name or settings.ai_provider)
    info = PROVIDER_INFO[ptype]

    api_key = settings.gemini_api_key if ptype == AIProviderType.GEMINI else settings.openai_api_key
    if not api_key:
        raise ValueError(
            f"API key not found for {info.name}. Set {info.env_key} in .env"
        )

    config = AIConfig(
        api_key=api_key,
        model=model or settings.ai_model or info.default_model,
        max_tokens=settings.ai_max_tokens,
        temperature=settings.ai_temperature,
    )
    logger.info(f"Using {info.name} ({config.model})")
    return PROVIDER_REGISTRY[ptype](config)
