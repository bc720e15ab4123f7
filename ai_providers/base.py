"""
Base AI Provider - Abstract Interface
AI Bookmaker - Generation Service Providers
"""

from abc import ABC, abstractmethod
from typing import Optional, List, Dict, Any
from dataclasses import dataclass
from enum import Enum


class AIProviderType(Enum):
    """Supported AI Providers"""
    GEMINI = "gemini"
    OPENAI = "openai"


@dataclass
class AIMessage:
    """Unified message format across providers"""
    role: str  # "user", "assistant", "system"
    content: str


@dataclass
class AIResponse:
    """Unified response format"""
    content: str
    model: str
    provider: AIProviderType
    usage: Optional[Dict[str, int]] = None  # tokens used
    finish_reason: Optional[str] = None
    raw_response: Optional[Any] = None


@dataclass
class AIConfig:
    """Provider configuration"""
    api_key: str
    model: str
    max_tokens: int = 8192
    temperature: float = 0.7
    base_url: Optional[str] = None  # For custom endpoints


class BaseAIProvider(ABC):
    """
    Abstract base class for AI providers.
    All providers must implement these methods.
    """

    def __init__(self, config: AIConfig):
        self.config = config
        self._client = None

    @property
    @abstractmethod
    def provider_type(self) -> AIProviderType:
        """Return the provider type"""
        pass

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the client connection"""
        pass

    @abstractmethod
    async def complete(
        self,
        messages: List[AIMessage],
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """
        Generate a completion from the AI model.

        Args:
            messages: List of conversation messages
            system_prompt: Optional system prompt
            **kwargs: temperature, max_tokens, json_mode (ask for a JSON
                      object response)

        Returns:
            AIResponse with the generated content
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} model={self.config.model}>"
