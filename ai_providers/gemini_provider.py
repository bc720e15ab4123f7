"""
Google Gemini Provider
AI Bookmaker - Generation Service Providers
"""

from typing import Optional, List, Dict, Any

import google.generativeai as genai

from .base import (
    BaseAIProvider,
    AIProviderType,
    AIMessage,
    AIResponse,
    AIConfig
)


class GeminiProvider(BaseAIProvider):
    """
    Google Gemini AI Provider

    Supports:
    - Gemini 2.5 Flash / Pro
    - Gemini 2.0 Flash
    - JSON response mode
    """

    MODELS = {
        "gemini-2.5-flash": "Gemini 2.5 Flash",
        "gemini-2.5-pro": "Gemini 2.5 Pro",
        "gemini-2.0-flash": "Gemini 2.0 Flash",
    }

    DEFAULT_MODEL = "gemini-2.5-flash"

    @property
    def provider_type(self) -> AIProviderType:
        return AIProviderType.GEMINI

    async def initialize(self) -> None:
        """Initialize Gemini client"""
        genai.configure(api_key=self.config.api_key)
        self._client = genai.GenerativeModel(model_name=self.config.model)

    def _convert_messages(
        self,
        messages: List[AIMessage],
        system_prompt: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        """Convert AIMessage to Gemini format"""
        contents = []

        # Gemini handles system prompt differently - prepend to first message
        system_text = system_prompt + "\n\n" if system_prompt else ""

        for i, msg in enumerate(messages):
            role = "user" if msg.role == "user" else "model"
            text_content = msg.content
            if i == 0 and system_text:
                text_content = system_text + text_content
            contents.append({"role": role, "parts": [text_content]})

        return contents

    async def complete(
        self,
        messages: List[AIMessage],
        system_prompt: Optional[str] = None,
        **kwargs
    ) -> AIResponse:
        """Generate completion using Gemini"""
        if not self._client:
            await self.initialize()

        contents = self._convert_messages(messages, system_prompt)

        generation_config = {
            "temperature": kwargs.get("temperature", self.config.temperature),
            "max_output_tokens": kwargs.get("max_tokens", self.config.max_tokens),
        }
        if kwargs.get("json_mode"):
            generation_config["response_mime_type"] = "application/json"

        response = await self._client.generate_content_async(
            contents,
            generation_config=generation_config
        )

        # Extract usage if available
        usage = None
        if hasattr(response, 'usage_metadata'):
            usage = {
                "input_tokens": response.usage_metadata.prompt_token_count,
                "output_tokens": response.usage_metadata.candidates_token_count
            }

        return AIResponse(
            content=response.text,
            model=self.config.model,
            provider=self.provider_type,
            usage=usage,
            finish_reason=response.candidates[0].finish_reason.name if response.candidates else None,
            raw_response=response
        )
