"""
AI Providers Module - Adapters for each generative AI backend.

- Google Gemini (grounding, multimodal, image, speech, video)
- OpenAI (chat, JSON mode, vision, DALL-E images)
- xAI Grok (chat and JSON through the OpenAI-compatible API)

Every adapter has the same entry point:
    result = await provider.invoke(request, credential)
"""

from tubegrow.ai.providers.base import AIProvider, ProviderResult, ProviderType, TokenUsage
from tubegrow.ai.providers.gemini import GeminiProvider, gemini_provider
from tubegrow.ai.providers.openai_provider import OpenAIProvider, openai_provider
from tubegrow.ai.providers.grok_provider import GrokProvider, grok_provider

__all__ = [
    "AIProvider",
    "ProviderResult",
    "ProviderType",
    "TokenUsage",
    "GeminiProvider",
    "gemini_provider",
    "OpenAIProvider",
    "openai_provider",
    "GrokProvider",
    "grok_provider",
]
