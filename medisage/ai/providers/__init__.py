"""
AI Providers Module - Clients for the upstream LLM vendors.

Personal tier:
- TogetherProvider: Mixtral / Llama 3 over Together.ai's REST API

Corporate tier:
- GeminiProvider: Google Gemini (default; text, JSON, vision)
- OpenAIProvider: GPT-4 Turbo
- AnthropicProvider: Claude 3 Opus

Every registry entry names its ProviderType; get_provider() is the one
place that turns that tag into a live adapter. Adding a vendor means a new
AIProvider subclass plus one entry in PROVIDERS.
"""

from typing import Dict

from medisage.ai.providers.anthropic_provider import AnthropicProvider, anthropic_provider
from medisage.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from medisage.ai.providers.gemini import GeminiProvider, gemini_provider
from medisage.ai.providers.openai_provider import OpenAIProvider, openai_provider
from medisage.ai.providers.together import TogetherProvider, together_provider

PROVIDERS: Dict[ProviderType, AIProvider] = {
    ProviderType.TOGETHER: together_provider,
    ProviderType.GEMINI: gemini_provider,
    ProviderType.OPENAI: openai_provider,
    ProviderType.ANTHROPIC: anthropic_provider,
}


def get_provider(provider_type: ProviderType) -> AIProvider:
    """Return the adapter singleton bound to a provider tag."""
    return PROVIDERS[provider_type]


__all__ = [
    "AIProvider",
    "AIResponse",
    "ProviderType",
    "TokenUsage",
    "TogetherProvider",
    "together_provider",
    "GeminiProvider",
    "gemini_provider",
    "OpenAIProvider",
    "openai_provider",
    "AnthropicProvider",
    "anthropic_provider",
    "PROVIDERS",
    "get_provider",
]
