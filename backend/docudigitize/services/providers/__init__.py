"""
AI Providers Module - Modular AI provider implementations.

This module provides a plug-and-play architecture for AI providers
using the Strategy pattern.

To add a new AI provider:
1. Create a new provider class inheriting from PromptedProvider
   (or AIProvider for non-chat backends)
2. Implement ``complete`` (or every abstract method)
3. Register it in AIProviderFactory

Example:
    class NewProvider(PromptedProvider):
        def complete(self, prompt, max_tokens, attachment=None) -> str:
            # Implementation here
            pass
"""
from .base import AIProvider, PromptedProvider
from .factory import AIProviderFactory
from .openrouter_provider import OpenRouterProvider
from .anthropic_provider import AnthropicProvider
from .mock_provider import MockProvider

__all__ = [
    "AIProvider",
    "PromptedProvider",
    "AIProviderFactory",
    "OpenRouterProvider",
    "AnthropicProvider",
    "MockProvider",
]
