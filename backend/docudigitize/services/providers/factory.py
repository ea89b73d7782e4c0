"""
AI Provider Factory.

Manages provider selection and initialization based on configuration.
Uses the Factory pattern to provide plug-and-play AI provider support.
"""
from typing import Optional

from ...core.config import (
    OPENROUTER_API_KEY,
    ANTHROPIC_API_KEY,
    AI_PROVIDER
)
from ...core.logging_config import get_logger
from .base import AIProvider
from .openrouter_provider import OpenRouterProvider
from .anthropic_provider import AnthropicProvider
from .mock_provider import MockProvider

logger = get_logger(__name__)


class AIProviderFactory:
    """
    Factory for creating AI provider instances.

    Selects the provider based on:
    1. An API key supplied at runtime (credential re-entry)
    2. AI_PROVIDER configuration
    3. Available API keys
    4. Fallback to MockProvider if no keys available
    """

    @staticmethod
    def get_provider(api_key: Optional[str] = None, provider_type: Optional[str] = None) -> AIProvider:
        """
        Get the appropriate AI provider.

        Args:
            api_key: Key entered by the user; overrides the configured one
            provider_type: 'anthropic', 'openrouter' or 'mock' (defaults to AI_PROVIDER)

        Returns:
            AIProvider instance (AnthropicProvider, OpenRouterProvider, or MockProvider)
        """
        provider_type = (provider_type or AI_PROVIDER).lower()

        # A key entered at runtime always selects a real provider
        if api_key:
            if provider_type == "openrouter":
                logger.info("Using OpenRouter provider with supplied API key")
                return OpenRouterProvider(api_key=api_key)
            logger.info("Using Anthropic provider with supplied API key")
            return AnthropicProvider(api_key=api_key)

        if provider_type == "anthropic":
            if ANTHROPIC_API_KEY:
                logger.info("Using Anthropic provider")
                return AnthropicProvider()
            logger.warning("⚠️  Anthropic API key not configured, checking for OpenRouter...")
            if OPENROUTER_API_KEY:
                logger.info("✓ Using OpenRouter provider as fallback")
                return OpenRouterProvider()
            logger.warning("⚠️  No API keys configured, using MockProvider")
            return MockProvider()
        elif provider_type == "openrouter":
            if OPENROUTER_API_KEY:
                logger.info("Using OpenRouter provider")
                return OpenRouterProvider()
            logger.warning("⚠️  OpenRouter API key not configured, checking for Anthropic...")
            if ANTHROPIC_API_KEY:
                logger.info("✓ Using Anthropic provider as fallback")
                return AnthropicProvider()
            logger.warning("⚠️  No API keys configured, using MockProvider")
            return MockProvider()
        elif provider_type == "mock":
            logger.info("Using MockProvider (configured)")
            return MockProvider()
        else:
            logger.warning(f"⚠️  Unknown provider '{provider_type}', checking available API keys...")
            if ANTHROPIC_API_KEY:
                logger.info("✓ Auto-selecting Anthropic provider")
                return AnthropicProvider()
            elif OPENROUTER_API_KEY:
                logger.info("✓ Auto-selecting OpenRouter provider")
                return OpenRouterProvider()
            logger.warning("⚠️  No API keys found, using MockProvider")
            return MockProvider()
