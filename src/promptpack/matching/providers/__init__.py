"""LLM providers for model-judged agent matching.

Currently supported providers:
- OpenAI (gpt-4o-mini, gpt-4o, etc.)
- Anthropic (claude-sonnet-4-5, claude-haiku-4-5, etc.)

Usage:
    from promptpack.matching.providers import create_provider

    provider = create_provider(
        provider_type="anthropic",
        api_key="sk-ant-xxx",
    )
"""

import logging
from typing import Literal

from promptpack.matching.providers.base import LLMProvider, LLMResponse

logger = logging.getLogger(__name__)

ProviderType = Literal["openai", "anthropic"]

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-sonnet-4-5",
}


def create_provider(
    provider_type: ProviderType,
    api_key: str,
    model: str | None = None,
) -> LLMProvider:
    """Factory function to create LLM providers.

    Args:
        provider_type: The provider to use ("openai" or "anthropic")
        api_key: API key for the provider
        model: Optional model override (uses provider default if not specified)

    Raises:
        ValueError: If provider_type is unknown or api_key is missing
    """
    if not api_key:
        raise ValueError(f"API key is required for {provider_type} provider")

    if provider_type == "openai":
        from promptpack.matching.providers.openai_provider import OpenAIProvider

        return OpenAIProvider(api_key=api_key, model=model or DEFAULT_MODELS["openai"])

    elif provider_type == "anthropic":
        from promptpack.matching.providers.anthropic_provider import AnthropicProvider

        return AnthropicProvider(
            api_key=api_key, model=model or DEFAULT_MODELS["anthropic"]
        )

    else:
        raise ValueError(
            f"Unknown provider type: {provider_type}. "
            f"Supported providers: {', '.join(get_available_providers())}"
        )


def get_available_providers() -> list[str]:
    return list(DEFAULT_MODELS)


__all__ = [
    "DEFAULT_MODELS",
    "LLMProvider",
    "LLMResponse",
    "ProviderType",
    "create_provider",
    "get_available_providers",
]
