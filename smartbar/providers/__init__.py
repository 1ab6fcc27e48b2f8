from __future__ import annotations

from ..types import LLMConfig, LLMProviderError
from .anthropic import AnthropicProvider
from .base import BaseProvider
from .openai import OpenAIProvider


def build_provider(config: LLMConfig, **kwargs) -> BaseProvider:
    """Construct the provider named by ``config.provider``.

    Extra keyword arguments (``api_key``, ``transport``) are passed through.
    """
    if config.provider == "anthropic":
        return AnthropicProvider(
            api_key_env=config.api_key_env,
            model=config.model,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            base_url=config.base_url,
            **kwargs,
        )
    if config.provider == "openai":
        return OpenAIProvider(
            base_url=config.base_url,
            model=config.model,
            temperature=config.temperature,
            api_key_env=config.api_key_env,
            max_tokens=config.max_tokens,
            **kwargs,
        )
    raise LLMProviderError(f"Unknown provider: {config.provider}", provider=config.provider)


__all__ = [
    "AnthropicProvider",
    "BaseProvider",
    "LLMProviderError",
    "OpenAIProvider",
    "build_provider",
]
