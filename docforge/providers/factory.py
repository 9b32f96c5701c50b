"""Provider factory — selects a provider by DOCFORGE_PROVIDER or config."""

import os

from docforge.config import get_config
from docforge.errors import ProviderNotConfiguredError
from docforge.providers.anthropic import AnthropicProvider
from docforge.providers.base import LLMProvider
from docforge.providers.gemini import GeminiProvider
from docforge.providers.mock import MockProvider
from docforge.providers.openai import OpenAIProvider

PROVIDERS = {
    "openai": OpenAIProvider,
    "gemini": GeminiProvider,
    "anthropic": AnthropicProvider,
    "mock": MockProvider,
}


def get_provider_name() -> str:
    """Environment first, then config.yaml, then openai."""
    name = os.environ.get("DOCFORGE_PROVIDER", "").strip().lower()
    if not name:
        name = str(get_config().get("provider", "openai")).lower()
    return name


def create_provider(name: str | None = None) -> LLMProvider:
    provider_name = name or get_provider_name()
    try:
        cls = PROVIDERS[provider_name]
    except KeyError:
        raise ValueError(
            f"Unknown provider '{provider_name}'. Must be one of: {sorted(PROVIDERS)}"
        ) from None
    return cls()


def get_provider(name: str | None = None) -> LLMProvider:
    """Return a configured provider.

    Raises ProviderNotConfiguredError with setup instructions otherwise.
    """
    provider = create_provider(name)
    if not provider.is_configured():
        raise ProviderNotConfiguredError(provider.name, provider.get_config_instructions())
    return provider


def is_provider_available(name: str | None = None) -> bool:
    try:
        return create_provider(name).is_configured()
    except ValueError:
        return False
