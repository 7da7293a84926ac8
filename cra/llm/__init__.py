"""LLM adapter layer — OpenAI and Anthropic behind a common protocol."""

from openai import OpenAIError

from cra.errors import ModelGatewayError
from cra.llm.anthropic_provider import AnthropicProvider
from cra.llm.base import LLMProvider
from cra.llm.openai_provider import OpenAIProvider


def get_provider(provider_name: str, **kwargs: object) -> LLMProvider:
    """Return the configured LLM provider. provider_name: 'openai' | 'anthropic'."""
    if provider_name.lower() == "anthropic":
        return AnthropicProvider(**kwargs)
    return OpenAIProvider(**kwargs)


def provider_from_settings(settings, provider_name: str | None = None) -> LLMProvider:
    """
    Build a provider from Settings, honouring the timeout/retry policy.

    Raises ModelGatewayError when the provider has no API key configured.
    """
    name = (provider_name or settings.cra_llm_provider).lower()
    api_key = settings.api_key_for(name)
    if not api_key:
        raise ModelGatewayError(f"No API key configured for provider '{name}'")
    try:
        return get_provider(
            name,
            api_key=api_key,
            model=settings.model_for(name),
            timeout=settings.cra_model_timeout_s,
            max_retries=settings.cra_model_max_retries,
        )
    except OpenAIError as e:
        raise ModelGatewayError(f"Could not create {name} client: {e}") from e


__all__ = ["LLMProvider", "OpenAIProvider", "AnthropicProvider", "get_provider", "provider_from_settings"]
