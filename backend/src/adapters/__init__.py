from typing import Any, Type

from adapters.base import BaseLLM, GenerationCancelled, GenerationError

_LLM_REGISTRY: dict[str, Type[BaseLLM]] = {}


def register_llm(provider: str, cls: Type[BaseLLM]) -> None:
    """Register an LLM provider.

    Args:
        provider: Provider name (e.g., "openai", "anthropic")
        cls: LLM class to register
    """
    _LLM_REGISTRY[provider] = cls


def create_llm(provider: str, **kwargs: Any) -> BaseLLM:
    """Create an LLM instance based on provider.

    Args:
        provider: Provider name
        **kwargs: Provider-specific parameters, including ``api_key``

    Returns:
        BaseLLM instance

    Raises:
        ValueError: If provider is not registered
    """
    if provider not in _LLM_REGISTRY:
        available = list(_LLM_REGISTRY.keys())
        raise ValueError(f"Unknown LLM provider: {provider}. Available: {available}")
    return _LLM_REGISTRY[provider](**kwargs)


def list_llm_providers() -> list[str]:
    """List all registered LLM providers."""
    return list(_LLM_REGISTRY.keys())


def provider_label(provider: str) -> str:
    """Return the display label of a registered provider."""
    cls = _LLM_REGISTRY.get(provider)
    return cls.label if cls else provider


def fetch_model_catalog(provider: str, api_key: str, **kwargs: Any) -> list[str]:
    """List the chat models a provider offers for ``api_key``.

    Returns an empty list without a request when the key is blank.

    Raises:
        ValueError: If provider is not registered
        GenerationError: If the provider rejects the request
    """
    if not api_key or not api_key.strip():
        return []
    return create_llm(provider, api_key=api_key, **kwargs).list_models()


from adapters.anthropic import AnthropicLLM
from adapters.gemini import GeminiLLM
from adapters.llm import OpenAILLM

register_llm("openai", OpenAILLM)
register_llm("anthropic", AnthropicLLM)
register_llm("gemini", GeminiLLM)

__all__ = [
    "BaseLLM",
    "GenerationError",
    "GenerationCancelled",
    "OpenAILLM",
    "AnthropicLLM",
    "GeminiLLM",
    "register_llm",
    "create_llm",
    "list_llm_providers",
    "provider_label",
    "fetch_model_catalog",
]
