"""Completion provider implementations for zhishi."""

from zhishi.infra.llm.anthropic_provider import AnthropicProvider
from zhishi.infra.llm.glm_provider import GLMProvider

__all__ = ["AnthropicProvider", "GLMProvider", "provider_class_for"]

_PROVIDERS: dict[str, type[GLMProvider] | type[AnthropicProvider]] = {
    "glm": GLMProvider,
    "openai": GLMProvider,
    "anthropic": AnthropicProvider,
}


def provider_class_for(name: str) -> type[GLMProvider] | type[AnthropicProvider]:
    """Resolve a provider name from settings to its implementation class.

    Raises:
        ValueError: If the name is not a known provider
    """
    try:
        return _PROVIDERS[name.lower()]
    except KeyError:
        raise ValueError(f"Unknown LLM provider: {name}") from None
