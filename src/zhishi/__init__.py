"""zhishi - Async core for an AI knowledge-card learning app.

This package provides tools for:
- Generating knowledge cards from an LLM endpoint, with a fallback ladder
- An infinite card feed with prefetch and local caching
- A swipe gesture state machine with speed-sensitive thresholds
- Multi-agent learning sessions with curiosity-driven options
- Defensive coercion of free-text model output into validated records

Example usage:
    from zhishi import Zhishi

    # Simple usage - config loaded from .env automatically
    async with Zhishi() as app:
        await app.skip_domain_selection()
        card = app.feed.current_card
        await app.enter_learning(card)
        await app.session.send_user_message(card, "为什么？")
"""

__version__ = "0.1.0"

# Implementations
from zhishi.infra.llm.anthropic_provider import AnthropicProvider
from zhishi.infra.llm.glm_provider import GLMProvider
from zhishi.infra.memory.store import MemoryStore
from zhishi.infra.redis.client import RedisClient

# Interfaces
from zhishi.interfaces.llm import CompletionInterface
from zhishi.interfaces.storage import KeyValueStoreInterface

# Orchestrator
from zhishi.orchestrator import Zhishi

__all__ = [  # noqa: RUF022
    # Orchestrator
    "Zhishi",
    # Implementations
    "GLMProvider",
    "AnthropicProvider",
    "MemoryStore",
    "RedisClient",
    # Interfaces
    "CompletionInterface",
    "KeyValueStoreInterface",
]
