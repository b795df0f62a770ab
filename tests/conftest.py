"""Shared test fixtures for zhishi.

This module provides pytest fixtures used across all tests.
"""

from unittest.mock import AsyncMock

import pytest
from mocks.mock_completion import ScriptedCompletion

from zhishi.infra.memory.store import MemoryStore
from zhishi.models.card import Difficulty, KnowledgeCard
from zhishi.services.local_cache import CardCache, PreferenceStore, SessionStore


# Mock fixtures
@pytest.fixture
def mock_llm() -> AsyncMock:
    """Create mock completion interface."""
    llm = AsyncMock()
    llm.complete.return_value = "{}"
    return llm


@pytest.fixture
def scripted_llm() -> ScriptedCompletion:
    """Create a completion provider that replays queued responses."""
    return ScriptedCompletion()


@pytest.fixture
def memory_store() -> MemoryStore:
    """Create empty in-process store."""
    return MemoryStore()


@pytest.fixture
def card_cache(memory_store: MemoryStore) -> CardCache:
    return CardCache(memory_store)


@pytest.fixture
def session_store(memory_store: MemoryStore) -> SessionStore:
    return SessionStore(memory_store)


@pytest.fixture
def preference_store(memory_store: MemoryStore) -> PreferenceStore:
    return PreferenceStore(memory_store)


# Sample data fixtures
@pytest.fixture
def sample_card() -> KnowledgeCard:
    """Create sample KnowledgeCard."""
    return KnowledgeCard(
        id="card-1",
        title="为什么企鹅不会飞？",
        content="企鹅的翅膀进化成了桨，水中速度可达每小时36公里。",
        difficulty=Difficulty.EASY,
        category="生物",
        domain="science",
        related_domains=["生物学"],
        tags=["进化"],
    )


@pytest.fixture
def history_card() -> KnowledgeCard:
    """Create a card whose domain maps to the history specialist."""
    return KnowledgeCard(
        id="card-h",
        title="青霉素的意外发现",
        content="1928年弗莱明忘记清理培养皿，青霉菌杀死了周围的葡萄球菌。",
        category="历史",
        domain="history",
    )


@pytest.fixture
def sample_cards() -> list[KnowledgeCard]:
    """Create a five-card feed."""
    return [
        KnowledgeCard(
            id=f"feed-{i}",
            title=f"标题{i}",
            content=f"内容{i}：一段足够长的正文，用来测试前缀截断是否生效，以及历史行格式。",
            category="科学",
            domain="science",
        )
        for i in range(5)
    ]
