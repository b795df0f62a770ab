"""Unit tests for the local cache and key-value store backends."""

from datetime import UTC, datetime, timedelta

import pytest
from mocks.mock_store import FailingStore, MockRedis

from zhishi.config import RedisSettings
from zhishi.exceptions import StorageError
from zhishi.infra.memory.store import MemoryStore
from zhishi.infra.redis.client import RedisClient
from zhishi.models.card import KnowledgeCard
from zhishi.models.session import LearningSession
from zhishi.models.user import CardAnnotations, UserState
from zhishi.services.local_cache import (
    CARDS_KEY,
    CARDS_UPDATED_KEY,
    CURRENT_INDEX_KEY,
    CardCache,
    PreferenceStore,
    SessionStore,
)
from zhishi.taxonomy import KNOWLEDGE_DOMAINS

START = datetime(2026, 3, 1, 8, 0, tzinfo=UTC)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class TestCardCache:
    """Tests for CardCache."""

    @pytest.mark.asyncio
    async def test_fresh_cards_survive(
        self, memory_store: MemoryStore, sample_cards: list[KnowledgeCard]
    ) -> None:
        clock = FakeClock()
        cache = CardCache(memory_store, expiry_days=7, clock=clock)
        await cache.save_cards(sample_cards)

        clock.advance(days=6, hours=23)
        cards = await cache.get_cards()

        assert cards == sample_cards

    @pytest.mark.asyncio
    async def test_expired_cards_are_evicted(
        self, memory_store: MemoryStore, sample_cards: list[KnowledgeCard]
    ) -> None:
        clock = FakeClock()
        cache = CardCache(memory_store, expiry_days=7, clock=clock)
        await cache.save_cards(sample_cards)

        clock.advance(days=7, seconds=1)

        assert await cache.get_cards() is None
        assert CARDS_KEY not in memory_store.snapshot()
        assert CARDS_UPDATED_KEY not in memory_store.snapshot()

    @pytest.mark.asyncio
    async def test_stored_with_camel_case_keys(
        self, memory_store: MemoryStore, sample_cards: list[KnowledgeCard]
    ) -> None:
        await CardCache(memory_store).save_cards(sample_cards)

        raw = memory_store.snapshot()[CARDS_KEY]
        assert '"relatedDomains"' in raw
        assert '"createdAt"' in raw

    @pytest.mark.asyncio
    async def test_missing_timestamp_keeps_cards(
        self, memory_store: MemoryStore, sample_cards: list[KnowledgeCard]
    ) -> None:
        cache = CardCache(memory_store)
        await cache.save_cards(sample_cards)
        await memory_store.delete(CARDS_UPDATED_KEY)

        assert await cache.get_cards() == sample_cards

    @pytest.mark.asyncio
    async def test_unparseable_timestamp_counts_as_expired(
        self, memory_store: MemoryStore, sample_cards: list[KnowledgeCard]
    ) -> None:
        cache = CardCache(memory_store)
        await cache.save_cards(sample_cards)
        await memory_store.set(CARDS_UPDATED_KEY, "last tuesday")

        assert await cache.get_cards() is None
        assert CARDS_KEY not in memory_store.snapshot()

    @pytest.mark.asyncio
    async def test_corrupt_cards_read_as_empty(self) -> None:
        cache = CardCache(MemoryStore({CARDS_KEY: "[{not json"}))

        assert await cache.get_cards() is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("raw", "expected"), [("3", 3), ("abc", 0), ("-2", 0), ("", 0)])
    async def test_cursor_parsing(self, raw: str, expected: int) -> None:
        cache = CardCache(MemoryStore({CURRENT_INDEX_KEY: raw}))

        assert await cache.get_current_index() == expected

    @pytest.mark.asyncio
    async def test_selected_domains_round_trip(self, card_cache: CardCache) -> None:
        assert await card_cache.get_selected_domains() == []

        await card_cache.save_selected_domains(["science", "art"])

        assert await card_cache.get_selected_domains() == ["science", "art"]

    @pytest.mark.asyncio
    async def test_saved_card_collection(
        self, card_cache: CardCache, sample_card: KnowledgeCard, history_card: KnowledgeCard
    ) -> None:
        await card_cache.add_saved_card(sample_card)
        await card_cache.add_saved_card(history_card)
        await card_cache.add_saved_card(sample_card)

        saved = await card_cache.load_saved_cards()
        assert [c.id for c in saved] == [history_card.id, sample_card.id]

        await card_cache.remove_saved_card(history_card.id)
        assert [c.id for c in await card_cache.load_saved_cards()] == [sample_card.id]

    @pytest.mark.asyncio
    async def test_storage_failures_read_as_empty(
        self, sample_cards: list[KnowledgeCard]
    ) -> None:
        cache = CardCache(FailingStore())

        await cache.save_cards(sample_cards)
        await cache.save_current_index(2)
        await cache.clear_cards()

        assert await cache.get_cards() is None
        assert await cache.get_current_index() == 0
        assert await cache.get_selected_domains() == []
        assert await cache.load_saved_cards() == []


class TestSessionStore:
    """Tests for SessionStore."""

    @pytest.mark.asyncio
    async def test_save_session_upserts(self, session_store: SessionStore) -> None:
        session = LearningSession(id="s1", card_id="card-1")
        await session_store.save_session(session)
        await session_store.save_session(LearningSession(id="s2", card_id="card-2"))
        await session_store.save_session(session.ended())

        sessions = await session_store.load_sessions()

        assert [s.id for s in sessions] == ["s1", "s2"]
        assert sessions[0].completed is True
        assert [s.id for s in await session_store.completed_sessions()] == ["s1"]

    @pytest.mark.asyncio
    async def test_cleanup_old_sessions(self, memory_store: MemoryStore) -> None:
        clock = FakeClock()
        store = SessionStore(memory_store, retention_days=30, clock=clock)
        old = START - timedelta(days=31)
        recent = START - timedelta(days=2)
        for session in (
            LearningSession(id="old-done", card_id="a", start_time=old, completed=True),
            LearningSession(id="old-open", card_id="b", start_time=old),
            LearningSession(id="new-done", card_id="c", start_time=recent, completed=True),
        ):
            await store.save_session(session)

        removed = await store.cleanup_old_sessions()

        assert removed == 1
        assert [s.id for s in await store.load_sessions()] == ["old-open", "new-done"]
        assert await store.cleanup_old_sessions() == 0

    @pytest.mark.asyncio
    async def test_failing_store(self) -> None:
        store = SessionStore(FailingStore())

        await store.save_session(LearningSession(id="s1", card_id="c"))

        assert await store.load_sessions() == []
        assert await store.cleanup_old_sessions() == 0


class TestPreferenceStore:
    """Tests for PreferenceStore."""

    @pytest.mark.asyncio
    async def test_learning_history_deduplicates(self, preference_store: PreferenceStore) -> None:
        await preference_store.add_learning_history("a")
        await preference_store.add_learning_history("b")
        history = await preference_store.add_learning_history("a")

        assert history == ["a", "b"]

    @pytest.mark.asyncio
    async def test_learning_history_is_capped(self, memory_store: MemoryStore) -> None:
        prefs = PreferenceStore(memory_store, history_limit=100)
        for i in range(105):
            await prefs.add_learning_history(f"card-{i}")

        history = await prefs.load_learning_history()
        state = await prefs.load_user_state()

        assert len(history) == 100
        assert history[0] == "card-5"
        assert history[-1] == "card-104"
        assert state is not None
        assert state.learning_history == history

    @pytest.mark.asyncio
    async def test_update_user_state_creates_default(
        self, preference_store: PreferenceStore
    ) -> None:
        assert await preference_store.load_user_state() is None

        state = await preference_store.update_user_state(selected_domains=["art"])

        assert state.selected_domains == ["art"]
        assert await preference_store.load_user_state() == state

    @pytest.mark.asyncio
    async def test_update_preferences_merges(self, preference_store: PreferenceStore) -> None:
        await preference_store.save_user_state(UserState(selected_domains=["science"]))

        prefs = await preference_store.update_preferences(sound_enabled=True)

        assert prefs.sound_enabled is True
        assert prefs.auto_play is True
        state = await preference_store.load_user_state()
        assert state is not None
        assert state.selected_domains == ["science"]
        assert state.preferences == prefs

    @pytest.mark.asyncio
    async def test_theme_storage(
        self, memory_store: MemoryStore, preference_store: PreferenceStore
    ) -> None:
        assert await preference_store.get_theme() is None

        await preference_store.set_theme("dark")
        assert memory_store.snapshot()["theme"] == '"dark"'
        assert await preference_store.get_theme() == "dark"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("light", "light"), ('"blue"', None), ("7", None)],
    )
    async def test_theme_tolerates_bare_and_unknown_values(
        self, raw: str, expected: str | None
    ) -> None:
        prefs = PreferenceStore(MemoryStore({"theme": raw}))

        assert await prefs.get_theme() == expected

    @pytest.mark.asyncio
    async def test_resolve_theme(self, memory_store: MemoryStore) -> None:
        prefs = PreferenceStore(memory_store, default_theme="light")

        assert await prefs.resolve_theme() == "light"
        assert await prefs.resolve_theme(prefers_dark=True) == "dark"

        await prefs.set_theme("light")
        assert await prefs.resolve_theme(prefers_dark=True) == "light"

    @pytest.mark.asyncio
    async def test_annotations(self, preference_store: PreferenceStore) -> None:
        assert await preference_store.load_annotations() == CardAnnotations()

        annotations = CardAnnotations(liked=["a"], learned=["b"])
        await preference_store.save_annotations(annotations)

        assert await preference_store.load_annotations() == annotations

    @pytest.mark.asyncio
    async def test_domain_snapshot(self, preference_store: PreferenceStore) -> None:
        await preference_store.save_domains(KNOWLEDGE_DOMAINS)

        assert await preference_store.load_domains() == list(KNOWLEDGE_DOMAINS)

    @pytest.mark.asyncio
    async def test_failing_store(self) -> None:
        prefs = PreferenceStore(FailingStore(), default_theme="dark")

        await prefs.set_theme("light")
        await prefs.add_learning_history("a")

        assert await prefs.resolve_theme() == "dark"
        assert await prefs.load_user_state() is None
        assert await prefs.load_annotations() == CardAnnotations()


class TestRedisClient:
    """Tests for the Redis backend against an in-memory double."""

    @pytest.mark.asyncio
    async def test_keys_are_prefixed(self) -> None:
        fake = MockRedis()
        client = RedisClient(RedisSettings(url="redis://unused", key_prefix="t:"), redis=fake)

        await client.set("theme", '"dark"')

        assert fake.data == {"t:theme": '"dark"'}
        assert await client.get("theme") == '"dark"'
        assert await client.keys() == ["theme"]

        await client.delete("theme")
        assert await client.get("theme") is None

    @pytest.mark.asyncio
    async def test_works_under_card_cache(self, sample_cards: list[KnowledgeCard]) -> None:
        client = RedisClient(RedisSettings(url="redis://unused"), redis=MockRedis())
        cache = CardCache(client)

        await cache.save_cards(sample_cards)

        assert await cache.get_cards() == sample_cards

    @pytest.mark.asyncio
    async def test_not_connected_raises_storage_error(self) -> None:
        client = RedisClient(RedisSettings(url=None))

        assert await client.connect() is False
        assert client.is_connected is False
        with pytest.raises(StorageError):
            await client.get("theme")

    @pytest.mark.asyncio
    async def test_close(self) -> None:
        fake = MockRedis()
        client = RedisClient(RedisSettings(url="redis://unused"), redis=fake)

        await client.close()

        assert fake.closed is True
        assert client.is_connected is False
