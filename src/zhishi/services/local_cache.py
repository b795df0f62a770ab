"""Typed local cache for zhishi.

This module layers JSON (de)serialization and cache policy over a
KeyValueStoreInterface backend. Storage failures and corrupt values are
logged and treated as an empty cache; nothing here raises to callers.
"""

import json
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from typing import Any, get_args

from pydantic import TypeAdapter, ValidationError

from zhishi.exceptions import StorageError
from zhishi.interfaces.storage import KeyValueStoreInterface
from zhishi.logging import get_logger
from zhishi.models.card import KnowledgeCard
from zhishi.models.domain import KnowledgeDomain
from zhishi.models.session import LearningSession
from zhishi.models.user import CardAnnotations, Theme, UserPreferences, UserState

__all__ = [
    "CARDS_KEY",
    "CARDS_UPDATED_KEY",
    "CURRENT_INDEX_KEY",
    "SELECTED_DOMAINS_KEY",
    "CardCache",
    "PreferenceStore",
    "SessionStore",
]

logger = get_logger(__name__)

# Feed cache
CARDS_KEY = "knowledgeCards"
CARDS_UPDATED_KEY = "cardsLastUpdated"
SELECTED_DOMAINS_KEY = "selectedDomains"
CURRENT_INDEX_KEY = "currentCardIndex"

# Entity collections
SAVED_CARDS_KEY = "zhishi_cards"
SESSIONS_KEY = "zhishi_sessions"
USER_STATE_KEY = "zhishi_user_state"
DOMAINS_KEY = "zhishi_domains"
LEARNING_HISTORY_KEY = "zhishi_learning_history"
ANNOTATIONS_KEY = "zhishi_annotations"
THEME_KEY = "theme"

_cards_adapter = TypeAdapter(list[KnowledgeCard])
_sessions_adapter = TypeAdapter(list[LearningSession])
_domains_adapter = TypeAdapter(list[KnowledgeDomain])
_strings_adapter = TypeAdapter(list[str])

Clock = Callable[[], datetime]


def _utcnow() -> datetime:
    return datetime.now(UTC)


class _JSONCache:
    """Shared read/write helpers over a string key-value store."""

    def __init__(self, store: KeyValueStoreInterface, clock: Clock = _utcnow) -> None:
        self._store = store
        self._clock = clock

    async def _read_raw(self, key: str) -> str | None:
        try:
            return await self._store.get(key)
        except StorageError as e:
            logger.warning("cache_read_failed", key=key, error=str(e))
            return None

    async def _read(self, key: str, adapter: TypeAdapter[Any]) -> Any | None:
        raw = await self._read_raw(key)
        if raw is None:
            return None
        try:
            return adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning("cache_value_corrupt", key=key, errors=e.error_count())
            return None

    async def _write_raw(self, key: str, value: str) -> bool:
        try:
            await self._store.set(key, value)
        except StorageError as e:
            logger.warning("cache_write_failed", key=key, error=str(e))
            return False
        return True

    async def _write(self, key: str, adapter: TypeAdapter[Any], value: Any) -> bool:
        return await self._write_raw(key, adapter.dump_json(value, by_alias=True).decode())

    async def _remove(self, *keys: str) -> None:
        for key in keys:
            try:
                await self._store.delete(key)
            except StorageError as e:
                logger.warning("cache_delete_failed", key=key, error=str(e))


class CardCache(_JSONCache):
    """Feed cache: generated cards with a freshness window, domain
    selection, cursor, and the saved-card collection.

    Example:
        cache = CardCache(store, expiry_days=7)
        cards = await cache.get_cards()  # None when missing or expired
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        expiry_days: int = 7,
        clock: Clock = _utcnow,
    ) -> None:
        """Initialize cache.

        Args:
            store: Key-value backend
            expiry_days: Age after which the cached feed is evicted on read
            clock: Source of the current time (timezone-aware)
        """
        super().__init__(store, clock)
        self._expiry = timedelta(days=expiry_days)

    async def save_cards(self, cards: list[KnowledgeCard]) -> None:
        """Persist the feed and stamp it with the current time."""
        if await self._write(CARDS_KEY, _cards_adapter, cards):
            await self._write_raw(CARDS_UPDATED_KEY, self._clock().isoformat())

    async def get_cards(self) -> list[KnowledgeCard] | None:
        """Load the cached feed.

        An expired or unreadable timestamp evicts both keys. A feed with no
        timestamp at all is returned as-is.

        Returns:
            Cached cards, or None if missing, corrupt or expired
        """
        cards = await self._read(CARDS_KEY, _cards_adapter)
        if cards is None:
            return None

        stamp = await self._read_raw(CARDS_UPDATED_KEY)
        if stamp is not None and self._is_expired(stamp):
            logger.info("card_cache_expired", last_updated=stamp)
            await self.clear_cards()
            return None
        return cards

    def _is_expired(self, stamp: str) -> bool:
        try:
            updated = datetime.fromisoformat(stamp)
        except ValueError:
            return True
        if updated.tzinfo is None:
            updated = updated.replace(tzinfo=UTC)
        return self._clock() - updated > self._expiry

    async def clear_cards(self) -> None:
        """Drop the cached feed and its timestamp."""
        await self._remove(CARDS_KEY, CARDS_UPDATED_KEY)

    async def save_selected_domains(self, domains: list[str]) -> None:
        await self._write(SELECTED_DOMAINS_KEY, _strings_adapter, domains)

    async def get_selected_domains(self) -> list[str]:
        return await self._read(SELECTED_DOMAINS_KEY, _strings_adapter) or []

    async def save_current_index(self, index: int) -> None:
        await self._write_raw(CURRENT_INDEX_KEY, str(index))

    async def get_current_index(self) -> int:
        """Load the saved cursor; 0 when missing or not a decimal integer."""
        raw = await self._read_raw(CURRENT_INDEX_KEY)
        if raw is None:
            return 0
        try:
            return max(int(raw), 0)
        except ValueError:
            return 0

    async def load_saved_cards(self) -> list[KnowledgeCard]:
        """Load the saved-card collection (cards kept beyond feed expiry)."""
        return await self._read(SAVED_CARDS_KEY, _cards_adapter) or []

    async def add_saved_card(self, card: KnowledgeCard) -> None:
        """Add a card to the saved collection, replacing any copy with the same id."""
        cards = [c for c in await self.load_saved_cards() if c.id != card.id]
        cards.append(card)
        await self._write(SAVED_CARDS_KEY, _cards_adapter, cards)

    async def remove_saved_card(self, card_id: str) -> None:
        cards = await self.load_saved_cards()
        remaining = [c for c in cards if c.id != card_id]
        if len(remaining) != len(cards):
            await self._write(SAVED_CARDS_KEY, _cards_adapter, remaining)


class SessionStore(_JSONCache):
    """Learning-session collection, upserted by session id."""

    def __init__(
        self,
        store: KeyValueStoreInterface,
        retention_days: int = 30,
        clock: Clock = _utcnow,
    ) -> None:
        super().__init__(store, clock)
        self._retention = timedelta(days=retention_days)

    async def load_sessions(self) -> list[LearningSession]:
        return await self._read(SESSIONS_KEY, _sessions_adapter) or []

    async def save_session(self, session: LearningSession) -> None:
        """Insert the session, or overwrite the stored snapshot with the same id."""
        sessions = await self.load_sessions()
        for idx, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[idx] = session
                break
        else:
            sessions.append(session)
        await self._write(SESSIONS_KEY, _sessions_adapter, sessions)

    async def completed_sessions(self) -> list[LearningSession]:
        return [s for s in await self.load_sessions() if s.completed]

    async def cleanup_old_sessions(self) -> int:
        """Drop completed sessions that started before the retention window.

        Returns:
            Number of sessions removed
        """
        sessions = await self.load_sessions()
        cutoff = self._clock() - self._retention
        kept = [s for s in sessions if s.start_time > cutoff or not s.completed]
        removed = len(sessions) - len(kept)
        if removed:
            await self._write(SESSIONS_KEY, _sessions_adapter, kept)
            logger.info("sessions_cleaned_up", removed=removed, kept=len(kept))
        return removed


class PreferenceStore(_JSONCache):
    """User state, learning history, taxonomy snapshot, theme and annotations.

    Learning history lives under its own key and is mirrored into the user
    state record; both copies follow one policy (deduplicated, oldest
    entries dropped past history_limit).
    """

    def __init__(
        self,
        store: KeyValueStoreInterface,
        history_limit: int = 100,
        default_theme: Theme = "light",
    ) -> None:
        super().__init__(store)
        self._history_limit = history_limit
        self._default_theme = default_theme

    async def load_user_state(self) -> UserState | None:
        raw = await self._read_raw(USER_STATE_KEY)
        if raw is None:
            return None
        try:
            return UserState.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("cache_value_corrupt", key=USER_STATE_KEY, errors=e.error_count())
            return None

    async def save_user_state(self, state: UserState) -> None:
        await self._write_raw(USER_STATE_KEY, state.model_dump_json(by_alias=True))

    async def update_user_state(self, **changes: Any) -> UserState:
        """Apply field changes to the stored user state (created if missing)."""
        state = (await self.load_user_state() or UserState()).model_copy(update=changes)
        await self.save_user_state(state)
        return state

    async def update_preferences(self, **changes: Any) -> UserPreferences:
        """Merge changes into the stored preference record."""
        state = await self.load_user_state() or UserState()
        preferences = state.preferences.model_copy(update=changes)
        await self.save_user_state(state.model_copy(update={"preferences": preferences}))
        return preferences

    async def load_learning_history(self) -> list[str]:
        return await self._read(LEARNING_HISTORY_KEY, _strings_adapter) or []

    async def add_learning_history(self, card_id: str) -> list[str]:
        """Record a studied card once, keeping the newest history_limit entries.

        Returns:
            The history after the update, oldest first
        """
        history = await self.load_learning_history()
        if card_id in history:
            return history

        history = [*history, card_id][-self._history_limit :]
        await self._write(LEARNING_HISTORY_KEY, _strings_adapter, history)
        await self.update_user_state(learning_history=history)
        return history

    async def save_domains(
        self, domains: list[KnowledgeDomain] | tuple[KnowledgeDomain, ...]
    ) -> None:
        """Write the taxonomy snapshot."""
        await self._write(DOMAINS_KEY, _domains_adapter, list(domains))

    async def load_domains(self) -> list[KnowledgeDomain]:
        return await self._read(DOMAINS_KEY, _domains_adapter) or []

    async def get_theme(self) -> Theme | None:
        """Load the stored theme; None when missing or not a known value."""
        raw = await self._read_raw(THEME_KEY)
        if raw is None:
            return None
        try:
            theme = json.loads(raw)
        except json.JSONDecodeError:
            # Tolerate a bare, unquoted value
            theme = raw
        return theme if theme in get_args(Theme) else None

    async def set_theme(self, theme: Theme) -> None:
        await self._write_raw(THEME_KEY, json.dumps(theme))

    async def resolve_theme(self, prefers_dark: bool | None = None) -> Theme:
        """Pick the theme: stored value, else the platform preference, else the default."""
        stored = await self.get_theme()
        if stored is not None:
            return stored
        if prefers_dark:
            return "dark"
        return self._default_theme

    async def load_annotations(self) -> CardAnnotations:
        raw = await self._read_raw(ANNOTATIONS_KEY)
        if raw is None:
            return CardAnnotations()
        try:
            return CardAnnotations.model_validate_json(raw)
        except ValidationError as e:
            logger.warning("cache_value_corrupt", key=ANNOTATIONS_KEY, errors=e.error_count())
            return CardAnnotations()

    async def save_annotations(self, annotations: CardAnnotations) -> None:
        await self._write_raw(ANNOTATIONS_KEY, annotations.model_dump_json(by_alias=True))
