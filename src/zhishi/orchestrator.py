"""Zhishi orchestrator for the knowledge-card application core.

This module provides the main entry point for the zhishi package. It
wires the completion provider, the local store, and the feed, swipe and
session controllers, and runs the startup housekeeping.
"""

from typing import Any, Literal

from zhishi.config import ZhishiConfig
from zhishi.infra.llm import provider_class_for
from zhishi.infra.memory.store import MemoryStore
from zhishi.infra.redis.client import RedisClient
from zhishi.interfaces.llm import CompletionInterface
from zhishi.interfaces.storage import KeyValueStoreInterface
from zhishi.logging import get_logger
from zhishi.models.card import KnowledgeCard
from zhishi.models.domain import KnowledgeDomain
from zhishi.models.session import LearningSession
from zhishi.models.user import CardAnnotations, Theme, UserPreferences
from zhishi.services.card_generation import CardGenerationService
from zhishi.services.dialogue import DialogueService
from zhishi.services.feed_store import CardFeedStore
from zhishi.services.local_cache import CardCache, PreferenceStore, SessionStore
from zhishi.services.session_controller import SessionController
from zhishi.services.swipe import Scheduler, SwipeController
from zhishi.taxonomy import KNOWLEDGE_DOMAINS

__all__ = ["Zhishi"]

logger = get_logger(__name__)


class Zhishi:
    """Main orchestrator for the zhishi application core.

    Accepts implementation classes. Config is loaded from .env
    automatically. For custom implementations, set config_class = None
    and pass a custom config dict.

    Example:
        async with Zhishi() as app:
            await app.skip_domain_selection()
            card = app.feed.current_card
            await app.enter_learning(card)
            await app.session.send_user_message(card, "为什么？")
    """

    def __init__(
        self,
        llm_class: type[CompletionInterface] | None = None,
        store_class: type[KeyValueStoreInterface] | None = None,
        *,
        config: ZhishiConfig | None = None,
        llm_custom_config: dict[str, Any] | None = None,
        store_custom_config: dict[str, Any] | None = None,
        prefers_dark: bool | None = None,
        swipe_scheduler: Scheduler | None = None,
    ) -> None:
        """Initialize Zhishi with implementation classes.

        Args:
            llm_class: Completion provider class (defaults to the configured provider)
            store_class: Key-value store class (defaults to Redis when
                configured, otherwise the in-process store)
            config: Settings (defaults to loading from the environment)
            llm_custom_config: Custom config dict if llm_class.config_class is None
            store_custom_config: Custom config dict if store_class.config_class is None
            prefers_dark: Platform dark-mode preference used when no theme is stored
            swipe_scheduler: Timer scheduler for swipe transitions
        """
        self._config = config or ZhishiConfig()  # Loads from .env

        self._llm_class = llm_class or provider_class_for(self._config.llm.provider)
        if store_class is None:
            store_class = RedisClient if self._config.redis_enabled else MemoryStore
        self._store_class = store_class

        self._llm_custom_config = llm_custom_config
        self._store_custom_config = store_custom_config
        self._prefers_dark = prefers_dark
        self._swipe_scheduler = swipe_scheduler

        # Instances (created on connect)
        self._llm: CompletionInterface | None = None
        self._store: KeyValueStoreInterface | None = None

        # Services (wired on connect)
        self._card_cache: CardCache | None = None
        self._sessions: SessionStore | None = None
        self._preferences: PreferenceStore | None = None
        self._feed: CardFeedStore | None = None
        self._swipe: SwipeController | None = None
        self._session: SessionController | None = None

        self._theme: Theme = "light"
        self._connected = False

    async def _instantiate_class(
        self,
        cls: type,
        custom_config: dict[str, Any] | None,
        settings: Any,
    ) -> Any:
        """Instantiate an implementation class.

        If cls.config_class is set, pass it the matching nested settings
        (or a fresh instance loaded from .env). If cls.config_class is
        None, use custom_config dict.
        """
        config_class = getattr(cls, "config_class", None)

        if config_class is None:
            if custom_config is None:
                raise ValueError(
                    f"{cls.__name__} has config_class=None but no custom_config provided"
                )
            return await cls.from_dict(custom_config)

        config = settings if isinstance(settings, config_class) else config_class()
        return await cls.from_config(config)

    async def _connect_store(self) -> KeyValueStoreInterface:
        custom = self._store_custom_config
        if custom is None and self._store_class is MemoryStore:
            custom = {}
        store = await self._instantiate_class(self._store_class, custom, self._config.redis)

        if isinstance(store, RedisClient) and not store.is_connected:
            logger.warning("store_fallback", reason="redis unavailable", backend="memory")
            return MemoryStore()
        return store

    async def _connect(self) -> None:
        """Initialize connections, wire services and run startup housekeeping."""
        if self._connected:
            return

        self._llm = await self._instantiate_class(
            self._llm_class, self._llm_custom_config, self._config.llm
        )
        self._store = await self._connect_store()

        # Wire services
        cfg = self._config
        self._card_cache = CardCache(self._store, expiry_days=cfg.card_cache_days)
        self._sessions = SessionStore(self._store, retention_days=cfg.session_retention_days)
        self._preferences = PreferenceStore(
            self._store,
            history_limit=cfg.learning_history_limit,
            default_theme="dark" if cfg.default_theme == "dark" else "light",
        )
        self._feed = CardFeedStore(
            CardGenerationService(self._llm, related_ratio=cfg.related_ratio),
            self._card_cache,
            default_domains=cfg.default_domains,
            batch_size=cfg.batch_size,
        )
        self._swipe = SwipeController(self._feed, cfg.swipe, scheduler=self._swipe_scheduler)
        self._session = SessionController(
            DialogueService(self._llm),
            self._sessions,
            self._preferences,
        )

        # Startup housekeeping
        await self._preferences.save_domains(KNOWLEDGE_DOMAINS)
        await self._sessions.cleanup_old_sessions()
        selected = await self._feed.restore_selection()
        self._theme = await self._preferences.resolve_theme(self._prefers_dark)

        self._connected = True
        logger.info(
            "zhishi_connected",
            store=type(self._store).__name__,
            llm=type(self._llm).__name__,
            selected_domains=selected,
            theme=self._theme,
        )

    async def _disconnect(self) -> None:
        """Close all connections."""
        if self._session is not None and self._session.session is not None:
            await self._session.exit()
        if self._store and hasattr(self._store, "close"):
            await self._store.close()
        if self._llm and hasattr(self._llm, "close"):
            await self._llm.close()

        self._connected = False
        logger.info("zhishi_disconnected")

    async def __aenter__(self) -> "Zhishi":
        """Async context manager entry - connects automatically."""
        await self._connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Async context manager exit - disconnects automatically."""
        await self._disconnect()

    def _ensure_connected(self) -> None:
        if not self._connected:
            raise RuntimeError("Zhishi not connected. Use 'async with Zhishi(...) as app:'")

    # === COMPONENTS ===

    @property
    def config(self) -> ZhishiConfig:
        return self._config

    @property
    def feed(self) -> CardFeedStore:
        self._ensure_connected()
        assert self._feed is not None
        return self._feed

    @property
    def swipe(self) -> SwipeController:
        self._ensure_connected()
        assert self._swipe is not None
        return self._swipe

    @property
    def session(self) -> SessionController:
        self._ensure_connected()
        assert self._session is not None
        return self._session

    @property
    def domains(self) -> tuple[KnowledgeDomain, ...]:
        """The static knowledge-domain taxonomy."""
        return KNOWLEDGE_DOMAINS

    @property
    def theme(self) -> Theme:
        return self._theme

    def _prefs(self) -> PreferenceStore:
        self._ensure_connected()
        assert self._preferences is not None
        return self._preferences

    # === FEED ===

    async def start(self) -> None:
        """Populate the feed for the stored selection (cache first)."""
        await self.feed.generate_initial()

    async def select_domains(self, domains: list[str]) -> None:
        """Switch the feed to a new domain selection and generate a fresh batch."""
        feed = self.feed
        await feed.select_domains(domains)
        await self._prefs().update_user_state(selected_domains=list(domains))
        await feed.reset()
        await feed.generate_initial(domains)

    async def skip_domain_selection(self) -> None:
        """Start the feed with the configured default domains."""
        await self.select_domains(list(self._config.default_domains))

    # === LEARNING MODE ===

    async def enter_learning(self, card: KnowledgeCard) -> LearningSession | None:
        """Open learning mode for card and load its opening turn."""
        controller = self.session
        await controller.enter(card)
        await controller.init_session(card)
        return controller.session

    async def exit_learning(self) -> LearningSession | None:
        """Close learning mode, completing and persisting the session."""
        return await self.session.exit()

    # === ANNOTATIONS & PREFERENCES ===

    async def annotations(self) -> CardAnnotations:
        return await self._prefs().load_annotations()

    async def toggle_like(self, card_id: str) -> CardAnnotations:
        return await self._toggle("liked", card_id)

    async def toggle_favorite(self, card: KnowledgeCard) -> CardAnnotations:
        """Flip the favorite flag; favorited cards are kept in the saved collection."""
        annotations = await self._toggle("favorited", card.id)
        assert self._card_cache is not None
        if card.id in annotations.favorited:
            await self._card_cache.add_saved_card(card)
        else:
            await self._card_cache.remove_saved_card(card.id)
        return annotations

    async def mark_learned(self, card_id: str) -> CardAnnotations:
        prefs = self._prefs()
        annotations = (await prefs.load_annotations()).with_learned(card_id)
        await prefs.save_annotations(annotations)
        return annotations

    async def _toggle(self, field: Literal["liked", "favorited"], card_id: str) -> CardAnnotations:
        prefs = self._prefs()
        annotations = (await prefs.load_annotations()).toggled(field, card_id)
        await prefs.save_annotations(annotations)
        return annotations

    async def saved_cards(self) -> list[KnowledgeCard]:
        self._ensure_connected()
        assert self._card_cache is not None
        return await self._card_cache.load_saved_cards()

    async def set_theme(self, theme: Theme) -> None:
        await self._prefs().set_theme(theme)
        self._theme = theme

    async def update_preferences(self, **changes: Any) -> UserPreferences:
        return await self._prefs().update_preferences(**changes)
