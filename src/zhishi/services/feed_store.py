"""Card feed store for zhishi.

This module owns the ordered card sequence the user scrolls through,
the cursor into it, and the background generation that keeps it from
running dry.
"""

import asyncio

from zhishi.logging import get_logger, log_context
from zhishi.models.card import KnowledgeCard
from zhishi.services.card_generation import CardGenerationService
from zhishi.services.local_cache import CardCache

__all__ = [
    "GENERATION_ERROR_MESSAGE",
    "PREFETCH_DISTANCE",
    "CardFeedStore",
]

logger = get_logger(__name__)

GENERATION_ERROR_MESSAGE = "生成卡片失败，请重试"

# Generation starts once the cursor is this close to the end of the feed
PREFETCH_DISTANCE = 2


class CardFeedStore:
    """Owner of the card feed and its cursor.

    The feed is append-only between resets. At most one generation is in
    flight at a time; overlapping requests while is_generating is set are
    no-ops. Results that arrive after reset() are discarded.

    Public operations never raise. Failures are logged and reported
    through last_error.

    Example:
        feed = CardFeedStore(generator, cache, default_domains=["science"])
        await feed.generate_initial()
        card = feed.current_card
    """

    def __init__(
        self,
        generator: CardGenerationService,
        cache: CardCache,
        default_domains: list[str] | None = None,
        batch_size: int = 5,
    ) -> None:
        """Initialize store with dependencies.

        Args:
            generator: Card generation service (runs the fallback ladder)
            cache: Local feed cache
            default_domains: Domains used when no selection is stored
            batch_size: Cards requested per generation
        """
        self._generator = generator
        self._cache = cache
        self._default_domains = list(default_domains or [])
        self._batch_size = batch_size

        self._cards: list[KnowledgeCard] = []
        self._current_index = 0
        self._is_generating = False
        self._has_more = True
        self._last_error: str | None = None
        self._selected_domains: list[str] = []

        self._token = 0
        self._prefetch_task: asyncio.Task[None] | None = None

    # State

    @property
    def cards(self) -> tuple[KnowledgeCard, ...]:
        return tuple(self._cards)

    @property
    def card_count(self) -> int:
        return len(self._cards)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def current_card(self) -> KnowledgeCard | None:
        if 0 <= self._current_index < len(self._cards):
            return self._cards[self._current_index]
        return None

    @property
    def is_generating(self) -> bool:
        return self._is_generating

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def selected_domains(self) -> list[str]:
        return list(self._selected_domains)

    # Operations

    async def select_domains(self, domains: list[str]) -> None:
        """Replace the domain selection and persist it."""
        self._selected_domains = list(domains)
        await self._cache.save_selected_domains(self._selected_domains)

    async def restore_selection(self) -> list[str]:
        """Load the persisted domain selection."""
        self._selected_domains = await self._cache.get_selected_domains()
        return list(self._selected_domains)

    async def _resolve_domains(self, domains: list[str] | None) -> list[str]:
        if domains:
            return list(domains)
        if not self._selected_domains:
            self._selected_domains = await self._cache.get_selected_domains()
        return list(self._selected_domains or self._default_domains)

    async def generate_initial(
        self,
        domains: list[str] | None = None,
        count: int | None = None,
    ) -> None:
        """Populate the feed, from cache when fresh, otherwise from the generator.

        Args:
            domains: Domains to generate for (defaults to the stored selection,
                then the configured defaults)
            count: Cards to request (defaults to batch_size)
        """
        count = count or self._batch_size
        if domains:
            await self.select_domains(domains)

        cached = await self._cache.get_cards()
        if cached:
            self._cards = list(cached)
            self._has_more = True
            await self.restore_cursor()
            logger.info("feed_loaded_from_cache", count=len(cached), index=self._current_index)
            return

        await self._generate(await self._resolve_domains(domains), count)

    async def load_more(self, count: int | None = None) -> None:
        """Append one generated batch. No-op while a generation is in flight."""
        if self._is_generating:
            logger.debug("load_more_skipped", reason="generation in flight")
            return
        await self._generate(await self._resolve_domains(None), count or self._batch_size)

    async def _generate(self, domains: list[str], count: int) -> None:
        if self._is_generating:
            return

        token = self._token
        self._is_generating = True
        self._last_error = None
        with log_context(feed_token=token):
            try:
                new_cards = await self._generator.generate_cards(
                    domains, list(self._cards), count
                )
                if token != self._token:
                    logger.info("stale_generation_discarded", count=len(new_cards))
                    return

                self._cards.extend(new_cards)
                self._has_more = bool(new_cards)
                await self._cache.save_cards(self._cards)
                logger.info(
                    "feed_extended",
                    added=len(new_cards),
                    total=len(self._cards),
                    domains=domains,
                )
            except Exception as e:
                logger.error("feed_generation_failed", error=str(e))
                if token == self._token:
                    self._last_error = GENERATION_ERROR_MESSAGE
            finally:
                if token == self._token:
                    self._is_generating = False

    async def move_to(self, index: int) -> None:
        """Move the cursor, persist it, and prefetch when near the end.

        Prefetch schedules exactly one background load_more once the cursor
        reaches the second-to-last card, unless a generation is already
        in flight or pending.
        """
        if not self._cards:
            return
        self._current_index = max(0, min(index, len(self._cards) - 1))
        await self._cache.save_current_index(self._current_index)

        if self._current_index >= len(self._cards) - PREFETCH_DISTANCE:
            self.request_more()

    def request_more(self) -> asyncio.Task[None] | None:
        """Schedule a background load_more unless one is running or pending.

        Returns:
            The scheduled task, or None if nothing was scheduled
        """
        if self._is_generating or self._prefetch_task is not None:
            return None

        loop = asyncio.get_running_loop()
        task = loop.create_task(self.load_more())
        self._prefetch_task = task
        task.add_done_callback(self._clear_prefetch)
        logger.debug("prefetch_scheduled", index=self._current_index, total=len(self._cards))
        return task

    def _clear_prefetch(self, task: asyncio.Task[None]) -> None:
        if self._prefetch_task is task:
            self._prefetch_task = None

    async def wait_for_prefetch(self) -> None:
        """Await the pending background generation, if any."""
        if self._prefetch_task is not None:
            await self._prefetch_task

    async def restore_cursor(self) -> int:
        """Restore the saved cursor, clamped to the loaded feed."""
        saved = await self._cache.get_current_index()
        self._current_index = min(saved, max(len(self._cards) - 1, 0))
        return self._current_index

    async def reset(self) -> None:
        """Clear the feed and its cache; in-flight results become stale.

        The domain selection is kept.
        """
        self._token += 1
        self._cards = []
        self._current_index = 0
        self._is_generating = False
        self._has_more = True
        self._last_error = None
        self._prefetch_task = None
        await self._cache.clear_cards()
        await self._cache.save_current_index(0)
        logger.info("feed_reset")

    def dismiss_error(self) -> None:
        self._last_error = None
