"""Swipe gesture controller for zhishi.

A per-card-view state machine that turns raw (x, y, t) pointer samples
into feed navigation. Rendering is left to the caller; this module only
exposes the offset, the ghost preview target and the transition lock.
"""

import asyncio
import time
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any, Protocol, runtime_checkable

from zhishi.config import SwipeSettings
from zhishi.logging import get_logger

__all__ = [
    "FeedView",
    "Scheduler",
    "SwipeController",
    "SwipeDirection",
    "SwipeState",
    "compute_threshold",
]

logger = get_logger(__name__)

Scheduler = Callable[[float, Callable[[], None]], Any]


class SwipeState(StrEnum):
    IDLE = "idle"
    DRAGGING = "dragging"
    TRANSITIONING = "transitioning"


class SwipeDirection(StrEnum):
    UP = "up"  # towards the next card
    DOWN = "down"  # towards the previous card


@runtime_checkable
class FeedView(Protocol):
    """The slice of the feed store the swipe controller needs."""

    @property
    def current_index(self) -> int: ...

    @property
    def card_count(self) -> int: ...

    @property
    def has_more(self) -> bool: ...

    @property
    def is_generating(self) -> bool: ...

    def move_to(self, index: int) -> Awaitable[None]: ...

    def request_more(self) -> Any: ...


def compute_threshold(
    offset: float,
    elapsed_ms: float,
    *,
    min_threshold: float = 40.0,
    max_threshold: float = 100.0,
    max_speed_bonus: float = 60.0,
    speed_factor: float = 250.0,
) -> float:
    """Commit threshold for a gesture; faster flicks need less travel.

    Args:
        offset: Damped vertical offset at release
        elapsed_ms: Gesture duration (clamped to at least 1 ms)
        min_threshold: Lower bound of the threshold
        max_threshold: Threshold for a stationary release
        max_speed_bonus: Largest reduction speed can earn
        speed_factor: Threshold reduction per px/ms of speed

    Returns:
        Displacement (px) the offset must exceed to commit
    """
    speed = abs(offset) / max(1.0, elapsed_ms)
    return max(min_threshold, max_threshold - min(max_speed_bonus, speed * speed_factor))


def _default_scheduler(delay_s: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
    return asyncio.get_running_loop().call_later(delay_s, callback)


def _default_clock() -> float:
    return time.monotonic() * 1000


class SwipeController:
    """Gesture state machine: idle, dragging, transitioning.

    A committed swipe moves the feed cursor after cursor_update_ms and
    releases the lock after transition_lock_ms. While transitioning,
    gesture events and commit requests are ignored.

    Example:
        swipe = SwipeController(feed)
        swipe.on_gesture_start(0, 400, t=0)
        swipe.on_gesture_move(0, 250, t=120)
        swipe.on_gesture_end(t=150)
    """

    def __init__(
        self,
        feed: FeedView,
        settings: SwipeSettings | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] | None = None,
    ) -> None:
        """Initialize controller.

        Args:
            feed: Feed the gestures navigate
            settings: Gesture tuning constants
            scheduler: scheduler(delay_seconds, callback) for the transition
                timers; defaults to the running event loop's call_later
            clock: Current time in milliseconds, used when samples carry no
                timestamp
        """
        self._feed = feed
        self._settings = settings or SwipeSettings()
        self._schedule = scheduler or _default_scheduler
        self._clock = clock or _default_clock

        self._state = SwipeState.IDLE
        self._start_x = 0.0
        self._start_y = 0.0
        self._start_t = 0.0
        self._offset = 0.0
        self._ghost_index: int | None = None
        self._ghost_direction: SwipeDirection | None = None
        self._transition_target: int | None = None
        self._transition_direction: SwipeDirection | None = None
        self._cursor_task: asyncio.Future[None] | None = None

    @property
    def state(self) -> SwipeState:
        return self._state

    @property
    def is_locked(self) -> bool:
        return self._state is SwipeState.TRANSITIONING

    @property
    def offset(self) -> float:
        return self._offset

    @property
    def ghost_index(self) -> int | None:
        return self._ghost_index

    @property
    def ghost_direction(self) -> SwipeDirection | None:
        return self._ghost_direction

    @property
    def transition_target(self) -> int | None:
        """Card being brought in by the running transition, until the cursor moves."""
        return self._transition_target

    @property
    def transition_direction(self) -> SwipeDirection | None:
        return self._transition_direction

    def _now(self, t: float | None) -> float:
        return self._clock() if t is None else t

    # Gesture handlers

    def on_gesture_start(self, x: float, y: float, t: float | None = None) -> None:
        if self.is_locked:
            return
        self._state = SwipeState.DRAGGING
        self._start_x = x
        self._start_y = y
        self._start_t = self._now(t)
        self._offset = 0.0
        self._clear_ghost()

    def on_gesture_move(self, x: float, y: float, t: float | None = None) -> None:
        if self._state is not SwipeState.DRAGGING:
            return

        dy = y - self._start_y
        dx = x - self._start_x
        if abs(dy) <= abs(dx):
            return

        self._offset = dy * self._settings.damping

        index = self._feed.current_index
        if dy < 0 and index < self._feed.card_count - 1:
            self._ghost_index = index + 1
            self._ghost_direction = SwipeDirection.UP
        elif dy > 0 and index > 0:
            self._ghost_index = index - 1
            self._ghost_direction = SwipeDirection.DOWN
        else:
            self._clear_ghost()

    def on_gesture_end(self, t: float | None = None) -> bool:
        """Finish the gesture and commit a transition if it passed the threshold.

        Returns:
            True if a transition was committed
        """
        if self._state is not SwipeState.DRAGGING:
            return False
        self._state = SwipeState.IDLE

        elapsed = max(1.0, self._now(t) - self._start_t)
        threshold = self.threshold_for(self._offset, elapsed)
        offset = self._offset
        index = self._feed.current_index
        last = self._feed.card_count - 1

        committed = False
        if offset > threshold and index > 0:
            committed = self.switch_card(SwipeDirection.DOWN, index - 1)
        elif offset < -threshold and index < last:
            committed = self.switch_card(SwipeDirection.UP, index + 1)
        elif (
            offset < -threshold
            and index == last
            and self._feed.has_more
            and not self._feed.is_generating
        ):
            committed = self.switch_card(SwipeDirection.UP, index)
            self._feed.request_more()
        else:
            logger.debug("swipe_discarded", offset=round(offset, 1), threshold=round(threshold, 1))

        self._offset = 0.0
        self._clear_ghost()
        return committed

    def on_gesture_cancel(self) -> None:
        """Abandon an in-progress drag without committing."""
        if self._state is SwipeState.DRAGGING:
            self._state = SwipeState.IDLE
            self._offset = 0.0
            self._clear_ghost()

    def threshold_for(self, offset: float, elapsed_ms: float) -> float:
        s = self._settings
        return compute_threshold(
            offset,
            elapsed_ms,
            min_threshold=s.min_threshold,
            max_threshold=s.max_threshold,
            max_speed_bonus=s.max_speed_bonus,
            speed_factor=s.speed_factor,
        )

    # Transitions

    def switch_card(self, direction: SwipeDirection, target: int) -> bool:
        """Start a transition to target. No-op while another one is running.

        Returns:
            True if the transition was started
        """
        if self.is_locked:
            return False

        self._state = SwipeState.TRANSITIONING
        self._transition_target = target
        self._transition_direction = direction
        self._schedule(self._settings.cursor_update_ms / 1000, lambda: self._update_cursor(target))
        self._schedule(self._settings.transition_lock_ms / 1000, self._release_lock)
        logger.debug("swipe_committed", direction=str(direction), target=target)
        return True

    def _update_cursor(self, target: int) -> None:
        self._transition_target = None
        self._transition_direction = None
        self._cursor_task = asyncio.ensure_future(self._feed.move_to(target))

    def _release_lock(self) -> None:
        self._state = SwipeState.IDLE

    async def wait_for_cursor(self) -> None:
        """Await the feed cursor update started by the last transition."""
        if self._cursor_task is not None:
            await self._cursor_task

    def _clear_ghost(self) -> None:
        self._ghost_index = None
        self._ghost_direction = None
