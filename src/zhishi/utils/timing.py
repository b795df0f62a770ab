"""Timing instrumentation for zhishi.

Durations are logged and returned; they never influence control flow.
"""

import time
from collections.abc import Awaitable, Callable
from typing import TypeVar

from zhishi.logging import get_logger

__all__ = [
    "PerformanceMonitor",
    "performance_monitor",
]

logger = get_logger(__name__)

T = TypeVar("T")


class PerformanceMonitor:
    """Named start/stop timers.

    Example:
        monitor = PerformanceMonitor()
        text = await monitor.measure_async("llm_completion", lambda: client.complete(p))
    """

    def __init__(self, clock: Callable[[], float] = time.perf_counter) -> None:
        """Initialize monitor.

        Args:
            clock: Monotonic clock returning seconds
        """
        self._clock = clock
        self._timers: dict[str, float] = {}

    def start_timer(self, name: str) -> None:
        """Start (or restart) the named timer."""
        self._timers[name] = self._clock()

    def end_timer(self, name: str) -> float:
        """Stop the named timer and log its duration.

        Args:
            name: Timer name passed to start_timer

        Returns:
            Duration in milliseconds, or 0.0 if the timer was never started
        """
        started = self._timers.pop(name, None)
        if started is None:
            logger.warning("timer_not_started", timer=name)
            return 0.0
        return self._finish(name, started)

    def _finish(self, name: str, started: float) -> float:
        duration_ms = (self._clock() - started) * 1000
        logger.debug("timer_finished", timer=name, duration_ms=round(duration_ms, 2))
        return duration_ms

    async def measure_async(self, name: str, fn: Callable[[], Awaitable[T]]) -> T:
        """Await fn() and log its duration under name.

        Each call keeps its own start time, so overlapping calls with the
        same name are measured independently.
        """
        started = self._clock()
        try:
            return await fn()
        finally:
            self._finish(name, started)

    def measure(self, name: str, fn: Callable[[], T]) -> T:
        """Call fn() and log its duration under name."""
        started = self._clock()
        try:
            return fn()
        finally:
            self._finish(name, started)


performance_monitor = PerformanceMonitor()
