"""Unit tests for timing instrumentation."""

import asyncio
from unittest.mock import MagicMock

import pytest

from zhishi.utils import timing
from zhishi.utils.timing import PerformanceMonitor


class FakeClock:
    def __init__(self, *readings: float) -> None:
        self._readings = list(readings)

    def __call__(self) -> float:
        return self._readings.pop(0)


class TestPerformanceMonitor:
    """Tests for PerformanceMonitor."""

    def test_end_timer_returns_milliseconds(self) -> None:
        monitor = PerformanceMonitor(clock=FakeClock(10.0, 10.25))

        monitor.start_timer("llm_completion")

        assert monitor.end_timer("llm_completion") == pytest.approx(250.0)

    def test_unstarted_timer_returns_zero(self) -> None:
        monitor = PerformanceMonitor(clock=FakeClock())

        assert monitor.end_timer("never_started") == 0.0

    def test_timer_is_consumed(self) -> None:
        monitor = PerformanceMonitor(clock=FakeClock(1.0, 2.0))
        monitor.start_timer("t")
        monitor.end_timer("t")

        assert monitor.end_timer("t") == 0.0

    def test_measure_stops_timer_on_error(self) -> None:
        monitor = PerformanceMonitor(clock=FakeClock(0.0, 0.5))

        def boom() -> None:
            raise ValueError("boom")

        with pytest.raises(ValueError):
            monitor.measure("t", boom)
        assert monitor.end_timer("t") == 0.0

    @pytest.mark.asyncio
    async def test_measure_async_returns_value(self) -> None:
        monitor = PerformanceMonitor(clock=FakeClock(0.0, 0.1))

        async def work() -> str:
            return "done"

        assert await monitor.measure_async("t", work) == "done"

    @pytest.mark.asyncio
    async def test_overlapping_measurements_are_independent(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        mock_logger = MagicMock()
        monkeypatch.setattr(timing, "logger", mock_logger)
        monitor = PerformanceMonitor(clock=FakeClock(0.0, 0.1, 0.5, 0.6))
        first_gate, second_gate = asyncio.Event(), asyncio.Event()

        async def wait(gate: asyncio.Event) -> str:
            await gate.wait()
            return "ok"

        first = asyncio.create_task(
            monitor.measure_async("llm_completion", lambda: wait(first_gate))
        )
        second = asyncio.create_task(
            monitor.measure_async("llm_completion", lambda: wait(second_gate))
        )
        await asyncio.sleep(0)

        first_gate.set()
        assert await first == "ok"
        second_gate.set()
        assert await second == "ok"

        durations = [c.kwargs["duration_ms"] for c in mock_logger.debug.call_args_list]
        assert durations == [pytest.approx(500.0), pytest.approx(500.0)]
        mock_logger.warning.assert_not_called()
