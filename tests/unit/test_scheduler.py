"""Tests for debounce timer schedulers."""

from __future__ import annotations

import asyncio
import threading

from portweave.runtime import AsyncioScheduler, ManualScheduler, ThreadingScheduler


class TestManualScheduler:
    def test_fires_in_due_order(self) -> None:
        scheduler = ManualScheduler()
        fired: list[str] = []
        scheduler.call_later(200, lambda: fired.append("late"))
        scheduler.call_later(100, lambda: fired.append("early"))
        scheduler.call_later(100, lambda: fired.append("early-2"))

        scheduler.advance(150)
        assert fired == ["early", "early-2"]
        assert scheduler.now_ms == 150

        scheduler.advance(50)
        assert fired == ["early", "early-2", "late"]

    def test_cancel(self) -> None:
        scheduler = ManualScheduler()
        fired: list[int] = []
        handle = scheduler.call_later(10, lambda: fired.append(1))
        assert scheduler.pending_count == 1
        handle.cancel()
        assert scheduler.pending_count == 0
        scheduler.advance(100)
        assert fired == []

    def test_callback_can_schedule_more(self) -> None:
        scheduler = ManualScheduler()
        fired: list[int] = []

        def first() -> None:
            fired.append(scheduler.now_ms)
            scheduler.call_later(10, lambda: fired.append(scheduler.now_ms))

        scheduler.call_later(10, first)
        scheduler.advance(100)
        assert fired == [10, 20]

    def test_run_pending_fires_zero_delay(self) -> None:
        scheduler = ManualScheduler()
        fired: list[int] = []
        scheduler.call_later(0, lambda: fired.append(1))
        scheduler.run_pending()
        assert fired == [1]


class TestThreadingScheduler:
    def test_fires_on_timer_thread(self) -> None:
        done = threading.Event()
        ThreadingScheduler().call_later(1, done.set)
        assert done.wait(timeout=5)

    def test_cancel(self) -> None:
        fired = threading.Event()
        handle = ThreadingScheduler().call_later(200, fired.set)
        handle.cancel()
        assert not fired.wait(timeout=0.4)


class TestAsyncioScheduler:
    def test_fires_on_running_loop(self) -> None:
        async def scenario() -> list[int]:
            fired: list[int] = []
            AsyncioScheduler().call_later(1, lambda: fired.append(1))
            await asyncio.sleep(0.05)
            return fired

        assert asyncio.run(scenario()) == [1]
