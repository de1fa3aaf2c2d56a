"""
Timer schedulers for debounced propagation.

The engine only needs "call this later" and "cancel that". Three hosts are
covered:

- ThreadingScheduler: threading.Timer, for plain synchronous hosts (default)
- AsyncioScheduler: loop.call_later, for hosts running an asyncio loop
- ManualScheduler: a virtual clock advanced explicitly, for deterministic
  hosts (render loops, simulations, tests)
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import threading
from collections.abc import Callable
from typing import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> TimerHandle: ...


class ThreadingScheduler:
    """Runs callbacks on daemon timer threads."""

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay_ms / 1000.0, callback)
        timer.daemon = True
        timer.start()
        return timer


class AsyncioScheduler:
    """Runs callbacks on an asyncio event loop (the running loop by default)."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000.0, callback)


class _ManualTimer:
    __slots__ = ("due_ms", "callback", "cancelled")

    def __init__(self, due_ms: int, callback: Callable[[], None]) -> None:
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Virtual-clock scheduler.

    Nothing fires until ``advance`` or ``run_pending`` is called; timers then
    fire in due-time order on the caller's thread.

    Example:
        scheduler = ManualScheduler()
        engine = ReactiveBindingEngine(spec, scheduler=scheduler)
        engine.update_port("a.out", 1)
        scheduler.advance(300)
    """

    def __init__(self) -> None:
        self.now_ms = 0
        self._queue: list[tuple[int, int, _ManualTimer]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: int, callback: Callable[[], None]) -> _ManualTimer:
        timer = _ManualTimer(self.now_ms + max(delay_ms, 0), callback)
        heapq.heappush(self._queue, (timer.due_ms, next(self._seq), timer))
        return timer

    def advance(self, ms: int) -> None:
        """Move the clock forward, firing every timer that comes due on the way."""
        target = self.now_ms + ms
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self.now_ms = max(self.now_ms, due)
            if not timer.cancelled:
                timer.callback()
        self.now_ms = target

    def run_pending(self) -> None:
        """Fire timers that are due at the current time."""
        self.advance(0)

    @property
    def pending_count(self) -> int:
        return sum(1 for _, _, timer in self._queue if not timer.cancelled)
