"""Host scheduling primitives.

The engine needs two hooks from its host: a "next tick" callback (one per
frame, used to commit a batch of pulses) and an "idle" callback (used to run
correlation passes off the critical path). ``ImmediateScheduler`` is the
synchronous fallback that guarantees forward progress anywhere.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from collections import deque
from typing import Callable, Optional

Callback = Callable[[], None]


class Scheduler(ABC):
    """Abstract host scheduler."""

    @abstractmethod
    def schedule_tick(self, fn: Callback) -> None:
        """Run ``fn`` at the next frame boundary."""

    @abstractmethod
    def schedule_idle(self, fn: Callback) -> None:
        """Run ``fn`` when the host is idle."""


class ImmediateScheduler(Scheduler):
    """Runs every callback synchronously.

    Every ``record`` commits its own tick, so pulses never coalesce; use
    ``ManualScheduler`` when frame batching matters.
    """

    def schedule_tick(self, fn: Callback) -> None:
        fn()

    def schedule_idle(self, fn: Callback) -> None:
        fn()


class ManualScheduler(Scheduler):
    """Queues callbacks until the caller steps the clock.

    Deterministic frame stepping for tests and trace replay.
    """

    def __init__(self) -> None:
        self._ticks: deque[Callback] = deque()
        self._idle: deque[Callback] = deque()

    def schedule_tick(self, fn: Callback) -> None:
        self._ticks.append(fn)

    def schedule_idle(self, fn: Callback) -> None:
        self._idle.append(fn)

    @property
    def pending(self) -> int:
        return len(self._ticks) + len(self._idle)

    def run_ticks(self) -> int:
        """Run queued tick callbacks only. Returns how many ran."""
        count = 0
        while self._ticks:
            self._ticks.popleft()()
            count += 1
        return count

    def run_idle(self) -> int:
        """Run idle callbacks queued so far. Returns how many ran."""
        count = 0
        for _ in range(len(self._idle)):
            self._idle.popleft()()
            count += 1
        return count

    def run_pending(self) -> int:
        """Drain both queues, ticks first, until nothing is left."""
        count = 0
        while self._ticks or self._idle:
            count += self.run_ticks()
            count += self.run_idle()
        return count


class AsyncioScheduler(Scheduler):
    """Frame ticks on an asyncio event loop.

    Ticks fire ``frame_interval`` seconds after being requested; idle work
    runs on the next loop iteration. With no running (or an already closed)
    loop, callbacks run immediately like ``ImmediateScheduler``.
    """

    def __init__(
        self,
        frame_interval: float = 0.02,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        self.frame_interval = frame_interval
        self._loop = loop

    @property
    def loop(self) -> Optional[asyncio.AbstractEventLoop]:
        """The loop callbacks go to, or None when none is usable."""
        if self._loop is not None:
            return None if self._loop.is_closed() else self._loop
        try:
            return asyncio.get_running_loop()
        except RuntimeError:
            return None

    def schedule_tick(self, fn: Callback) -> None:
        loop = self.loop
        if loop is None:
            fn()
            return
        loop.call_later(self.frame_interval, fn)

    def schedule_idle(self, fn: Callback) -> None:
        loop = self.loop
        if loop is None:
            fn()
            return
        loop.call_soon(fn)
