"""CircuitBreaker: fail-safe against runaway update loops."""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Callable

from ..logging_config import get_logger

logger = get_logger(__name__)


class CircuitBreaker:
    """Per-label update counter over a rolling window.

    The update that pushes a label past ``threshold`` within one window trips
    the breaker: the label is paused and every later ``allow`` call for it
    fails. Paused labels stay paused until ``resume`` is called, unless
    ``auto_resume`` is set, in which case the next window rollover clears
    them.
    """

    def __init__(
        self,
        threshold: int = 150,
        window_seconds: float = 1.0,
        auto_resume: bool = False,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.threshold = threshold
        self.window_seconds = window_seconds
        self.auto_resume = auto_resume
        self._clock = clock
        self._counters: defaultdict[str, int] = defaultdict(int)
        self._paused: set[str] = set()
        self._window_start = clock()
        self.trips = 0

    def allow(self, label: str) -> bool:
        """Count one update for ``label``; False if it is (or just got) paused."""
        self._maybe_roll_window()

        if label in self._paused:
            return False

        self._counters[label] += 1
        if self._counters[label] > self.threshold:
            self._paused.add(label)
            self.trips += 1
            logger.warning(
                "Circuit breaker tripped for %s: %d updates within %.2fs (limit %d)",
                label,
                self._counters[label],
                self.window_seconds,
                self.threshold,
            )
            return False
        return True

    def is_paused(self, label: str) -> bool:
        return label in self._paused

    def resume(self, label: str) -> bool:
        """Un-pause ``label``. Returns whether it was paused."""
        if label not in self._paused:
            return False
        self._paused.discard(label)
        self._counters.pop(label, None)
        logger.info("Circuit breaker resumed %s", label)
        return True

    def forget(self, label: str) -> None:
        self._paused.discard(label)
        self._counters.pop(label, None)

    def count(self, label: str) -> int:
        return self._counters.get(label, 0)

    @property
    def paused(self) -> frozenset[str]:
        return frozenset(self._paused)

    def _maybe_roll_window(self) -> None:
        now = self._clock()
        if now - self._window_start < self.window_seconds:
            return
        self._window_start = now
        self._counters.clear()
        if self.auto_resume and self._paused:
            logger.info("Circuit breaker window rolled over; resuming %d signal(s)", len(self._paused))
            self._paused.clear()
