"""HeartbeatScheduler: batches pulses into ticks and queues analysis passes.

Pulses recorded between two frame boundaries belong to the same tick and
coalesce into one bit per signal. On commit every registered ring buffer
advances by exactly one slot, so all windows share a time axis.

Committed pulses mark their labels dirty. The dirty set is snapshotted and
cleared before an analysis pass is handed to the host's idle hook. Pulses
that land while a pass is queued or running accumulate into the next
snapshot; at most one pass is in flight.
"""

from __future__ import annotations

from typing import Callable, Optional

from ..logging_config import get_logger
from ..signals.registry import SignalRegistry
from .scheduler import Scheduler

logger = get_logger(__name__)

AnalysisCallback = Callable[[frozenset[str]], None]


class HeartbeatScheduler:
    def __init__(
        self,
        registry: SignalRegistry,
        scheduler: Scheduler,
        analyze: AnalysisCallback,
        on_commit: Optional[Callable[[int], None]] = None,
    ):
        self.registry = registry
        self.scheduler = scheduler
        self._analyze = analyze
        self._on_commit = on_commit

        self.tick = 0
        self._pending: set[str] = set()
        self._dirty: set[str] = set()
        self._tick_generation = 0
        self._tick_scheduled = False
        self._analysis_in_flight = False

    def record(self, label: str) -> None:
        """Mark ``label`` as pulsed in the current tick (idempotent per tick)."""
        self._pending.add(label)

        if not self._tick_scheduled:
            self._tick_scheduled = True
            self._tick_generation += 1
            generation = self._tick_generation
            self.scheduler.schedule_tick(lambda: self._commit(generation))

    def flush_tick(self) -> bool:
        """Commit the pending tick now instead of waiting for the host."""
        if not self._tick_scheduled:
            return False
        self._commit(self._tick_generation)
        return True

    def forget(self, label: str) -> None:
        self._pending.discard(label)
        self._dirty.discard(label)

    @property
    def tick_pending(self) -> bool:
        return self._tick_scheduled

    @property
    def analysis_in_flight(self) -> bool:
        return self._analysis_in_flight

    @property
    def dirty(self) -> frozenset[str]:
        return frozenset(self._dirty)

    def _commit(self, generation: int) -> None:
        # A flushed tick leaves its host callback behind; ignore it
        if not self._tick_scheduled or generation != self._tick_generation:
            return

        self._tick_scheduled = False
        self.tick += 1
        self.registry.advance(self._pending)
        # Only committed pulses are dirty, so a pass never sees half a tick
        self._dirty.update(self._pending)
        self._pending.clear()

        if self._on_commit is not None:
            self._on_commit(self.tick)

        self._schedule_analysis()

    def _schedule_analysis(self) -> None:
        if not self._dirty or self._analysis_in_flight:
            return

        snapshot = frozenset(self._dirty)
        self._dirty.clear()
        self._analysis_in_flight = True
        logger.debug("Tick %d: queued analysis of %d dirty signal(s)", self.tick, len(snapshot))
        self.scheduler.schedule_idle(lambda: self._run_analysis(snapshot))

    def _run_analysis(self, snapshot: frozenset[str]) -> None:
        try:
            self._analyze(snapshot)
        finally:
            self._analysis_in_flight = False
        # Ticks committed while the pass was in flight left dirty labels behind
        self._schedule_analysis()
