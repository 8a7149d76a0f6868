"""BasisEngine: the composition root of the temporal correlation engine.

One engine instance owns the registry, the causal graph, the circuit
breaker, the heartbeat and the analyzer. Instrumentation calls three
primitives on it:

    engine.register("Cart -> items", Role.LOCAL)
    with engine.driver("Cart -> useEffect#1"):
        engine.record("Cart -> total")
    engine.record("Cart -> items")

and reporters read ``generate_report()``. Every mutation runs inline in
O(1); only the correlation pass is deferred to the scheduler's idle hook.

Driver scopes:
    ``driver()`` is the preferred form and always closes its scope.
    ``begin_driver``/``end_driver`` are kept for shims that cannot use a
    ``with`` block. Scopes nest; ``end_driver`` closes the innermost one. A
    scope still open when a tick commits from the host's frame callback was
    never closed by its caller and is discarded with a warning, so a
    forgotten ``end_driver`` costs at most one frame of misattribution.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Callable, Mapping, Optional

from .analysis.correlation import CorrelationAnalyzer
from .config import EngineConfig
from .graph.causal import CausalGraph, DriverKind
from .insights.aggregator import IssueAggregator
from .insights.health import compute_health
from .insights.models import BasisReport, PerformanceMetrics
from .logging_config import AlertThrottle, get_logger
from .signals.models import Role, SignalHistory, SignalOptions, ViolationRecord
from .signals.registry import SignalRegistry
from .temporal.breaker import CircuitBreaker
from .temporal.heartbeat import HeartbeatScheduler
from .temporal.scheduler import ImmediateScheduler, Scheduler

logger = get_logger(__name__)


@dataclass(frozen=True)
class DriverScope:
    token: int
    label: str
    kind: DriverKind


class BasisEngine:
    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or EngineConfig()
        self.scheduler = scheduler or ImmediateScheduler()
        self._clock = clock

        self.registry = SignalRegistry(self.config.window_size)
        self.graph = CausalGraph(self.config.graph_ttl_seconds)
        self.breaker = CircuitBreaker(
            threshold=self.config.breaker_threshold,
            window_seconds=self.config.breaker_window_seconds,
            auto_resume=self.config.breaker_auto_resume,
            clock=clock,
        )
        self.throttle = AlertThrottle(self.config.alert_cooldown_seconds, clock)
        self.analyzer = CorrelationAnalyzer(self.config, self.throttle)
        self.aggregator = IssueAggregator(self.config)
        self.heartbeat = HeartbeatScheduler(
            self.registry, self.scheduler, self._run_analysis, on_commit=self._on_commit
        )

        self._metrics = PerformanceMetrics()
        self._scopes: list[DriverScope] = []
        self._scope_tokens = itertools.count(1)
        self._recording = False
        self._last_prune = clock()

    # ── Lifecycle ──────────────────────────────────────────────────

    def register(
        self,
        label: str,
        role: Role = Role.LOCAL,
        options: Optional[SignalOptions] = None,
    ) -> bool:
        """Start tracking ``label``. Idempotent; suppressed signals are ignored."""
        return self.registry.register(label, role, options)

    def unregister(self, label: str) -> bool:
        """Stop tracking ``label`` and evict everything recorded about it."""
        removed = self.registry.unregister(label)
        self.heartbeat.forget(label)
        self.breaker.forget(label)
        self.graph.remove_node(label)
        self.analyzer.forget(label)
        self.throttle.forget(label)
        return removed

    # ── Hot path ───────────────────────────────────────────────────

    def record(self, label: str) -> bool:
        """Record one pulse of ``label``.

        Returns:
            False if the circuit breaker blocks the update, True otherwise.
            Pulses for unregistered labels count toward the breaker and are
            otherwise ignored.
        """
        now = self._clock()
        self._maybe_prune(now)

        allowed = self.breaker.allow(label)
        signal = self.registry.get(label)
        if signal is not None:
            signal.paused = not allowed
        if not allowed or signal is None:
            return allowed

        scope = self._scopes[-1] if self._scopes else None
        self.graph.attribute(
            label,
            tick=self.heartbeat.tick,
            now=now,
            driver=scope.label if scope else None,
            driver_kind=scope.kind if scope else DriverKind.EFFECT,
        )

        self._recording = True
        try:
            self.heartbeat.record(label)
        finally:
            self._recording = False
        return True

    def begin_driver(self, label: str, kind: DriverKind = DriverKind.EFFECT) -> int:
        """Open a driver scope; pulses recorded inside are charged to ``label``.

        Returns:
            A token identifying the scope.
        """
        scope = DriverScope(next(self._scope_tokens), label, kind)
        self._scopes.append(scope)
        return scope.token

    def end_driver(self, token: Optional[int] = None) -> None:
        """Close the innermost scope, or the scope ``token`` and any opened inside it."""
        if not self._scopes:
            logger.debug("end_driver() called with no open driver scope")
            return
        if token is None:
            self._scopes.pop()
            return
        for index, scope in enumerate(self._scopes):
            if scope.token == token:
                del self._scopes[index:]
                return

    @contextmanager
    def driver(self, label: str, kind: DriverKind = DriverKind.EFFECT) -> Iterator[str]:
        """Scope pulses under ``label``; the scope is closed on every exit path."""
        token = self.begin_driver(label, kind)
        try:
            yield label
        finally:
            self.end_driver(token)

    @property
    def active_driver(self) -> Optional[str]:
        return self._scopes[-1].label if self._scopes else None

    def resume(self, label: str) -> bool:
        """Lift a circuit-breaker pause on ``label``."""
        resumed = self.breaker.resume(label)
        signal = self.registry.get(label)
        if signal is not None:
            signal.paused = False
        return resumed

    def flush(self) -> bool:
        """Commit the pending tick now (e.g. at shutdown)."""
        return self.heartbeat.flush_tick()

    def prune_graph(self) -> int:
        now = self._clock()
        self._last_prune = now
        return self.graph.prune(now)

    # ── Read-only state ────────────────────────────────────────────

    @property
    def tick(self) -> int:
        return self.heartbeat.tick

    @property
    def history(self) -> Mapping[str, SignalHistory]:
        return MappingProxyType({signal.label: signal for signal in self.registry})

    @property
    def redundant(self) -> frozenset[str]:
        return frozenset(self.analyzer.redundant)

    @property
    def violations(self) -> dict[str, list[ViolationRecord]]:
        return self.analyzer.violation_map()

    @property
    def paused(self) -> frozenset[str]:
        return self.breaker.paused

    def snapshot_metrics(self) -> PerformanceMetrics:
        return replace(self._metrics)

    def generate_report(self, threshold: float = 0.5) -> BasisReport:
        """Build the ranked report.

        Args:
            threshold: Similarity above which signals are clustered in the
                health summary.
        """
        self.prune_graph()
        redundant = self.redundant
        return BasisReport(
            issues=self.aggregator.aggregate(self.graph, self.registry, redundant),
            redundant=sorted(redundant),
            violations=self.violations,
            health=compute_health(self.registry, threshold),
            metrics=self.snapshot_metrics(),
            tick=self.tick,
        )

    # ── Internals ──────────────────────────────────────────────────

    def _maybe_prune(self, now: float) -> None:
        if now - self._last_prune >= self.config.prune_interval_seconds:
            self._last_prune = now
            self.graph.prune(now)

    def _on_commit(self, tick: int) -> None:
        # Commits nested in record() come from a synchronous scheduler and
        # happen inside the caller's scope
        if self._recording or not self._scopes:
            return
        logger.warning(
            "Driver scope %s was never closed; discarding %d open scope(s) at tick %d",
            self._scopes[-1].label,
            len(self._scopes),
            tick,
        )
        self._scopes.clear()

    def _run_analysis(self, dirty: frozenset[str]) -> None:
        started = time.perf_counter()
        try:
            result = self.analyzer.analyze(dirty, self.registry, self.graph)
        except Exception:
            # Never let a bad pass reach the instrumented app's control flow
            self._metrics.skipped_passes += 1
            logger.exception("Analysis pass over %d signal(s) failed; skipping", len(dirty))
            return

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._metrics.last_analysis_ms = elapsed_ms
        self._metrics.comparison_count = result.comparisons
        self._metrics.last_analysis_timestamp = self._clock()
        self._metrics.analysis_passes += 1
        logger.debug(
            "Analysis pass: %d dirty, %d comparisons, %d redundant, %d causal in %.2fms",
            len(dirty),
            result.comparisons,
            result.redundancies,
            result.causal_leaks,
            elapsed_ms,
        )
