"""IssueAggregator: turns the causal graph into a short ranked report.

Ranking order:
    1. Global events: synthetic event nodes merged by the set of signals
       they touched. An event that keeps updating the same group of roots is
       one issue with an occurrence count, not N issues.
    2. Drivers: explicit driver nodes ranked by spectral influence.
       Side-effect drivers are always kept; other drivers need two targets
       or a non-trivial score.
    3. Density fallback: when the graph has nothing to say, the busiest
       local signals.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..config import EngineConfig
from ..graph.causal import CausalGraph, is_event
from ..math.graph import InfluenceRanker
from ..signals.models import Role, ViolationRecord, ViolationType
from ..signals.registry import SignalRegistry
from .models import IssueMetric, RankedIssue

# At most this many global events lead a report
MAX_EVENT_ISSUES = 2

# Drivers below this influence need at least two targets to be reported
MIN_DRIVER_SCORE = 0.05


@dataclass
class EventGroup:
    targets: list[str]
    count: int = 0


def _excluded_driver(role: Optional[Role]) -> bool:
    if role is None or role is Role.LOCAL or role is Role.STORE:
        return False
    if role is Role.CONTEXT or role is Role.PROJECTION:
        return True
    raise ValueError(f"Unhandled signal role: {role!r}")


class IssueAggregator:
    def __init__(self, config: Optional[EngineConfig] = None, ranker: Optional[InfluenceRanker] = None):
        self.config = config or EngineConfig()
        self.ranker = ranker or InfluenceRanker(
            max_iterations=self.config.ranker_max_iterations,
            tolerance=self.config.ranker_tolerance,
            base_weight=self.config.ranker_base_weight,
        )

    def aggregate(
        self,
        graph: CausalGraph,
        registry: SignalRegistry,
        redundant: set[str] | frozenset[str],
    ) -> list[RankedIssue]:
        adjacency = graph.adjacency()
        influence = self.ranker.rank(adjacency)
        limit = self.config.report_size

        events = self.group_events(adjacency, registry)
        drivers: list[tuple[str, dict[str, int]]] = []

        for source in sorted(adjacency):
            targets = adjacency[source]
            if not targets or is_event(source):
                continue
            if _excluded_driver(registry.role_of(source)):
                continue
            score = influence.get(source, 0.0)
            if not graph.is_effect_driver(source) and len(targets) < 2 and score < MIN_DRIVER_SCORE:
                continue
            drivers.append((source, targets))

        drivers.sort(key=lambda item: (-influence.get(item[0], 0.0), item[0]))

        results: list[RankedIssue] = []
        for group in events[: min(MAX_EVENT_ISSUES, limit)]:
            results.append(
                RankedIssue(
                    label=f"Global Event ({group.targets[0]})",
                    metric=IssueMetric.INFLUENCE,
                    score=1.0,
                    reason=(
                        f"Global sync event: an external trigger updates {len(group.targets)} "
                        f"signals in the same tick. Occurred {group.count} times."
                    ),
                    violations=_leaks(group.targets),
                    occurrences=group.count,
                )
            )

        for label, targets in drivers[: max(0, limit - len(results))]:
            if graph.is_effect_driver(label):
                reason = f"Side-effect driver: writes to {len(targets)} signal(s) from inside an effect."
            else:
                reason = f"Sync driver: prime mover for {len(targets)} downstream signal(s)."
            results.append(
                RankedIssue(
                    label=label,
                    metric=IssueMetric.INFLUENCE,
                    score=influence.get(label, 0.0),
                    reason=reason,
                    violations=_leaks(sorted(targets)),
                )
            )

        if not results:
            results = self.density_fallback(registry, redundant)

        return results

    def group_events(
        self,
        adjacency: dict[str, dict[str, int]],
        registry: SignalRegistry,
    ) -> list[EventGroup]:
        """Merge event nodes that touched the same set of non-anchor signals.

        Groups touching fewer than two qualifying signals are dropped as
        noise. Sorted by group size, then by occurrence count.
        """
        groups: dict[tuple[str, ...], EventGroup] = {}
        for source in sorted(adjacency):
            if not is_event(source):
                continue
            valid = sorted(
                target
                for target in adjacency[source]
                if target in registry and not registry.role_of(target).is_anchor
            )
            if len(valid) < 2:
                continue
            signature = tuple(valid)
            group = groups.get(signature)
            if group is None:
                group = groups[signature] = EventGroup(targets=valid)
            group.count += 1

        return sorted(
            groups.values(), key=lambda g: (-len(g.targets), -g.count, tuple(g.targets))
        )

    def density_fallback(
        self, registry: SignalRegistry, redundant: set[str] | frozenset[str]
    ) -> list[RankedIssue]:
        busy = [
            signal
            for signal in registry
            if signal.role is Role.LOCAL
            and signal.label not in redundant
            and signal.density > self.config.density_floor
        ]
        busy.sort(key=lambda s: (-s.density, s.label))
        return [
            RankedIssue(
                label=signal.label,
                metric=IssueMetric.DENSITY,
                score=float(signal.density),
                reason="High frequency: potential main-thread saturation.",
            )
            for signal in busy[: self.config.report_size]
        ]


def _leaks(targets: list[str]) -> list[ViolationRecord]:
    return [ViolationRecord(ViolationType.CAUSAL_LEAK, target) for target in targets]
