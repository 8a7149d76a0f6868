"""Report models: ranked issues, health summary, performance metrics."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..signals.models import ViolationRecord


class IssueMetric(Enum):
    INFLUENCE = "influence"
    DENSITY = "density"


@dataclass
class RankedIssue:
    """One finding in a report. Derived on demand, never stored."""

    label: str
    metric: IssueMetric
    score: float
    reason: str
    violations: list[ViolationRecord] = field(default_factory=list)
    occurrences: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {
            "label": self.label,
            "metric": self.metric.value,
            "score": self.score,
            "reason": self.reason,
            "occurrences": self.occurrences,
            "violations": [v.to_dict() for v in self.violations],
        }


@dataclass
class PerformanceMetrics:
    last_analysis_ms: float = 0.0
    comparison_count: int = 0
    last_analysis_timestamp: float = 0.0
    analysis_passes: int = 0
    skipped_passes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "last_analysis_ms": self.last_analysis_ms,
            "comparison_count": self.comparison_count,
            "last_analysis_timestamp": self.last_analysis_timestamp,
            "analysis_passes": self.analysis_passes,
            "skipped_passes": self.skipped_passes,
        }


@dataclass
class HealthSummary:
    """How independent the tracked signals are.

    ``system_rank`` counts independent signals plus synchronized clusters;
    ``score`` is that rank as a percentage of all signals (100 = no two
    signals move together).
    """

    total: int = 0
    system_rank: int = 0
    score: float = 100.0
    clusters: list[list[str]] = field(default_factory=list)
    matrix: dict[str, dict[str, float]] = field(default_factory=dict)

    @property
    def independent(self) -> int:
        return self.system_rank - len(self.clusters)

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": self.total,
            "system_rank": self.system_rank,
            "score": self.score,
            "clusters": [list(c) for c in self.clusters],
            "matrix": {k: dict(v) for k, v in self.matrix.items()},
        }


@dataclass
class BasisReport:
    issues: list[RankedIssue]
    redundant: list[str]
    violations: dict[str, list[ViolationRecord]]
    health: HealthSummary
    metrics: PerformanceMetrics
    tick: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "tick": self.tick,
            "issues": [i.to_dict() for i in self.issues],
            "redundant": list(self.redundant),
            "violations": {
                label: [v.to_dict() for v in records]
                for label, records in sorted(self.violations.items())
            },
            "health": self.health.to_dict(),
            "metrics": self.metrics.to_dict(),
        }
