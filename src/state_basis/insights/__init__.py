"""Reports: ranked issues, health and performance metrics."""

from .aggregator import EventGroup, IssueAggregator
from .health import compute_health
from .models import BasisReport, HealthSummary, IssueMetric, PerformanceMetrics, RankedIssue

__all__ = [
    "BasisReport",
    "EventGroup",
    "HealthSummary",
    "IssueAggregator",
    "IssueMetric",
    "PerformanceMetrics",
    "RankedIssue",
    "compute_health",
]
