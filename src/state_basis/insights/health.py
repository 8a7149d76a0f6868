"""Architectural health: how many independent signals the app really has."""

from __future__ import annotations

from ..math.similarity import circular_similarity
from ..signals.registry import SignalRegistry
from .models import HealthSummary

# Full pairwise matrices are only worth rendering for small apps
MATRIX_SIGNAL_LIMIT = 15


def compute_health(registry: SignalRegistry, threshold: float = 0.5) -> HealthSummary:
    """Greedy clustering of signals whose same-tick similarity exceeds ``threshold``.

    Each unclustered signal seeds a cluster and pulls in every other
    unclustered signal it correlates with. Singletons count as independent.
    """
    signals = sorted(registry, key=lambda s: s.label)
    total = len(signals)
    if total == 0:
        return HealthSummary()

    def sim(a, b) -> float:
        return circular_similarity(a.buffer, a.head, b.buffer, b.head, 0)

    clusters: list[list[str]] = []
    processed: set[str] = set()
    independent = 0

    for seed in signals:
        if seed.label in processed:
            continue
        processed.add(seed.label)
        cluster = [seed.label]
        for other in signals:
            if other.label in processed:
                continue
            if sim(seed, other) > threshold:
                cluster.append(other.label)
                processed.add(other.label)
        if len(cluster) > 1:
            clusters.append(cluster)
        else:
            independent += 1

    system_rank = independent + len(clusters)
    summary = HealthSummary(
        total=total,
        system_rank=system_rank,
        score=system_rank / total * 100,
        clusters=clusters,
    )

    if total < MATRIX_SIGNAL_LIMIT:
        summary.matrix = {
            a.label: {b.label: round(sim(a, b), 4) for b in signals} for a in signals
        }
    return summary
