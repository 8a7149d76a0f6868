"""Graph theory: spectral influence ("prime mover") ranking."""

import math
from typing import Dict, Mapping


class InfluenceRanker:
    """Power iteration that ranks nodes by how far their changes propagate.

    A node is influential if it drives targets that are themselves
    influential. Each round:

        score'(s) = Σ w(s→t) · score(t) + base     for t ≠ s

    then scores are renormalized to sum to 1. The base weight keeps true
    sinks from decaying to zero, and self-loops are ignored so a signal that
    re-triggers itself cannot inflate its own score.
    """

    def __init__(
        self,
        max_iterations: int = 20,
        tolerance: float = 0.001,
        base_weight: float = 0.01,
    ):
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.base_weight = base_weight
        self.iterations_run = 0

    def rank(self, adjacency: Mapping[str, Mapping[str, float]]) -> Dict[str, float]:
        """
        Compute influence scores.

        Args:
            adjacency: source -> {target: weight}

        Returns:
            Dictionary mapping every node (sources and targets) to a score;
            scores sum to 1. Empty for an empty graph.
        """
        nodes = set(adjacency.keys())
        for targets in adjacency.values():
            nodes.update(targets.keys())

        self.iterations_run = 0
        if not nodes:
            return {}

        # Sorted for reproducible float summation order
        ordered = sorted(nodes)
        n = len(ordered)
        scores = dict.fromkeys(ordered, 1.0 / n)

        for _ in range(self.max_iterations):
            self.iterations_run += 1
            raw: Dict[str, float] = {}
            for source in ordered:
                influence = 0.0
                for target, weight in adjacency.get(source, {}).items():
                    if target != source:
                        influence += weight * scores[target]
                raw[source] = influence + self.base_weight

            total = sum(raw.values())
            if total <= 0:
                # Only possible with a zero base weight and no edges
                break

            delta = 0.0
            next_scores: Dict[str, float] = {}
            for node in ordered:
                normalized = raw[node] / total
                diff = normalized - scores[node]
                delta += diff * diff
                next_scores[node] = normalized

            scores = next_scores
            if math.sqrt(delta / n) < self.tolerance:
                break

        return scores
