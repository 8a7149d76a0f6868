"""Tests for the architectural health summary."""

import pytest

from state_basis.insights import compute_health
from state_basis.insights.health import MATRIX_SIGNAL_LIMIT


class TestComputeHealth:
    def test_empty_registry(self, registry):
        summary = compute_health(registry)
        assert summary.total == 0
        assert summary.score == 100.0
        assert summary.clusters == []

    def test_synchronized_pair_forms_cluster(self, registry, feed):
        for label in ("a", "b", "c"):
            registry.register(label)
        feed(registry, [{"a", "b"}, {"c"}, {"a", "b"}, {"c"}])

        summary = compute_health(registry)

        assert summary.clusters == [["a", "b"]]
        assert summary.system_rank == 2
        assert summary.independent == 1
        assert summary.score == pytest.approx(200 / 3)
        assert summary.matrix["a"]["b"] == 1.0
        assert summary.matrix["a"]["c"] == 0.0

    def test_independent_signals(self, registry, feed):
        for label in ("a", "b"):
            registry.register(label)
        feed(registry, [{"a"}, {"b"}])

        summary = compute_health(registry)

        assert summary.clusters == []
        assert summary.score == 100.0

    def test_threshold_controls_clustering(self, registry, feed):
        registry.register("a")
        registry.register("b")
        feed(registry, [{"a", "b"}, {"a"}, {"b"}])
        # Similarity is exactly 0.5
        assert compute_health(registry, threshold=0.5).clusters == []
        assert compute_health(registry, threshold=0.4).clusters == [["a", "b"]]

    def test_matrix_omitted_for_large_apps(self, registry, feed):
        labels = [f"s{i:02d}" for i in range(MATRIX_SIGNAL_LIMIT)]
        for label in labels:
            registry.register(label)
        feed(registry, [set(labels)])

        summary = compute_health(registry)

        assert summary.matrix == {}
        assert summary.clusters == [labels]
        assert summary.to_dict()["total"] == MATRIX_SIGNAL_LIMIT
