"""Tests for state_basis.math.graph module."""

import pytest

from state_basis.math.graph import InfluenceRanker


class TestInfluenceRanker:
    """Tests for power-iteration influence ranking."""

    def test_empty_graph(self):
        """Empty graph returns empty results."""
        assert InfluenceRanker().rank({}) == {}

    def test_scores_sum_to_one(self):
        """Scores are normalized after every round."""
        adjacency = {
            "Event_Tick_1": {"a": 1, "b": 1},
            "fx": {"c": 3},
            "c": {"a": 1},
        }
        result = InfluenceRanker().rank(adjacency)
        assert set(result) == {"Event_Tick_1", "a", "b", "c", "fx"}
        assert sum(result.values()) == pytest.approx(1.0, abs=1e-9)

    def test_star_source_dominates(self):
        """A source fanning out to three sinks outranks each sink."""
        result = InfluenceRanker().rank({"hub": {"a": 1, "b": 1, "c": 1}})
        assert result["hub"] > result["a"]
        assert result["a"] == pytest.approx(result["b"])
        assert result["b"] == pytest.approx(result["c"])

    def test_chain_head_highest(self):
        """In a -> b -> c the head of the chain is the prime mover."""
        result = InfluenceRanker().rank({"a": {"b": 1}, "b": {"c": 1}})
        assert result["a"] > result["c"]
        assert result["b"] > result["c"]

    def test_two_cycle_splits_evenly(self):
        """A symmetric two-node cycle converges to an even split."""
        result = InfluenceRanker().rank({"a": {"b": 1}, "b": {"a": 1}})
        assert result["a"] == pytest.approx(0.5, abs=0.05)
        assert result["b"] == pytest.approx(0.5, abs=0.05)

    def test_edge_weight_matters(self):
        """A driver with heavier edges outranks an otherwise identical one."""
        result = InfluenceRanker().rank({"heavy": {"a": 5}, "light": {"b": 1}})
        assert result["heavy"] > result["light"]

    def test_self_loops_ignored(self):
        """A node cannot inflate its own score by re-triggering itself."""
        ranker = InfluenceRanker()
        with_loop = ranker.rank({"a": {"a": 100, "b": 1}})
        without_loop = ranker.rank({"a": {"b": 1}})
        assert with_loop["a"] == pytest.approx(without_loop["a"])
        assert with_loop["b"] == pytest.approx(without_loop["b"])

    def test_iteration_cap(self):
        """Iteration stops at max_iterations."""
        ranker = InfluenceRanker(max_iterations=3, tolerance=1e-12)
        ranker.rank({"a": {"b": 1}, "b": {"c": 1}, "c": {"a": 2}})
        assert ranker.iterations_run <= 3

    def test_converges_early_on_stable_graph(self):
        """A graph already at its fixed point stops after one round."""
        ranker = InfluenceRanker()
        ranker.rank({"a": {"b": 1}, "b": {"a": 1}})
        assert ranker.iterations_run == 1

    def test_zero_base_weight_does_not_divide_by_zero(self):
        """Without a base weight scores can collapse; iteration stops cleanly."""
        result = InfluenceRanker(base_weight=0.0).rank({"a": {"b": 1}})
        assert result == {"a": pytest.approx(1.0), "b": pytest.approx(0.0)}
