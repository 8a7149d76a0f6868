"""Tests for SignalRegistry and SignalHistory."""

import numpy as np
import pytest

from state_basis.signals import Role, SignalOptions, SignalRegistry


class TestRegistration:
    """Test register / unregister lifecycle."""

    def test_register_allocates_zeroed_window(self, registry):
        assert registry.register("a") is True
        signal = registry.get("a")
        assert signal.buffer.shape == (50,)
        assert signal.buffer.sum() == 0
        assert signal.head == 0
        assert signal.density == 0
        assert signal.role is Role.LOCAL

    def test_register_is_idempotent(self, registry, feed):
        """A second registration keeps the existing history and role."""
        registry.register("a", Role.CONTEXT)
        feed(registry, [{"a"}, {"a"}])
        assert registry.register("a", Role.LOCAL) is False
        assert registry.get("a").density == 2
        assert registry.role_of("a") is Role.CONTEXT

    def test_suppressed_signal_is_not_tracked(self, registry):
        assert registry.register("noisy", options=SignalOptions(suppress=True)) is False
        assert "noisy" not in registry
        assert len(registry) == 0

    def test_unregister(self, registry):
        registry.register("a")
        assert registry.unregister("a") is True
        assert registry.unregister("a") is False
        assert registry.get("a") is None
        assert registry.role_of("a") is None


class TestAdvance:
    """Test tick writes."""

    def test_every_signal_advances(self, registry):
        """Pulsed labels get a 1, everyone else a 0; all heads move."""
        registry.register("a")
        registry.register("b")
        registry.advance({"a"})
        assert registry.get("a").density == 1
        assert registry.get("b").density == 0
        assert registry.get("a").head == 1
        assert registry.get("b").head == 1

    def test_unknown_labels_ignored(self, registry):
        registry.register("a")
        registry.advance({"ghost"})
        assert "ghost" not in registry
        assert registry.get("a").head == 1

    def test_pulses_oldest_to_newest(self):
        registry = SignalRegistry(window_size=4)
        registry.register("a")
        for pulsed in ({"a"}, set(), {"a"}):
            registry.advance(pulsed)
        assert registry.get("a").pulses() == [0, 1, 0, 1]

    def test_density_matches_popcount_across_wraparound(self):
        """Incremental density equals the buffer popcount on every tick."""
        registry = SignalRegistry(window_size=5)
        registry.register("a")
        rng = np.random.default_rng(3)
        for _ in range(23):
            registry.advance({"a"} if rng.random() < 0.6 else set())
            signal = registry.get("a")
            assert signal.density == int(signal.buffer.sum())
            assert 0 <= signal.density <= 5
            assert 0 <= signal.head < 5

    def test_full_window_saturates(self):
        registry = SignalRegistry(window_size=3)
        registry.register("a")
        for _ in range(10):
            registry.advance({"a"})
        assert registry.get("a").density == 3


class TestQueries:
    """Test read-side helpers."""

    def test_qualifying_filters_and_sorts(self, registry, feed):
        for label in ("c", "a", "b"):
            registry.register(label)
        feed(registry, [{"a", "c"}, {"a", "c"}, {"b"}])
        labels = [signal.label for signal in registry.qualifying(2)]
        assert labels == ["a", "c"]

    def test_iteration_and_labels(self, registry):
        registry.register("a")
        registry.register("b", Role.STORE)
        assert sorted(registry.labels()) == ["a", "b"]
        assert {signal.label for signal in registry} == {"a", "b"}

    @pytest.mark.parametrize(
        "role,anchor",
        [
            (Role.LOCAL, False),
            (Role.CONTEXT, True),
            (Role.PROJECTION, False),
            (Role.STORE, True),
        ],
    )
    def test_anchor_roles(self, role, anchor):
        assert role.is_anchor is anchor

    def test_volatility(self, registry, feed):
        registry.register("a")
        feed(registry, [{"a"}] * 3)
        signal = registry.get("a")
        assert signal.is_volatile(2) is True
        assert signal.is_volatile(3) is False
