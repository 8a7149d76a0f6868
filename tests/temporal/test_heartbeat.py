"""Tests for HeartbeatScheduler tick batching and pass serialization."""

import pytest

from state_basis.signals import SignalRegistry
from state_basis.temporal import HeartbeatScheduler, ImmediateScheduler


@pytest.fixture
def passes():
    return []


@pytest.fixture
def heartbeat(registry, scheduler, passes):
    for label in ("a", "b", "c"):
        registry.register(label)
    return HeartbeatScheduler(registry, scheduler, passes.append)


class TestTickBatching:
    """Test that pulses within a frame coalesce into one tick."""

    def test_repeated_record_is_one_pulse(self, heartbeat, registry, scheduler):
        for _ in range(3):
            heartbeat.record("a")
        assert scheduler.pending == 1
        scheduler.run_ticks()
        assert heartbeat.tick == 1
        assert registry.get("a").density == 1

    def test_unpulsed_signals_advance(self, heartbeat, registry, scheduler):
        heartbeat.record("a")
        scheduler.run_ticks()
        assert registry.get("b").head == 1
        assert registry.get("b").density == 0

    def test_nothing_written_before_commit(self, heartbeat, registry):
        heartbeat.record("a")
        assert heartbeat.tick_pending is True
        assert registry.get("a").density == 0
        assert heartbeat.dirty == frozenset()

    def test_on_commit_hook(self, registry, scheduler):
        registry.register("a")
        ticks = []
        heartbeat = HeartbeatScheduler(registry, scheduler, lambda dirty: None, on_commit=ticks.append)
        for _ in range(2):
            heartbeat.record("a")
            scheduler.run_pending()
        assert ticks == [1, 2]


class TestFlush:
    def test_flush_commits_immediately(self, heartbeat, registry):
        heartbeat.record("a")
        assert heartbeat.flush_tick() is True
        assert heartbeat.tick == 1
        assert registry.get("a").density == 1

    def test_flush_without_pending_tick(self, heartbeat):
        assert heartbeat.flush_tick() is False
        assert heartbeat.tick == 0

    def test_stale_host_callback_is_ignored(self, heartbeat, registry, scheduler):
        """The host callback left behind by a flush does not commit twice."""
        heartbeat.record("a")
        heartbeat.flush_tick()
        heartbeat.record("b")
        scheduler.run_ticks()
        assert heartbeat.tick == 2
        assert registry.get("a").density == 1
        assert registry.get("b").density == 1


class TestAnalysisScheduling:
    """Test the dirty snapshot handed to the analysis callback."""

    def test_pass_receives_snapshot(self, heartbeat, scheduler, passes):
        heartbeat.record("a")
        heartbeat.record("b")
        scheduler.run_ticks()
        assert heartbeat.analysis_in_flight is True
        assert heartbeat.dirty == frozenset()

        scheduler.run_idle()
        assert passes == [frozenset({"a", "b"})]
        assert heartbeat.analysis_in_flight is False

    def test_no_pass_for_empty_tick(self, registry, scheduler, passes):
        heartbeat = HeartbeatScheduler(registry, scheduler, passes.append)
        heartbeat.flush_tick()
        scheduler.run_pending()
        assert passes == []

    def test_pulses_during_pass_are_not_lost(self, heartbeat, scheduler, passes):
        """Ticks committed while a pass is in flight feed exactly one follow-up pass."""
        heartbeat.record("a")
        scheduler.run_ticks()

        heartbeat.record("b")
        scheduler.run_ticks()
        heartbeat.record("c")
        scheduler.run_ticks()
        assert heartbeat.dirty == frozenset({"b", "c"})

        scheduler.run_idle()
        assert passes == [frozenset({"a"})]
        scheduler.run_idle()
        assert passes == [frozenset({"a"}), frozenset({"b", "c"})]
        assert scheduler.pending == 0

    def test_failed_pass_releases_in_flight_flag(self, registry, scheduler):
        registry.register("a")

        def explode(dirty):
            raise RuntimeError("boom")

        heartbeat = HeartbeatScheduler(registry, scheduler, explode)
        heartbeat.record("a")
        scheduler.run_ticks()
        with pytest.raises(RuntimeError):
            scheduler.run_idle()
        assert heartbeat.analysis_in_flight is False

    def test_forget_drops_pending_and_dirty(self, heartbeat, scheduler):
        heartbeat.record("a")
        heartbeat.forget("a")
        scheduler.run_ticks()
        assert heartbeat.dirty == frozenset()
        assert heartbeat.analysis_in_flight is False


class TestImmediateHost:
    def test_every_record_commits(self):
        registry = SignalRegistry(window_size=10)
        registry.register("a")
        passes = []
        heartbeat = HeartbeatScheduler(registry, ImmediateScheduler(), passes.append)
        heartbeat.record("a")
        heartbeat.record("a")
        assert heartbeat.tick == 2
        assert registry.get("a").density == 2
        assert passes == [frozenset({"a"}), frozenset({"a"})]
