"""Tests for the runaway-loop circuit breaker."""

import logging

import pytest

from state_basis.temporal import CircuitBreaker


@pytest.fixture
def breaker(clock):
    return CircuitBreaker(threshold=150, window_seconds=1.0, clock=clock)


class TestTripping:
    """Test the threshold boundary."""

    def test_threshold_updates_allowed(self, breaker):
        assert all(breaker.allow("loop") for _ in range(150))
        assert breaker.is_paused("loop") is False
        assert breaker.count("loop") == 150

    def test_update_past_threshold_trips(self, breaker):
        for _ in range(150):
            breaker.allow("loop")
        assert breaker.allow("loop") is False
        assert breaker.is_paused("loop") is True
        assert breaker.paused == frozenset({"loop"})
        assert breaker.trips == 1

    def test_paused_label_stays_blocked(self, breaker, clock):
        """Without auto-resume a trip outlives the window."""
        for _ in range(151):
            breaker.allow("loop")
        clock.advance(5.0)
        assert breaker.allow("loop") is False
        assert breaker.trips == 1

    def test_labels_are_independent(self, breaker):
        for _ in range(151):
            breaker.allow("loop")
        assert breaker.allow("calm") is True

    def test_trip_is_logged(self, breaker, caplog):
        with caplog.at_level(logging.WARNING, logger="state_basis"):
            for _ in range(151):
                breaker.allow("loop")
        assert "Circuit breaker tripped for loop" in caplog.text


class TestWindow:
    def test_counters_reset_each_window(self, breaker, clock):
        for _ in range(150):
            breaker.allow("busy")
        clock.advance(1.0)
        assert all(breaker.allow("busy") for _ in range(150))
        assert breaker.is_paused("busy") is False

    def test_auto_resume_on_rollover(self, clock):
        breaker = CircuitBreaker(threshold=3, window_seconds=1.0, auto_resume=True, clock=clock)
        for _ in range(4):
            breaker.allow("loop")
        assert breaker.is_paused("loop") is True
        clock.advance(1.5)
        assert breaker.allow("loop") is True
        assert breaker.is_paused("loop") is False


class TestResume:
    def test_resume_unpauses(self, breaker):
        for _ in range(151):
            breaker.allow("loop")
        assert breaker.resume("loop") is True
        assert breaker.allow("loop") is True
        assert breaker.count("loop") == 1

    def test_resume_unknown_label(self, breaker):
        assert breaker.resume("never-tripped") is False

    def test_forget_clears_state(self, breaker):
        for _ in range(151):
            breaker.allow("loop")
        breaker.forget("loop")
        assert breaker.is_paused("loop") is False
        assert breaker.count("loop") == 0
