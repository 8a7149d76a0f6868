"""Shared test fixtures for state-basis tests."""

import pytest

from state_basis import BasisEngine, EngineConfig, ManualScheduler
from state_basis.graph import CausalGraph
from state_basis.signals import SignalRegistry


def pytest_addoption(parser):
    """Add --run-slow option for slow tests."""
    parser.addoption(
        "--run-slow",
        action="store_true",
        default=False,
        help="run slow tests",
    )


def pytest_configure(config):
    """Configure slow marker."""
    config.addinivalue_line("markers", "slow: mark test as slow to run")


def pytest_collection_modifyitems(config, items):
    """Skip slow tests unless --run-slow is given."""
    if config.getoption("--run-slow"):
        return
    skip_slow = pytest.mark.skip(reason="need --run-slow option to run")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


class FakeClock:
    """Monotonic clock the test advances by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def registry():
    """Registry with the default 50-tick window."""
    return SignalRegistry(window_size=50)


@pytest.fixture
def graph():
    return CausalGraph(ttl_seconds=10.0)


@pytest.fixture
def make_engine(scheduler, clock):
    """Factory for engines on the manual scheduler and fake clock."""

    def _make(**overrides):
        return BasisEngine(EngineConfig(**overrides), scheduler=scheduler, clock=clock)

    return _make


@pytest.fixture
def engine(make_engine):
    return make_engine()


@pytest.fixture
def frame(engine, scheduler):
    """Record the given labels in one frame, then let the host run."""

    def _frame(*labels):
        for label in labels:
            engine.record(label)
        scheduler.run_pending()

    return _frame


@pytest.fixture
def feed():
    """Write ticks straight into a registry, one set of pulsed labels per tick."""

    def _feed(registry, frames):
        for pulsed in frames:
            registry.advance(pulsed)

    return _feed
