"""Temporal machinery: host schedulers, tick batching and the circuit breaker."""

from .breaker import CircuitBreaker
from .heartbeat import HeartbeatScheduler
from .scheduler import AsyncioScheduler, ImmediateScheduler, ManualScheduler, Scheduler

__all__ = [
    "AsyncioScheduler",
    "CircuitBreaker",
    "HeartbeatScheduler",
    "ImmediateScheduler",
    "ManualScheduler",
    "Scheduler",
]
