"""
State Basis - Temporal Correlation & Causality Engine

Watches a stream of state-mutation pulses from an instrumented UI and infers
architectural problems: redundant state, causal leaks between signals, and
runaway update loops.
"""

__version__ = "0.1.0"

from .config import EngineConfig, load_config
from .engine import BasisEngine
from .graph.causal import DriverKind
from .insights.models import BasisReport, RankedIssue
from .signals.models import Role, SignalOptions, ViolationRecord, ViolationType
from .temporal.scheduler import AsyncioScheduler, ImmediateScheduler, ManualScheduler, Scheduler

__all__ = [
    "BasisEngine",
    "BasisReport",
    "DriverKind",
    "EngineConfig",
    "RankedIssue",
    "Role",
    "SignalOptions",
    "ViolationRecord",
    "ViolationType",
    "AsyncioScheduler",
    "ImmediateScheduler",
    "ManualScheduler",
    "Scheduler",
    "load_config",
]
