"""Signals: models, roles and the ring-buffer registry."""

from .models import Role, SignalHistory, SignalOptions, ViolationRecord, ViolationType
from .registry import SignalRegistry

__all__ = [
    "Role",
    "SignalHistory",
    "SignalOptions",
    "SignalRegistry",
    "ViolationRecord",
    "ViolationType",
]
