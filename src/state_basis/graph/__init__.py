"""Causal attribution graph."""

from .causal import EVENT_PREFIX, CausalGraph, DriverKind, event_label, is_event

__all__ = ["EVENT_PREFIX", "CausalGraph", "DriverKind", "event_label", "is_event"]
