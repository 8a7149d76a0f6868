"""Data models for tracked signals and their classifications."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

import numpy as np


class Role(Enum):
    """Where a signal's value comes from.

    LOCAL       Component-owned state; the default, may be flagged redundant.
    CONTEXT     Shared provider value; an anchor (source of truth).
    PROJECTION  Derived value; never scanned for redundancy.
    STORE       External store slice; an anchor like CONTEXT.
    """

    LOCAL = "local"
    CONTEXT = "context"
    PROJECTION = "projection"
    STORE = "store"

    @property
    def is_anchor(self) -> bool:
        return self in (Role.CONTEXT, Role.STORE)


class ViolationType(Enum):
    CAUSAL_LEAK = "causal_leak"
    CONTEXT_MIRROR = "context_mirror"
    DUPLICATE_STATE = "duplicate_state"


@dataclass(frozen=True)
class ViolationRecord:
    """A finding attached to the label judged to be its cause."""

    type: ViolationType
    target: str
    similarity: Optional[float] = None

    @property
    def key(self) -> tuple[ViolationType, str]:
        return (self.type, self.target)

    def to_dict(self) -> dict:
        return {"type": self.type.value, "target": self.target, "similarity": self.similarity}


@dataclass(frozen=True)
class SignalOptions:
    suppress: bool = False


@dataclass
class SignalHistory:
    """Windowed pulse history of one signal.

    ``density`` tracks the popcount of ``buffer`` incrementally so reads are
    O(1); ``write`` is the only mutator.
    """

    label: str
    window_size: int
    role: Role = Role.LOCAL
    options: SignalOptions = field(default_factory=SignalOptions)
    buffer: np.ndarray = field(init=False, repr=False, compare=False)
    head: int = 0
    density: int = 0
    paused: bool = False

    def __post_init__(self) -> None:
        self.buffer = np.zeros(self.window_size, dtype=np.uint8)

    def write(self, pulsed: bool) -> None:
        bit = 1 if pulsed else 0
        self.density += bit - int(self.buffer[self.head])
        self.buffer[self.head] = bit
        self.head = (self.head + 1) % self.window_size

    def pulses(self) -> list[int]:
        """Pulse bits oldest to newest."""
        return np.roll(self.buffer, -self.head).tolist()

    def is_volatile(self, threshold: int) -> bool:
        return self.density > threshold
