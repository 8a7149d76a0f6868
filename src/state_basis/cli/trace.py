"""Replay of recorded pulse traces.

A trace is a JSON-lines file, one operation per line:

    {"op": "register", "label": "Cart -> items", "role": "local"}
    {"op": "begin_driver", "label": "Cart -> useEffect#1", "kind": "effect"}
    {"op": "record", "label": "Cart -> total"}
    {"op": "end_driver"}
    {"op": "tick"}
    {"op": "advance", "seconds": 2.5}
    {"op": "unregister", "label": "Cart -> items"}

``tick`` closes the current frame; ``advance`` moves the replay clock
without committing anything. Blank lines and lines starting with ``#`` are
skipped.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from ..engine import BasisEngine
from ..exceptions import TraceError
from ..graph.causal import DriverKind
from ..signals.models import Role, SignalOptions
from ..temporal.scheduler import ManualScheduler

KNOWN_OPS = {"register", "unregister", "record", "begin_driver", "end_driver", "tick", "advance"}
LABELLED_OPS = {"register", "unregister", "record", "begin_driver"}


@dataclass
class TraceOp:
    op: str
    label: Optional[str] = None
    args: dict[str, Any] = field(default_factory=dict)
    line: int = 0


@dataclass
class ReplayStats:
    operations: int = 0
    pulses: int = 0
    blocked: int = 0
    ticks: int = 0


class ReplayClock:
    """Manually advanced clock handed to the engine during replay."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


def parse_trace(path: Path) -> list[TraceOp]:
    """Parse a trace file into operations.

    Raises:
        TraceError: On unreadable files, invalid JSON, unknown ops or missing labels
    """
    try:
        with open(path, encoding="utf-8") as f:
            lines = f.readlines()
    except UnicodeDecodeError as e:
        raise TraceError(f"not valid UTF-8 ({e.reason})", path=path)
    except OSError as e:
        raise TraceError(f"cannot read file ({e.strerror or e})", path=path)

    ops: list[TraceOp] = []
    for number, raw in enumerate(lines, start=1):
        text = raw.strip()
        if not text or text.startswith("#"):
            continue
        try:
            entry = json.loads(text)
        except json.JSONDecodeError as e:
            raise TraceError(f"invalid JSON ({e.msg})", number, path)
        if not isinstance(entry, dict):
            raise TraceError("each line must be a JSON object", number, path)

        op = entry.pop("op", None)
        if op not in KNOWN_OPS:
            raise TraceError(f"unknown op {op!r}", number, path)
        label = entry.pop("label", None)
        if op in LABELLED_OPS and not isinstance(label, str):
            raise TraceError(f"'{op}' needs a string label", number, path)
        ops.append(TraceOp(op=op, label=label, args=entry, line=number))
    return ops


def _enum_arg(op: TraceOp, key: str, enum_type, default):
    value = op.args.get(key)
    if value is None:
        return default
    try:
        return enum_type(value)
    except ValueError:
        raise TraceError(f"invalid {key} {value!r}", op.line)


def replay(
    ops: list[TraceOp],
    engine: BasisEngine,
    scheduler: ManualScheduler,
    clock: ReplayClock,
) -> ReplayStats:
    """Drive ``engine`` through ``ops``; each ``tick`` advances the clock one frame."""
    stats = ReplayStats()
    frame = engine.config.frame_interval_seconds

    for op in ops:
        stats.operations += 1
        if op.op == "register":
            role = _enum_arg(op, "role", Role, Role.LOCAL)
            engine.register(op.label, role, SignalOptions(suppress=bool(op.args.get("suppress"))))
        elif op.op == "unregister":
            engine.unregister(op.label)
        elif op.op == "record":
            stats.pulses += 1
            if not engine.record(op.label):
                stats.blocked += 1
        elif op.op == "begin_driver":
            engine.begin_driver(op.label, _enum_arg(op, "kind", DriverKind, DriverKind.EFFECT))
        elif op.op == "end_driver":
            engine.end_driver()
        elif op.op == "tick":
            clock.advance(frame)
            scheduler.run_pending()
            stats.ticks += 1
        elif op.op == "advance":
            try:
                clock.advance(float(op.args.get("seconds", 0.0)))
            except (TypeError, ValueError):
                raise TraceError("'advance' needs numeric seconds", op.line)

    # Close a trailing frame so its pulses are analyzed
    scheduler.run_pending()
    return stats
