"""CausalGraph: weighted record of what changed in response to what.

Edges are directed and counted: ``edges[source][target]`` is how often
``target`` changed while ``source`` was the attributed cause. A source is
either a driver the instrumentation scoped explicitly (an effect, a
callback) or a synthetic event node ``Event_Tick_<n>`` standing for "these
signals changed in tick n with no driver". Event nodes are what keep
simultaneous siblings from being chained to each other; they expire after a
TTL together with their edges.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from ..logging_config import get_logger

logger = get_logger(__name__)

EVENT_PREFIX = "Event_Tick_"


class DriverKind(Enum):
    """What kind of scope a driver label names.

    EFFECT    Side-effect hook writing state; always surfaced in reports.
    CALLBACK  Explicit handler or subscription; ranked by influence only.
    """

    EFFECT = "effect"
    CALLBACK = "callback"


def event_label(tick: int) -> str:
    return f"{EVENT_PREFIX}{tick}"


def is_event(label: str) -> bool:
    return label.startswith(EVENT_PREFIX)


class CausalGraph:
    def __init__(self, ttl_seconds: float = 10.0):
        self.ttl_seconds = ttl_seconds
        self._edges: dict[str, dict[str, int]] = {}
        self._event_born: dict[str, float] = {}
        self._effect_drivers: set[str] = set()

    def attribute(
        self,
        label: str,
        tick: int,
        now: float,
        driver: Optional[str] = None,
        driver_kind: DriverKind = DriverKind.EFFECT,
    ) -> str:
        """Record one change of ``label`` and return the source it was charged to."""
        if driver is not None and driver != label:
            if driver_kind is DriverKind.EFFECT:
                self._effect_drivers.add(driver)
            self.add_edge(driver, label)
            return driver

        source = event_label(tick)
        self._event_born.setdefault(source, now)
        self.add_edge(source, label)
        return source

    def add_edge(self, source: str, target: str, weight: int = 1) -> None:
        targets = self._edges.setdefault(source, {})
        targets[target] = targets.get(target, 0) + weight

    def prune(self, now: float) -> int:
        """Drop event nodes older than the TTL. Returns how many were dropped."""
        expired = [
            node for node, born in self._event_born.items() if now - born > self.ttl_seconds
        ]
        for node in expired:
            del self._event_born[node]
            self._edges.pop(node, None)
        if expired:
            logger.debug("Pruned %d expired event node(s)", len(expired))
        return len(expired)

    def remove_node(self, label: str) -> None:
        """Remove ``label`` as a source and as a target."""
        self._edges.pop(label, None)
        self._event_born.pop(label, None)
        self._effect_drivers.discard(label)
        for source in list(self._edges):
            targets = self._edges[source]
            targets.pop(label, None)
            if not targets:
                del self._edges[source]
                self._event_born.pop(source, None)

    def explained_by_event(self, label: str) -> bool:
        """Whether a live event node already accounts for changes of ``label``."""
        return any(label in self._edges.get(node, {}) for node in self._event_born)

    def is_effect_driver(self, label: str) -> bool:
        return label in self._effect_drivers

    def targets(self, source: str) -> dict[str, int]:
        return dict(self._edges.get(source, {}))

    def weight(self, source: str, target: str) -> int:
        return self._edges.get(source, {}).get(target, 0)

    def adjacency(self) -> dict[str, dict[str, int]]:
        """Deep copy of the edge map, safe to hand to readers."""
        return {source: dict(targets) for source, targets in self._edges.items()}

    @property
    def event_nodes(self) -> list[str]:
        return list(self._event_born)

    @property
    def nodes(self) -> set[str]:
        nodes = set(self._edges)
        for targets in self._edges.values():
            nodes.update(targets)
        return nodes

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self._edges.values())

    def __contains__(self, label: object) -> bool:
        return label in self.nodes

    def __len__(self) -> int:
        return len(self._edges)
