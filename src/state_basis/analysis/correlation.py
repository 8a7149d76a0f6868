"""CorrelationAnalyzer: redundancy vs causal-leak classification.

Each pass compares the signals that pulsed since the previous pass (the
dirty snapshot) against every signal dense enough to compare. For a pair
(A, B) three phase similarities are computed:

    sync  offset  0   A and B change in the same tick
    lead  offset +1   A changes, B follows one tick later
    lag   offset -1   B changes, A follows one tick later

A pair whose best similarity clears the threshold is redundant when sync
wins and a causal leak when one of the shifted phases wins by at least the
causal margin. Dirty labels are reclassified from scratch on every pass;
labels that did not pulse keep whatever they were classified as before.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional

from ..config import EngineConfig
from ..graph.causal import CausalGraph
from ..logging_config import AlertThrottle, get_logger
from ..math.similarity import phase_similarities
from ..signals.models import Role, SignalHistory, ViolationRecord, ViolationType
from ..signals.registry import SignalRegistry

logger = get_logger(__name__)

_LOCAL = "local"
_ANCHOR = "anchor"


def _redundancy_class(role: Role) -> Optional[str]:
    """Collapse a role to its side in redundancy attribution (None = not scanned)."""
    if role is Role.LOCAL:
        return _LOCAL
    if role is Role.CONTEXT or role is Role.STORE:
        return _ANCHOR
    if role is Role.PROJECTION:
        return None
    raise ValueError(f"Unhandled signal role: {role!r}")


@dataclass
class PairSimilarity:
    sync: float
    lead: float
    lag: float

    @property
    def max(self) -> float:
        return max(self.sync, self.lead, self.lag)


@dataclass
class PassResult:
    """Outcome of one analysis pass."""

    comparisons: int = 0
    redundancies: int = 0
    causal_leaks: int = 0


class CorrelationAnalyzer:
    """Owns the redundancy set and the violation map it keeps up to date."""

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        throttle: Optional[AlertThrottle] = None,
    ):
        self.config = config or EngineConfig()
        self.throttle = throttle or AlertThrottle(self.config.alert_cooldown_seconds)
        self.redundant: set[str] = set()
        # cause label -> {(type, target): record}
        self._violations: dict[str, dict[tuple[ViolationType, str], ViolationRecord]] = {}

    # ── Pass ───────────────────────────────────────────────────────

    def analyze(
        self,
        dirty: Iterable[str],
        registry: SignalRegistry,
        graph: CausalGraph,
    ) -> PassResult:
        """Classify every dirty signal against all qualifying signals."""
        dirty = frozenset(dirty)
        self._reset_dirty(dirty)

        result = PassResult()
        candidates = registry.qualifying(self.config.min_density)

        for entry_a in candidates:
            if entry_a.label not in dirty:
                continue
            for entry_b in candidates:
                if entry_a.label == entry_b.label:
                    continue
                # Both dirty: the pair is handled once, from its smaller label
                if entry_b.label in dirty and entry_a.label > entry_b.label:
                    continue

                result.comparisons += 1
                similarity = PairSimilarity(
                    *phase_similarities(entry_a.buffer, entry_a.head, entry_b.buffer, entry_b.head)
                )
                if similarity.max <= self.config.similarity_threshold:
                    continue

                if similarity.sync == similarity.max:
                    if self._detect_redundancy(entry_a, entry_b, similarity.max):
                        result.redundancies += 1
                elif similarity.max - similarity.sync >= self.config.causal_margin:
                    if self._detect_causal_leak(entry_a, entry_b, similarity, graph):
                        result.causal_leaks += 1

        return result

    def _reset_dirty(self, dirty: frozenset[str]) -> None:
        self.redundant.difference_update(dirty)
        for label in list(self._violations):
            if label in dirty:
                del self._violations[label]
                continue
            records = self._violations[label]
            for key in [k for k in records if k[1] in dirty]:
                del records[key]
            if not records:
                del self._violations[label]

    def _detect_redundancy(self, entry_a: SignalHistory, entry_b: SignalHistory, sim: float) -> bool:
        side_a = _redundancy_class(entry_a.role)
        side_b = _redundancy_class(entry_b.role)
        if side_a is None or side_b is None:
            return False

        # Two anchors may legitimately move together
        if side_a == _ANCHOR and side_b == _ANCHOR:
            return False

        if side_a == _LOCAL and side_b == _ANCHOR:
            self.redundant.add(entry_a.label)
            self._add(entry_a.label, ViolationRecord(ViolationType.CONTEXT_MIRROR, entry_b.label, sim))
            self._alert_redundancy(entry_a.label, entry_b.label, sim)
        elif side_a == _ANCHOR and side_b == _LOCAL:
            self.redundant.add(entry_b.label)
            self._add(entry_b.label, ViolationRecord(ViolationType.CONTEXT_MIRROR, entry_a.label, sim))
            self._alert_redundancy(entry_b.label, entry_a.label, sim)
        else:
            low, high = sorted((entry_a.label, entry_b.label))
            self.redundant.add(low)
            self.redundant.add(high)
            self._add(low, ViolationRecord(ViolationType.DUPLICATE_STATE, high, sim))
            self._alert_redundancy(low, high, sim)
        return True

    def _detect_causal_leak(
        self,
        entry_a: SignalHistory,
        entry_b: SignalHistory,
        similarity: PairSimilarity,
        graph: CausalGraph,
    ) -> bool:
        # Animation-like streams correlate with everything at some phase
        threshold = self.config.volatility_threshold
        if entry_a.is_volatile(threshold) or entry_b.is_volatile(threshold):
            return False

        if similarity.lead == similarity.max:
            cause, effect = entry_a.label, entry_b.label
        else:
            cause, effect = entry_b.label, entry_a.label

        if graph.explained_by_event(effect):
            return False

        self._add(cause, ViolationRecord(ViolationType.CAUSAL_LEAK, effect, similarity.max))
        if self.throttle.should_emit(("causal", cause, effect)):
            logger.warning(
                "Causal leak: %s changes one tick after %s (similarity %.0f%%); "
                "this costs an extra render cycle",
                effect,
                cause,
                similarity.max * 100,
            )
        return True

    def _alert_redundancy(self, redundant: str, other: str, sim: float) -> None:
        if self.throttle.should_emit(("redundant", redundant, other)):
            logger.warning(
                "Redundant state: %s moves together with %s (similarity %.0f%%)",
                redundant,
                other,
                sim * 100,
            )

    def _add(self, cause: str, record: ViolationRecord) -> None:
        self._violations.setdefault(cause, {})[record.key] = record

    # ── Bookkeeping ────────────────────────────────────────────────

    def forget(self, label: str) -> None:
        """Evict every classification naming ``label``."""
        self._reset_dirty(frozenset((label,)))

    def violation_map(self) -> dict[str, list[ViolationRecord]]:
        return {label: list(records.values()) for label, records in self._violations.items()}

    def violations_for(self, label: str) -> list[ViolationRecord]:
        return list(self._violations.get(label, {}).values())
