"""SignalRegistry: ownership and lifecycle of per-signal ring buffers."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import Optional

from ..logging_config import get_logger
from .models import Role, SignalHistory, SignalOptions

logger = get_logger(__name__)


class SignalRegistry:
    """All registered signals, keyed by label.

    Buffers are private to the registry; callers get ``SignalHistory``
    objects to read and must not write them.
    """

    def __init__(self, window_size: int = 50):
        self.window_size = window_size
        self._signals: dict[str, SignalHistory] = {}

    def register(
        self,
        label: str,
        role: Role = Role.LOCAL,
        options: Optional[SignalOptions] = None,
    ) -> bool:
        """Allocate a zeroed window for ``label``.

        Returns:
            True if a new signal was created; False for duplicates and for
            suppressed signals.
        """
        options = options or SignalOptions()
        if options.suppress or label in self._signals:
            return False

        self._signals[label] = SignalHistory(
            label=label, window_size=self.window_size, role=role, options=options
        )
        logger.debug("Registered %s (%s)", label, role.value)
        return True

    def unregister(self, label: str) -> bool:
        removed = self._signals.pop(label, None)
        if removed is not None:
            logger.debug("Unregistered %s", label)
        return removed is not None

    def advance(self, pulsed: Iterable[str]) -> None:
        """Write one tick: 1 for labels in ``pulsed``, 0 for everyone else."""
        pulsed = set(pulsed)
        for label, signal in self._signals.items():
            signal.write(label in pulsed)

    def qualifying(self, min_density: int) -> list[SignalHistory]:
        """Signals dense enough to compare, in label order."""
        return [
            self._signals[label]
            for label in sorted(self._signals)
            if self._signals[label].density >= min_density
            and not self._signals[label].options.suppress
        ]

    def get(self, label: str) -> Optional[SignalHistory]:
        return self._signals.get(label)

    def role_of(self, label: str) -> Optional[Role]:
        signal = self._signals.get(label)
        return signal.role if signal is not None else None

    def labels(self) -> list[str]:
        return list(self._signals)

    def __contains__(self, label: object) -> bool:
        return label in self._signals

    def __iter__(self) -> Iterator[SignalHistory]:
        return iter(self._signals.values())

    def __len__(self) -> int:
        return len(self._signals)
