"""
Logging configuration for state-basis.

Provides structured logging with rich formatting for terminal output, and a
cooldown throttle so a pattern that keeps matching on every analysis pass
does not flood the log.
"""

import logging
import time
from typing import Callable, Dict, Optional, Tuple

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "state_basis"

# Keys older than this are evicted once the throttle tracks too many
_THROTTLE_RETENTION_SECONDS = 3600.0
_THROTTLE_MAX_KEYS = 100


def setup_logging(
    verbose: bool = False, quiet: bool = False, log_file: Optional[str] = None
) -> logging.Logger:
    """
    Configure logging with rich handler for colored output.

    Args:
        verbose: Enable DEBUG level logging
        quiet: Suppress all but ERROR level logging
        log_file: Optional file path to write logs to

    Returns:
        Configured logger instance for state_basis
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    console = Console(stderr=True)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console,
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=True,
            show_path=verbose,
        )
    ]

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )
        handlers.append(file_handler)

    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger instance for a specific module.

    Args:
        name: Module name (e.g., 'state_basis.engine')
              If None, returns the root state_basis logger

    Returns:
        Logger instance
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)

    if not name.startswith(ROOT_LOGGER):
        name = f"{ROOT_LOGGER}.{name}"

    return logging.getLogger(name)


class AlertThrottle:
    """Per-key cooldown for repeated alerts.

    Keys are tuples such as ``("redundant", "a", "b")``. ``should_emit`` is
    True at most once per ``cooldown`` seconds for the same key.
    """

    def __init__(self, cooldown: float = 5.0, clock: Callable[[], float] = time.monotonic):
        self.cooldown = cooldown
        self._clock = clock
        self._last_emitted: Dict[Tuple[str, ...], float] = {}

    def should_emit(self, key: Tuple[str, ...]) -> bool:
        now = self._clock()
        last = self._last_emitted.get(key)
        if last is not None and now - last < self.cooldown:
            return False

        self._last_emitted[key] = now
        if len(self._last_emitted) > _THROTTLE_MAX_KEYS:
            cutoff = now - _THROTTLE_RETENTION_SECONDS
            self._last_emitted = {k: v for k, v in self._last_emitted.items() if v >= cutoff}
        return True

    def forget(self, label: str) -> None:
        """Drop every key naming ``label`` (used when a signal goes away)."""
        self._last_emitted = {k: v for k, v in self._last_emitted.items() if label not in k[1:]}

    def __len__(self) -> int:
        return len(self._last_emitted)
