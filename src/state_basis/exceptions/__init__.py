"""Exception hierarchy for state-basis."""

from .analysis import AnalysisError, BufferMismatchError
from .base import BasisError
from .config import ConfigurationError, InvalidConfigError, TraceError

__all__ = [
    "BasisError",
    "AnalysisError",
    "BufferMismatchError",
    "ConfigurationError",
    "InvalidConfigError",
    "TraceError",
]
