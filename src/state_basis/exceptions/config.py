"""Configuration exceptions: settings files, environment, trace input."""

from pathlib import Path
from typing import Any, Optional

from .base import BasisError


class ConfigurationError(BasisError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class TraceError(ConfigurationError):
    """Raised when a replay trace line cannot be interpreted."""

    def __init__(self, reason: str, line_number: Optional[int] = None, path: Optional[Path] = None):
        details = {"reason": reason}
        if line_number is not None:
            details["line"] = str(line_number)
        if path is not None:
            details["path"] = str(path)

        super().__init__(f"Malformed trace: {reason}", details=details)
        self.reason = reason
        self.line_number = line_number
        self.path = path
