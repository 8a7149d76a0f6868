"""Analysis-related exceptions: malformed history, failed passes."""

from .base import BasisError


class AnalysisError(BasisError):
    """Base class for errors raised inside a correlation pass."""

    pass


class BufferMismatchError(AnalysisError):
    """Raised when two ring buffers cannot be compared slot for slot."""

    def __init__(self, length_a: int, length_b: int):
        super().__init__(
            "Ring buffers have different lengths",
            details={"length_a": str(length_a), "length_b": str(length_b)},
        )
        self.length_a = length_a
        self.length_b = length_b
