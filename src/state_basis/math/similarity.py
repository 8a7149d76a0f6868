"""Circular cosine similarity over fixed-length pulse windows.

Each signal keeps its pulse history in a ring buffer whose write head moves
one slot per tick. Two buffers are compared slot for slot after aligning
their heads, optionally shifted by a phase ``offset``:

    sim(A, B, k) = Σ A[i] · B[i + h_B - h_A + k] / (‖A‖ · ‖B‖)

With equal heads, a positive offset pairs each slot of A with the slot of B
written ``k`` ticks later, so ``offset=+1`` measures "A changes, B follows".
"""

from __future__ import annotations

import math

import numpy as np

from ..exceptions import BufferMismatchError


def circular_similarity(
    buffer_a: np.ndarray,
    head_a: int,
    buffer_b: np.ndarray,
    head_b: int,
    offset: int = 0,
) -> float:
    """Cosine similarity of two ring buffers at a phase offset.

    Args:
        buffer_a: Pulse window of the first signal
        head_a: Next write index of ``buffer_a``
        buffer_b: Pulse window of the second signal
        head_b: Next write index of ``buffer_b``
        offset: Phase shift applied to ``buffer_b`` in ticks (any integer)

    Returns:
        Similarity in [0, 1]; 0.0 when either window is empty.

    Raises:
        BufferMismatchError: If the buffers have different lengths
    """
    length = len(buffer_a)
    if len(buffer_b) != length:
        raise BufferMismatchError(length, len(buffer_b))
    if length == 0:
        return 0.0

    # One modulo outside the kernel keeps extreme offsets well-defined
    shift = (head_b - head_a + offset) % length

    a = buffer_a.astype(np.int64, copy=False)
    b = np.roll(buffer_b, -shift).astype(np.int64, copy=False)

    mag_a = int(a @ a)
    mag_b = int(b @ b)
    if mag_a == 0 or mag_b == 0:
        return 0.0

    return int(a @ b) / (math.sqrt(mag_a) * math.sqrt(mag_b))


def phase_similarities(
    buffer_a: np.ndarray, head_a: int, buffer_b: np.ndarray, head_b: int
) -> tuple[float, float, float]:
    """Return ``(sync, lead, lag)`` similarities at offsets 0, +1 and -1."""
    sync = circular_similarity(buffer_a, head_a, buffer_b, head_b, 0)
    lead = circular_similarity(buffer_a, head_a, buffer_b, head_b, 1)
    lag = circular_similarity(buffer_a, head_a, buffer_b, head_b, -1)
    return sync, lead, lag
