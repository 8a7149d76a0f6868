"""Numeric kernels: circular similarity and spectral influence."""

from .graph import InfluenceRanker
from .similarity import circular_similarity, phase_similarities

__all__ = [
    "InfluenceRanker",
    "circular_similarity",
    "phase_similarities",
]
