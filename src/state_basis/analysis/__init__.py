"""Deferred correlation analysis."""

from .correlation import CorrelationAnalyzer, PairSimilarity, PassResult

__all__ = ["CorrelationAnalyzer", "PairSimilarity", "PassResult"]
