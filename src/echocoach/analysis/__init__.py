"""Answer analysis: tokenization, fillers, similarity and metrics."""

from echocoach.analysis.metrics import MetricsExtractor, analyze

__all__ = ["MetricsExtractor", "analyze"]
