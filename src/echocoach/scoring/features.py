"""Clamp metrics into the domains the scorers expect."""

from __future__ import annotations

import math

from echocoach.models.metrics import NLPMetrics, ScoringFeatures


def clamp(value: float, lo: float = 0.0, hi: float = 100.0) -> float:
    """Clamp to [lo, hi]; non-finite values map to ``lo``."""
    if not math.isfinite(value):
        return lo
    return max(lo, min(hi, value))


# larger counts overflow float arithmetic
_MAX_COUNT = 10**9


def _floor_count(value: int, lo: int = 0) -> int:
    return min(max(lo, int(value)), _MAX_COUNT)


def sanitize_features(metrics: NLPMetrics) -> ScoringFeatures:
    """Ratios to [0, 1], counts in [0, 1e9], sentences >= 1, rate >= 1."""
    speech_rate = metrics.speech_rate
    return ScoringFeatures(
        keyword_coverage=clamp(metrics.keyword_coverage, 0.0, 1.0),
        filler_ratio=clamp(metrics.filler_ratio, 0.0, 1.0),
        sentence_count=_floor_count(metrics.sentence_count, 1),
        avg_sentence_length=clamp(metrics.avg_sentence_length, 1.0, 100.0),
        semantic_similarity=clamp(metrics.semantic_similarity, 0.0, 1.0),
        speech_rate=max(1.0, speech_rate) if math.isfinite(speech_rate) else 1.0,
        pause_count=_floor_count(metrics.pause_count),
        total_word_count=_floor_count(metrics.total_word_count),
        filler_word_count=_floor_count(metrics.filler_word_count),
    )
