"""Deterministic rule-based scoring, always available."""

from __future__ import annotations

from echocoach.models.metrics import AnswerScores, NLPMetrics, ScoringFeatures
from echocoach.scoring.features import clamp, sanitize_features


def length_bonus(word_count: int) -> float:
    if 20 <= word_count <= 100:
        return 20.0
    if 10 <= word_count < 20:
        return 10.0
    return 5.0


def clarity_score(features: ScoringFeatures) -> float:
    return clamp(100.0 - features.filler_ratio * 100.0)


def pace_score(features: ScoringFeatures) -> float:
    rate = features.speech_rate
    if 120 <= rate <= 180:
        return 90.0
    if 100 <= rate <= 200:
        return 70.0
    return 50.0


def score_features(features: ScoringFeatures) -> AnswerScores:
    similarity = features.semantic_similarity
    technical = clamp(50.0 + similarity * 50.0)
    overall = clamp(
        40.0
        + length_bonus(features.total_word_count)
        + similarity * 30.0
        + (technical / 100.0) * 10.0
        - features.filler_word_count * 2.0
    )
    confidence = clamp((75.0 if overall > 70 else 55.0) + similarity * 20.0)
    return AnswerScores(
        overall=overall,
        clarity=clarity_score(features),
        confidence=confidence,
        technical=technical,
        pace=pace_score(features),
    )


def fallback_scores(metrics: NLPMetrics) -> AnswerScores:
    """Score ``metrics`` with the rule-based formulas."""
    return score_features(sanitize_features(metrics))
