"""Layered answer scoring: primary model with a rule-based fallback.

The primary path runs the model on the sanitized features, then applies
independent penalties in order:

1. speed: faster than 250 wpm or slower than 80 wpm
2. fillers: filler ratio above 0.2
3. shortness: fewer than 15 words
4. off-topic: keyword coverage below 0.2 and similarity below 0.5
5. ceiling: raw scores above 95 are capped at 95 unless similarity >= 0.95

Any model failure falls back to ``fallback.score_features`` with the same
features, so ``score`` never raises for well-formed metrics.
"""

from __future__ import annotations

import math

from echocoach.errors import ScoringModelError
from echocoach.models.config import ScoringConfig
from echocoach.models.metrics import AnswerScores, NLPMetrics, ScoringFeatures
from echocoach.scoring.fallback import clarity_score, pace_score, score_features
from echocoach.scoring.features import clamp, sanitize_features
from echocoach.scoring.model import LinearScoringModel, ScoringModel
from echocoach.utils.progress import log_warning


def apply_penalties(raw: float, features: ScoringFeatures) -> float:
    """Adjust a raw model score and clamp it to [0, 100]."""
    overall = raw
    rate = features.speech_rate
    if rate > 250:
        overall -= (rate - 250) / 10
    elif rate < 80:
        overall -= (80 - rate) / 5

    if features.filler_ratio > 0.2:
        overall -= (features.filler_ratio - 0.2) * 100

    if features.total_word_count < 15:
        overall -= (15 - features.total_word_count) * 2

    if features.keyword_coverage < 0.2 and features.semantic_similarity < 0.5:
        overall -= 15

    if raw > 95 and features.semantic_similarity < 0.95:
        overall = min(overall, 95.0)

    return clamp(overall)


class ScoringPipeline:
    """Scores answers. Stateless apart from the (read-only) model."""

    def __init__(self, model: ScoringModel | None = None):
        self.model = model

    @classmethod
    def from_config(cls, config: ScoringConfig) -> ScoringPipeline:
        if not config.model_path:
            return cls()
        try:
            return cls(LinearScoringModel.from_yaml(config.model_path))
        except ScoringModelError as e:
            log_warning(f"{e}. Using rule-based scoring.")
            return cls()

    def score(self, metrics: NLPMetrics, transcript: str = "") -> AnswerScores:
        features = sanitize_features(metrics)
        if self.model is None:
            return score_features(features)
        try:
            return self._score_with_model(features)
        except Exception as e:
            log_warning(f"Scoring model failed ({e}); using rule-based scoring")
            return score_features(features)

    def _score_with_model(self, features: ScoringFeatures) -> AnswerScores:
        try:
            raw = float(self.model.predict(features))
        except ScoringModelError:
            raise
        except Exception as e:
            raise ScoringModelError(f"{type(e).__name__}: {e}") from e
        if not math.isfinite(raw):
            raise ScoringModelError(f"Model produced a non-finite score: {raw}")

        overall = apply_penalties(raw, features)
        fillers = features.filler_word_count
        return AnswerScores(
            overall=overall,
            clarity=clarity_score(features),
            confidence=clamp((overall / 100) * 60 + (1 - min(fillers / 10, 1)) * 40),
            technical=clamp(features.keyword_coverage * 50 + features.semantic_similarity * 50),
            pace=pace_score(features),
        )


def score(metrics: NLPMetrics, transcript: str = "") -> AnswerScores:
    """Score with the rule-based fallback only."""
    return ScoringPipeline().score(metrics, transcript)
