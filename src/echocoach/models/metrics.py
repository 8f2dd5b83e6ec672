"""Answer metrics and score models."""

from __future__ import annotations

import sys

from pydantic import BaseModel, ConfigDict, Field

MODEL_FEATURES = (
    "keyword_coverage",
    "filler_ratio",
    "sentence_count",
    "avg_sentence_length",
    "semantic_similarity",
    "speech_rate",
    "pause_count",
)


def _ratio(count: int, total: int) -> float:
    """``count / total`` with the denominator floored at 1, saturating on overflow."""
    try:
        return count / max(total, 1)
    except OverflowError:
        return sys.float_info.max if count > 0 else -sys.float_info.max


class NLPMetrics(BaseModel):
    """Quantitative speech metrics for one answer.

    Range invariants (``sentence_count >= 1``, ratios in [0, 1]) are guaranteed
    by the extractor rather than validated here, so the scorer can be handed
    arbitrary values and sanitize them itself.
    """

    model_config = ConfigDict(frozen=True)

    total_word_count: int = 0
    sentence_count: int = 1
    filler_word_count: int = 0
    pause_count: int = 0
    speech_rate: float = 0.0  # words per minute
    keyword_coverage: float = 0.0
    semantic_similarity: float = 0.0

    @property
    def filler_ratio(self) -> float:
        return _ratio(self.filler_word_count, self.total_word_count)

    @property
    def avg_sentence_length(self) -> float:
        return _ratio(self.total_word_count, self.sentence_count)


class AnswerScores(BaseModel):
    """Normalized answer scores, each in [0, 100]."""

    model_config = ConfigDict(frozen=True)

    overall: float = Field(ge=0.0, le=100.0)
    clarity: float = Field(ge=0.0, le=100.0)
    confidence: float = Field(ge=0.0, le=100.0)
    technical: float = Field(ge=0.0, le=100.0)
    pace: float = Field(ge=0.0, le=100.0)


class ScoringFeatures(BaseModel):
    """Sanitized scoring inputs: the seven model features plus raw counts."""

    model_config = ConfigDict(frozen=True)

    keyword_coverage: float
    filler_ratio: float
    sentence_count: int
    avg_sentence_length: float
    semantic_similarity: float
    speech_rate: float
    pause_count: int

    total_word_count: int
    filler_word_count: int

    def model_inputs(self) -> dict[str, float]:
        """The seven features fed to the primary scoring model, in a fixed order."""
        return {name: float(getattr(self, name)) for name in MODEL_FEATURES}
