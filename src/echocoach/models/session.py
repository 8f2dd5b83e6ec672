"""Answer and interview session records."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, computed_field

from echocoach.models.metrics import AnswerScores, NLPMetrics


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AnswerRecord(BaseModel):
    """One scored answer. Immutable."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_id)
    question: str = ""
    transcript: str
    duration_seconds: float = 0.0
    metrics: NLPMetrics
    scores: AnswerScores
    recorded_at: datetime = Field(default_factory=_now)


COACHING_TIPS = (
    "Practice reducing filler words like 'um' and 'uh'",
    "Aim for 30-50 word answers with clear structure",
    "Use the STAR method: Situation, Task, Action, Result",
)


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


class SessionAnalytics(BaseModel):
    """Per-session averages and totals shown after an interview."""

    model_config = ConfigDict(frozen=True)

    answer_count: int = 0
    overall: float = 0.0
    clarity: float = 0.0
    confidence: float = 0.0
    technical: float = 0.0
    pace: float = 0.0
    average_speech_rate: float = 0.0
    average_similarity: float = 0.0
    total_word_count: int = 0
    total_filler_words: int = 0
    tips: tuple[str, ...] = COACHING_TIPS

    @classmethod
    def from_answers(cls, answers: list[AnswerRecord]) -> SessionAnalytics:
        return cls(
            answer_count=len(answers),
            overall=_mean([a.scores.overall for a in answers]),
            clarity=_mean([a.scores.clarity for a in answers]),
            confidence=_mean([a.scores.confidence for a in answers]),
            technical=_mean([a.scores.technical for a in answers]),
            pace=_mean([a.scores.pace for a in answers]),
            average_speech_rate=_mean([a.metrics.speech_rate for a in answers]),
            average_similarity=_mean([a.metrics.semantic_similarity for a in answers]),
            total_word_count=sum(a.metrics.total_word_count for a in answers),
            total_filler_words=sum(a.metrics.filler_word_count for a in answers),
        )


class InterviewSession(BaseModel):
    """A completed interview: its answers and their average overall score."""

    id: str = Field(default_factory=_new_id)
    date: datetime = Field(default_factory=_now)
    interview_type: str = "general"
    answers: list[AnswerRecord] = Field(default_factory=list)

    @computed_field
    @property
    def overall_score(self) -> float:
        return _mean([a.scores.overall for a in self.answers])

    @property
    def analytics(self) -> SessionAnalytics:
        return SessionAnalytics.from_answers(self.answers)

    @classmethod
    def from_answers(
        cls, answers: list[AnswerRecord], *, interview_type: str = "general"
    ) -> InterviewSession:
        if not answers:
            raise ValueError("A session needs at least one answer")
        return cls(interview_type=interview_type, answers=list(answers))
