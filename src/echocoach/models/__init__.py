"""Pydantic data models for EchoCoach."""

from echocoach.models.config import CoachConfig, load_config
from echocoach.models.metrics import AnswerScores, NLPMetrics, ScoringFeatures
from echocoach.models.session import AnswerRecord, InterviewSession, SessionAnalytics
from echocoach.models.transcript import (
    AudioFrame,
    FinalResult,
    PartialResult,
    RecognitionEvent,
    RecognitionFault,
    TranscriptSessionState,
)

__all__ = [
    "AnswerRecord",
    "AnswerScores",
    "AudioFrame",
    "CoachConfig",
    "FinalResult",
    "InterviewSession",
    "NLPMetrics",
    "PartialResult",
    "RecognitionEvent",
    "RecognitionFault",
    "ScoringFeatures",
    "SessionAnalytics",
    "TranscriptSessionState",
    "load_config",
]
