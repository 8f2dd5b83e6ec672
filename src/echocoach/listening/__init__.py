"""Live transcription over a recognizer that silently loses context."""

from echocoach.listening.engine import TranscriptContinuityEngine

__all__ = ["TranscriptContinuityEngine"]
