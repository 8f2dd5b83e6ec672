"""Live transcription data models."""

from __future__ import annotations

from typing import Literal, Union

from pydantic import BaseModel, ConfigDict


class AudioFrame(BaseModel):
    """An opaque PCM chunk handed from the audio source to the recognizer."""

    model_config = ConfigDict(frozen=True)

    samples: bytes
    sample_rate: int = 16000


class PartialResult(BaseModel):
    """In-progress hypothesis for the current utterance."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["partial"] = "partial"
    text: str
    segment_count: int = 0


class FinalResult(BaseModel):
    """The recognizer finalized its hypothesis and will emit nothing further."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["final"] = "final"
    text: str = ""


class RecognitionFault(BaseModel):
    """The recognition attempt failed."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["error"] = "error"
    reason: str = ""


RecognitionEvent = Union[PartialResult, FinalResult, RecognitionFault]


def join_transcript(head: str, tail: str) -> str:
    """Join two transcript pieces with a single space, skipping empty pieces."""
    return " ".join(part for part in (head.strip(), tail.strip()) if part)


class TranscriptSessionState(BaseModel):
    """State owned by the continuity engine for one listening session."""

    generation: int = 0
    accumulated: str = ""
    volatile: str = ""
    last_segment_count: int = 0
    listening: bool = False

    @property
    def snapshot(self) -> str:
        return join_transcript(self.accumulated, self.volatile)

    def commit_volatile(self) -> None:
        """Move the in-progress hypothesis into the accumulated transcript."""
        if self.volatile.strip():
            self.accumulated = join_transcript(self.accumulated, self.volatile)
        self.volatile = ""
        self.last_segment_count = 0
