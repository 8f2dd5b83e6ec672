"""Exception hierarchy for listening, scoring and storage."""

from __future__ import annotations


class CoachError(Exception):
    """Base class for all EchoCoach errors."""

    recovery_hint = "Please try again."


class ListeningError(CoachError):
    """Raised when live transcription cannot start or continue.

    ``transcript`` holds the last known transcript at the time of failure.
    """

    def __init__(self, message: str, *, transcript: str = ""):
        self.transcript = transcript
        super().__init__(message)


class PermissionDeniedError(ListeningError, PermissionError):
    """Microphone or speech recognition access was refused."""

    recovery_hint = "Grant microphone and speech recognition access, then retry."


class AudioSourceActiveError(ListeningError):
    """The audio source (or the engine) is already capturing."""

    recovery_hint = "Stop the current recording before starting a new one."


class RecognizerUnavailableError(ListeningError):
    """The speech recognizer cannot be used on this system."""

    recovery_hint = "Check that a speech recognizer is installed and available."


class TransientRecognitionError(ListeningError):
    """A single recognition attempt failed; the engine restarts transparently."""

    recovery_hint = "Make sure you're in a quiet environment."


class RecognitionFailedError(ListeningError):
    """Recognition kept failing after the bounded number of restarts."""

    recovery_hint = "Make sure you're in a quiet environment."

    def __init__(self, message: str, *, transcript: str = "", attempts: int = 0):
        self.attempts = attempts
        super().__init__(message, transcript=transcript)


class ScoringModelError(CoachError):
    """The primary scoring model failed. Always recovered via the fallback."""


class StorageError(CoachError):
    """Reading or writing interview history failed."""

    recovery_hint = "Check the history directory permissions and try again."
