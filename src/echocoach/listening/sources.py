"""Protocols for the audio source and recognizer the engine drives."""

from __future__ import annotations

from typing import AsyncIterator, Protocol

from echocoach.models.transcript import AudioFrame, RecognitionEvent


class AudioFrameSource(Protocol):
    """Produces raw audio frames while capturing.

    ``start`` raises ``PermissionDeniedError`` or ``AudioSourceActiveError``.
    """

    async def start(self) -> AsyncIterator[AudioFrame]: ...

    async def stop(self) -> None: ...


class RecognitionHandle(Protocol):
    """One recognition attempt."""

    def append(self, frame: AudioFrame) -> None: ...

    def events(self) -> AsyncIterator[RecognitionEvent]: ...


class RecognizerPrimitive(Protocol):
    """A speech recognizer that may silently lose context mid-utterance."""

    def is_available(self) -> bool: ...

    async def begin_session(self) -> RecognitionHandle: ...

    def cancel(self, handle: RecognitionHandle) -> None: ...
