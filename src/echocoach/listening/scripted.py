"""Deterministic audio source and recognizer driven by a script.

Used by ``echocoach replay`` to reproduce recognizer behaviour captured in a
YAML file, and by the test suite.

Script format::

    attempts:
      - - {kind: partial, text: "I built", segment_count: 2}
        - {kind: partial, text: "an app", segment_count: 1}
        - {kind: final, text: "an app"}
      - - {kind: error, reason: "network"}

Each inner list is played by one recognizer session, in order. Once its events
are exhausted a session stays open, silent, until cancelled.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated, AsyncIterator, Callable

from pydantic import Field, TypeAdapter

from echocoach.errors import (
    AudioSourceActiveError,
    PermissionDeniedError,
    RecognizerUnavailableError,
)
from echocoach.models.transcript import (
    AudioFrame,
    FinalResult,
    PartialResult,
    RecognitionEvent,
    RecognitionFault,
)
from echocoach.utils.io import read_yaml

_Event = Annotated[
    PartialResult | FinalResult | RecognitionFault,
    Field(discriminator="kind"),
]
_script_adapter = TypeAdapter(list[list[_Event]])


def load_script(path: Path | str) -> list[list[RecognitionEvent]]:
    """Read recognizer attempts from a YAML script."""
    data = read_yaml(path)
    return _script_adapter.validate_python(data.get("attempts", []))


class ScriptedAudioSource:
    """Emits ``frame_count`` silent frames (forever if ``None``) until stopped."""

    def __init__(
        self,
        *,
        frame_count: int | None = None,
        frame_interval: float = 0.0,
        sample_rate: int = 16000,
        permission_granted: bool = True,
    ):
        self.frame_count = frame_count
        self.frame_interval = frame_interval
        self.sample_rate = sample_rate
        self.permission_granted = permission_granted
        self.active = False
        self.frames_sent = 0
        self.stop_calls = 0
        self._stopped = asyncio.Event()

    async def start(self) -> AsyncIterator[AudioFrame]:
        if not self.permission_granted:
            raise PermissionDeniedError("Microphone access was denied")
        if self.active:
            raise AudioSourceActiveError("Audio source is already capturing")
        self.active = True
        self._stopped = asyncio.Event()
        return self._frames()

    async def stop(self) -> None:
        self.stop_calls += 1
        self.active = False
        self._stopped.set()

    async def _frames(self) -> AsyncIterator[AudioFrame]:
        # 20ms of 16-bit mono silence
        silence = bytes(2 * self.sample_rate // 50)
        while self.active and (self.frame_count is None or self.frames_sent < self.frame_count):
            yield AudioFrame(samples=silence, sample_rate=self.sample_rate)
            self.frames_sent += 1
            await asyncio.sleep(self.frame_interval)
        await self._stopped.wait()


class ScriptedHandle:
    """A recognition session that plays back a fixed list of events."""

    def __init__(
        self,
        index: int,
        script: list[RecognitionEvent],
        *,
        event_delay: float = 0.0,
        on_played: Callable[[ScriptedHandle], None] | None = None,
    ):
        self.index = index
        self.script = list(script)
        self.event_delay = event_delay
        self.on_played = on_played
        self.frames_received = 0
        self.cancelled = asyncio.Event()

    def append(self, frame: AudioFrame) -> None:
        self.frames_received += 1

    async def events(self) -> AsyncIterator[RecognitionEvent]:
        for event in self.script:
            await asyncio.sleep(self.event_delay)
            if self.cancelled.is_set():
                return
            yield event
        if self.on_played is not None:
            self.on_played(self)
        await self.cancelled.wait()


class ScriptedRecognizer:
    """Hands out one scripted session per ``begin_session`` call."""

    def __init__(
        self,
        attempts: list[list[RecognitionEvent]],
        *,
        available: bool = True,
        event_delay: float = 0.0,
    ):
        self.attempts = [list(a) for a in attempts]
        self.available = available
        self.event_delay = event_delay
        self.sessions: list[ScriptedHandle] = []
        # set once the last scripted attempt has played, or a session beyond the script starts
        self.exhausted = asyncio.Event()

    def is_available(self) -> bool:
        return self.available

    async def begin_session(self) -> ScriptedHandle:
        if not self.available:
            raise RecognizerUnavailableError("Scripted recognizer disabled")
        index = len(self.sessions)
        if index >= len(self.attempts):
            self.exhausted.set()
        script = self.attempts[index] if index < len(self.attempts) else []
        handle = ScriptedHandle(
            index, script, event_delay=self.event_delay, on_played=self._played
        )
        self.sessions.append(handle)
        return handle

    def cancel(self, handle: ScriptedHandle) -> None:
        handle.cancelled.set()

    def _played(self, handle: ScriptedHandle) -> None:
        if handle.index >= len(self.attempts) - 1:
            self.exhausted.set()
