"""Continuity engine: one growing live transcript over a flaky recognizer.

Three kinds of task run while listening:

- the forwarding task pushes audio frames into the current recognition handle;
- one attempt task per recognizer session tags its events with the session's
  generation and queues them;
- the owner task is the only writer of the transcript state. It drops events
  from superseded generations, restarts the recognizer after a final result or
  an error, and publishes full snapshots to subscribers.

Superseded attempts are cancelled, never awaited while listening.
"""

from __future__ import annotations

import asyncio
from typing import AsyncIterator

from echocoach.errors import (
    AudioSourceActiveError,
    ListeningError,
    RecognitionFailedError,
    RecognizerUnavailableError,
    TransientRecognitionError,
)
from echocoach.listening.broadcast import TranscriptBroadcast
from echocoach.listening.continuity import TranscriptContinuity
from echocoach.listening.sources import (
    AudioFrameSource,
    RecognitionHandle,
    RecognizerPrimitive,
)
from echocoach.models.config import ListeningConfig
from echocoach.models.transcript import (
    AudioFrame,
    FinalResult,
    PartialResult,
    RecognitionEvent,
    RecognitionFault,
    TranscriptSessionState,
)
from echocoach.utils.progress import log_error, log_step, log_warning


class TranscriptContinuityEngine:
    """Drive recognizer attempts and expose a monotonically growing transcript."""

    def __init__(
        self,
        source: AudioFrameSource,
        recognizer: RecognizerPrimitive,
        *,
        max_consecutive_errors: int = 3,
    ):
        self._source = source
        self._recognizer = recognizer
        self._max_errors = max_consecutive_errors
        self._continuity = TranscriptContinuity()

        self._broadcast: TranscriptBroadcast | None = None
        self._inbox: asyncio.Queue | None = None
        self._handle: RecognitionHandle | None = None
        self._attempt_task: asyncio.Task | None = None
        self._forward_task: asyncio.Task | None = None
        self._owner_task: asyncio.Task | None = None
        self._retired: set[asyncio.Task] = set()
        self._stopping: asyncio.Future | None = None
        self._errors = 0

    @classmethod
    def from_config(
        cls,
        source: AudioFrameSource,
        recognizer: RecognizerPrimitive,
        config: ListeningConfig,
    ) -> TranscriptContinuityEngine:
        return cls(source, recognizer, max_consecutive_errors=config.max_consecutive_errors)

    @property
    def state(self) -> TranscriptSessionState:
        return self._continuity.state

    @property
    def listening(self) -> bool:
        return self._continuity.state.listening

    @property
    def transcript(self) -> str:
        return self._continuity.state.snapshot

    # -- public API --------------------------------------------------------

    async def start_listening(self) -> AsyncIterator[str]:
        """Start capturing and return the live transcript stream.

        The stream yields full-transcript snapshots, starting with ``""``, and
        completes on ``stop()``. It raises ``RecognitionFailedError`` if the
        recognizer keeps failing.
        """
        if self.listening:
            raise AudioSourceActiveError("Already listening", transcript=self.transcript)
        if not self._recognizer.is_available():
            raise RecognizerUnavailableError("Speech recognizer is not available")

        frames = await self._source.start()
        try:
            handle = await self._recognizer.begin_session()
        except ListeningError:
            await self._source.stop()
            raise
        except Exception as e:
            await self._source.stop()
            raise RecognizerUnavailableError(f"Could not start recognizer: {e}") from e

        self._stopping = None
        self._errors = 0
        self._inbox = asyncio.Queue()
        self._broadcast = TranscriptBroadcast()
        self._broadcast.publish(self._continuity.reset())
        stream = self._broadcast.subscribe()

        self._attach(handle)
        self._forward_task = asyncio.create_task(self._forward_audio(frames))
        self._owner_task = asyncio.create_task(self._own_state())
        log_step("Listen", "Listening (generation 0)")
        return stream

    def subscribe(self) -> AsyncIterator[str]:
        """Attach another consumer to the live transcript stream."""
        if self._broadcast is None:
            raise ListeningError("Engine has not been started")
        return self._broadcast.subscribe()

    async def stop(self) -> str:
        """Stop listening and return the final transcript. Idempotent."""
        if self._stopping is None:
            self._continuity.state.listening = False
            self._stopping = asyncio.ensure_future(self._shutdown())
        return await asyncio.shield(self._stopping)

    # -- tasks -------------------------------------------------------------

    def _attach(self, handle: RecognitionHandle) -> None:
        generation = self._continuity.generation
        self._handle = handle
        self._attempt_task = asyncio.create_task(self._run_attempt(generation, handle))

    async def _run_attempt(self, generation: int, handle: RecognitionHandle) -> None:
        inbox = self._inbox
        finalized = False
        try:
            async for event in handle.events():
                finalized = isinstance(event, FinalResult)
                inbox.put_nowait((generation, event))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            inbox.put_nowait((generation, RecognitionFault(reason=str(e) or type(e).__name__)))
            return
        if not finalized:
            # the attempt ended on its own; treat it like a forced finalization
            inbox.put_nowait((generation, FinalResult(text="")))

    async def _forward_audio(self, frames: AsyncIterator[AudioFrame]) -> None:
        try:
            async for frame in frames:
                if not self.listening:
                    break
                if self._handle is not None:
                    self._handle.append(frame)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self._inbox.put_nowait((None, e))

    async def _own_state(self) -> None:
        while self.listening:
            generation, event = await self._inbox.get()
            if generation is None:
                self._fail(f"Audio capture failed: {event}", cause=event)
                return
            await self._handle_event(generation, event)

    async def _handle_event(self, generation: int, event: RecognitionEvent) -> None:
        continuity = self._continuity
        if not continuity.is_current(generation):
            return

        if isinstance(event, PartialResult):
            self._errors = 0
            self._publish(continuity.apply_partial(generation, event))
        elif isinstance(event, FinalResult):
            self._errors = 0
            self._publish(continuity.apply_final(generation, event))
            if self.listening:
                await self._restart()
        elif isinstance(event, RecognitionFault) and self.listening:
            self._errors += 1
            fault = TransientRecognitionError(
                event.reason or "unknown error", transcript=continuity.state.snapshot
            )
            if self._errors > self._max_errors:
                self._fail(f"Speech recognition failed: {fault}", cause=fault)
                return
            log_warning(
                f"Recognizer error ({fault}), restarting "
                f"[{self._errors}/{self._max_errors}]"
            )
            await self._restart()

    def _publish(self, snapshot: str | None) -> None:
        if snapshot is not None and self._broadcast is not None:
            self._broadcast.publish(snapshot)

    async def _restart(self) -> None:
        while self.listening:
            self._retire_attempt()
            generation = self._continuity.advance()
            try:
                handle = await self._recognizer.begin_session()
            except Exception as e:
                self._errors += 1
                if self._errors > self._max_errors:
                    self._fail(f"Could not restart recognizer: {e}", cause=e)
                    return
                log_warning(f"Recognizer restart failed ({e}) [{self._errors}/{self._max_errors}]")
                continue
            if not self.listening:
                self._recognizer.cancel(handle)
                return
            self._attach(handle)
            log_step("Listen", f"Recognizer restarted (generation {generation})")
            return

    def _retire_attempt(self) -> None:
        if self._handle is not None:
            self._recognizer.cancel(self._handle)
            self._handle = None
        task = self._attempt_task
        self._attempt_task = None
        if task is not None and not task.done():
            task.cancel()
            self._retired.add(task)
            task.add_done_callback(self._retired.discard)

    def _fail(self, message: str, *, cause: BaseException | None = None) -> None:
        log_error(message)
        error = RecognitionFailedError(message, attempts=self._errors)
        error.__cause__ = cause
        self._continuity.state.listening = False
        if self._stopping is None:
            self._stopping = asyncio.ensure_future(self._shutdown(error))

    # -- teardown ----------------------------------------------------------

    async def _shutdown(self, failure: ListeningError | None = None) -> str:
        self._continuity.state.listening = False
        if self._inbox is None:
            # never started
            return ""
        self._retire_attempt()
        tasks = [t for t in (self._forward_task, self._owner_task) if t is not None]
        tasks.extend(self._retired)
        for task in tasks:
            task.cancel()

        try:
            await self._source.stop()
        except Exception as e:
            log_warning(f"Audio source did not stop cleanly: {e}")
        finally:
            await asyncio.gather(*tasks, return_exceptions=True)

        self._drain_inbox()
        final = self._continuity.finish()

        if self._broadcast is not None:
            if failure is not None:
                failure.transcript = final
            self._broadcast.close(failure)
        log_step("Listen", f"Stopped ({len(final.split())} words)")

        self._forward_task = None
        self._owner_task = None
        self._inbox = None
        self._continuity = TranscriptContinuity()
        return final

    def _drain_inbox(self) -> None:
        """Apply results already queued for the current attempt, without restarting."""
        if self._inbox is None:
            return
        continuity = self._continuity
        while not self._inbox.empty():
            generation, event = self._inbox.get_nowait()
            if generation is None or not continuity.is_current(generation):
                continue
            if isinstance(event, PartialResult):
                continuity.apply_partial(generation, event)
            elif isinstance(event, FinalResult):
                continuity.apply_final(generation, event)
