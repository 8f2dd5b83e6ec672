"""Tests for the live transcript engine over scripted recognizer sessions."""

from __future__ import annotations

import asyncio

import pytest
from conftest import E, F, P, collect_until, run

from echocoach.errors import (
    AudioSourceActiveError,
    PermissionDeniedError,
    RecognitionFailedError,
    RecognizerUnavailableError,
    TransientRecognitionError,
)
from echocoach.listening.engine import TranscriptContinuityEngine
from echocoach.listening.scripted import ScriptedAudioSource, ScriptedRecognizer
from echocoach.models.config import ListeningConfig
from echocoach.models.transcript import AudioFrame, FinalResult


def _engine(attempts, *, max_errors: int = 3, **recognizer_kwargs):
    source = ScriptedAudioSource(frame_count=10)
    recognizer = ScriptedRecognizer(attempts, **recognizer_kwargs)
    engine = TranscriptContinuityEngine(source, recognizer, max_consecutive_errors=max_errors)
    return engine, source, recognizer


def test_transcript_survives_forced_finalization_and_context_loss():
    expected = "I built an app that scales using Python"
    engine, source, recognizer = _engine([
        [P("I built", 2), P("I built an app", 4), P("that", 1), F("that scales")],
        [P("using", 1), P("using Python", 2)],
    ])

    async def scenario():
        stream = await engine.start_listening()
        seen = await collect_until(stream, lambda s: s == expected)
        generation = engine.state.generation
        final = await engine.stop()
        return seen, generation, final

    seen, generation, final = run(scenario())

    assert seen[0] == ""
    assert seen[-1] == expected
    assert final == expected
    assert generation == 1
    for earlier, later in zip(seen, seen[1:]):
        assert len(later) >= len(earlier)
    assert len(recognizer.sessions) == 2
    assert not source.active


def test_events_from_superseded_attempt_are_dropped():
    engine, _, recognizer = _engine([
        [P("hello", 1), F("hello"), P("stale words from old attempt", 1)],
        [P("world", 1)],
    ])

    async def scenario():
        stream = await engine.start_listening()
        seen = await collect_until(stream, lambda s: s == "hello world")
        await asyncio.sleep(0.01)
        return seen, await engine.stop()

    seen, final = run(scenario())
    assert final == "hello world"
    assert not any("stale" in s for s in seen)


def test_stop_is_idempotent_and_releases_resources():
    engine, source, recognizer = _engine([[P("one two", 2), F("one two three")]])

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "one two three")
        first = await engine.stop()
        sessions = len(recognizer.sessions)
        second = await engine.stop()
        await asyncio.sleep(0.01)
        return first, second, sessions

    first, second, sessions = run(scenario())
    assert first == second == "one two three"
    assert len(recognizer.sessions) == sessions
    assert all(s.cancelled.is_set() for s in recognizer.sessions)
    assert source.stop_calls == 1
    assert not engine.listening


def test_stop_racing_with_final_does_not_restart():
    engine, _, recognizer = _engine([[P("one two", 2)]])

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "one two")
        # a finalization that lands just as the caller stops
        engine._inbox.put_nowait((engine.state.generation, FinalResult(text="one two three")))
        return await engine.stop()

    assert run(scenario()) == "one two three"
    assert len(recognizer.sessions) == 1


def test_concurrent_stops_share_one_result():
    engine, source, _ = _engine([[P("just this", 2)]])

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "just this")
        return await asyncio.gather(engine.stop(), engine.stop())

    assert run(scenario()) == ["just this", "just this"]
    assert source.stop_calls == 1


def test_stream_completes_on_stop():
    engine, _, _ = _engine([[P("done", 1)]])

    async def scenario():
        stream = await engine.start_listening()
        consumed: list[str] = []

        async def consume():
            async for s in stream:
                consumed.append(s)

        task = asyncio.create_task(consume())
        await asyncio.sleep(0.01)
        await engine.stop()
        await task
        return consumed

    assert run(scenario()) == ["", "done"]


def test_errors_restart_transparently():
    engine, _, recognizer = _engine([
        [E()],
        [E()],
        [P("ok", 1), F("ok")],
        [E()],
        [E()],
        [P("fine", 1)],
    ])

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "ok fine")
        return await engine.stop()

    assert run(scenario()) == "ok fine"
    assert len(recognizer.sessions) == 6


def test_exhausted_restarts_fail_with_last_transcript():
    engine, source, recognizer = _engine(
        [[P("hello there", 2), E()], [E()], [E()], [E()]],
        max_errors=3,
    )

    async def scenario():
        stream = await engine.start_listening()
        with pytest.raises(RecognitionFailedError) as info:
            async for _ in stream:
                pass
        return info.value, await engine.stop()

    error, final = run(scenario())
    assert error.transcript == "hello there"
    assert isinstance(error.__cause__, TransientRecognitionError)
    assert final == "hello there"
    assert len(recognizer.sessions) == 4
    assert not engine.listening
    assert not source.active


def test_handle_exception_counts_as_recognition_error():
    class ExplodingRecognizer(ScriptedRecognizer):
        async def begin_session(self):
            handle = await super().begin_session()
            if handle.index == 0:
                async def explode():
                    raise ConnectionResetError("socket closed")
                    yield  # pragma: no cover
                handle.events = explode
            return handle

    source = ScriptedAudioSource(frame_count=5)
    recognizer = ExplodingRecognizer([[], [P("recovered", 1)]])
    engine = TranscriptContinuityEngine(source, recognizer)

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "recovered")
        return await engine.stop()

    assert run(scenario()) == "recovered"


def test_unavailable_recognizer_fails_fast():
    engine, source, recognizer = _engine([[P("x", 1)]], available=False)

    with pytest.raises(RecognizerUnavailableError):
        run(engine.start_listening())
    assert recognizer.sessions == []
    assert not source.active


def test_recognizer_failing_at_start_releases_audio():
    class Refusing(ScriptedRecognizer):
        async def begin_session(self):
            raise RuntimeError("no model")

    source = ScriptedAudioSource(frame_count=1)
    engine = TranscriptContinuityEngine(source, Refusing([]))

    with pytest.raises(RecognizerUnavailableError):
        run(engine.start_listening())
    assert source.stop_calls == 1
    assert not source.active


def test_permission_denied_propagates():
    source = ScriptedAudioSource(permission_granted=False)
    engine = TranscriptContinuityEngine(source, ScriptedRecognizer([]))

    with pytest.raises(PermissionDeniedError) as info:
        run(engine.start_listening())
    assert isinstance(info.value, PermissionError)


def test_start_while_listening_is_rejected():
    engine, _, _ = _engine([[P("first", 1)]])

    async def scenario():
        await engine.start_listening()
        try:
            with pytest.raises(AudioSourceActiveError):
                await engine.start_listening()
        finally:
            await engine.stop()

    run(scenario())


def test_late_subscriber_gets_latest_snapshot():
    engine, _, _ = _engine([[P("a b", 2), P("a b c", 3)]])

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "a b c")
        late = engine.subscribe()
        first = await late.__anext__()
        await engine.stop()
        return first

    assert run(scenario()) == "a b c"


def test_audio_frames_reach_current_attempt():
    engine, source, recognizer = _engine([[P("x", 1)]])

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "x")
        await asyncio.sleep(0.01)
        return await engine.stop()

    run(scenario())
    assert source.frames_sent == 10
    assert recognizer.sessions[0].frames_received == 10


def test_stop_before_start_returns_empty():
    engine, source, _ = _engine([])
    assert run(engine.stop()) == ""
    assert source.stop_calls == 0


def test_engine_can_listen_again_after_stop():
    engine, source, _ = _engine([[P("first answer", 2)], [P("second answer", 2)]])

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "first answer")
        first = await engine.stop()
        stream = await engine.start_listening()
        seen = await collect_until(stream, lambda s: s == "second answer")
        second = await engine.stop()
        return first, seen, second

    first, seen, second = run(scenario())
    assert first == "first answer"
    assert seen[0] == ""
    assert second == "second answer"


def test_from_config_uses_error_bound():
    engine = TranscriptContinuityEngine.from_config(
        ScriptedAudioSource(),
        ScriptedRecognizer([]),
        ListeningConfig(max_consecutive_errors=1),
    )
    assert engine._max_errors == 1


class StuckAudioSource(ScriptedAudioSource):
    """Releases the device but reports a failure from ``stop()``."""

    async def stop(self) -> None:
        await super().stop()
        raise OSError("device busy")


class UnpluggedAudioSource(ScriptedAudioSource):
    """Delivers one frame, then fails once ``unplug`` is set."""

    def __init__(self) -> None:
        super().__init__()
        self.unplug = asyncio.Event()

    async def _frames(self):
        yield AudioFrame(samples=bytes(640))
        self.frames_sent += 1
        await self.unplug.wait()
        raise OSError("microphone unplugged")


def test_stop_returns_transcript_when_audio_source_fails_to_stop():
    source = StuckAudioSource(frame_count=3)
    engine = TranscriptContinuityEngine(source, ScriptedRecognizer([[P("hello world", 2)]]))

    async def scenario():
        stream = await engine.start_listening()
        await collect_until(stream, lambda s: s == "hello world")
        rest = asyncio.create_task(collect_until(stream, lambda s: False))
        final = await engine.stop()
        again = await engine.stop()
        return final, again, await rest

    final, again, rest = run(scenario())
    assert final == again == "hello world"
    assert rest == []
    assert source.stop_calls == 1
    assert not engine.listening


def test_audio_failure_mid_session_keeps_transcript():
    source = UnpluggedAudioSource()
    engine = TranscriptContinuityEngine(source, ScriptedRecognizer([[P("hello there", 2)]]))

    async def scenario():
        stream = await engine.start_listening()
        seen = await collect_until(stream, lambda s: s == "hello there")
        source.unplug.set()
        with pytest.raises(RecognitionFailedError) as info:
            async for _ in stream:
                pass
        return seen, info.value, await engine.stop()

    seen, error, final = run(scenario())
    assert seen == ["", "hello there"]
    assert error.transcript == "hello there"
    assert isinstance(error.__cause__, OSError)
    assert final == "hello there"
    assert not source.active
