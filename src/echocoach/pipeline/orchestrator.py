"""Per-question flow: listen, stop, analyze, score."""

from __future__ import annotations

import asyncio
import time
from typing import AsyncIterator, Callable

from echocoach.analysis.embeddings import load_embeddings
from echocoach.analysis.metrics import MetricsExtractor
from echocoach.listening.engine import TranscriptContinuityEngine
from echocoach.models.config import CoachConfig
from echocoach.models.session import AnswerRecord, InterviewSession
from echocoach.scoring.pipeline import ScoringPipeline
from echocoach.storage.history import SessionStore
from echocoach.utils.progress import log_step, log_success, log_warning


class AnswerOrchestrator:
    """Wires the continuity engine to metric extraction and scoring.

    The metrics extractor and scoring pipeline are stateless and can be shared
    by any number of concurrent answers.
    """

    def __init__(
        self,
        extractor: MetricsExtractor | None = None,
        scorer: ScoringPipeline | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.extractor = extractor or MetricsExtractor()
        self.scorer = scorer or ScoringPipeline()
        self.clock = clock

    @classmethod
    def from_config(cls, config: CoachConfig) -> AnswerOrchestrator:
        extractor = MetricsExtractor(
            config.analysis,
            embeddings=load_embeddings(config.analysis.embedding_model),
        )
        return cls(extractor, ScoringPipeline.from_config(config.scoring))

    def build_answer(self, question: str, transcript: str, duration_seconds: float) -> AnswerRecord:
        metrics = self.extractor.analyze(transcript, duration_seconds)
        scores = self.scorer.score(metrics, transcript)
        return AnswerRecord(
            question=question,
            transcript=transcript,
            duration_seconds=duration_seconds,
            metrics=metrics,
            scores=scores,
        )

    async def record(
        self,
        engine: TranscriptContinuityEngine,
        question: str,
        *,
        until: asyncio.Event | None = None,
        max_seconds: float | None = None,
        duration_seconds: float | None = None,
        on_transcript: Callable[[str], None] | None = None,
    ) -> AnswerRecord | None:
        """Record and score one answer.

        Listening ends when ``until`` is set, after ``max_seconds``, or when the
        transcript stream ends, whichever comes first. Returns ``None`` when no
        speech was captured. Recognition failures propagate as
        ``RecognitionFailedError`` after the engine has been stopped.
        """
        stream = await engine.start_listening()
        started = self.clock()
        consumer = asyncio.create_task(_consume(stream, on_transcript))

        waiters: set[asyncio.Future] = {consumer}
        stop_waiter = None
        if until is not None:
            stop_waiter = asyncio.create_task(until.wait())
            waiters.add(stop_waiter)
        try:
            await asyncio.wait(waiters, timeout=max_seconds, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if stop_waiter is not None:
                stop_waiter.cancel()
            transcript = await engine.stop()
        elapsed = self.clock() - started

        # re-raises a recognition failure
        await consumer

        if not transcript.strip():
            log_warning("No speech captured")
            return None

        duration = elapsed if duration_seconds is None else duration_seconds
        answer = self.build_answer(question, transcript, duration)
        log_step("Answer", f"Scored {answer.metrics.total_word_count} words: {answer.scores.overall:.0f}/100")
        return answer


async def record_answer(
    engine: TranscriptContinuityEngine,
    question: str,
    *,
    config: CoachConfig | None = None,
    **kwargs,
) -> AnswerRecord | None:
    """Record one answer with an orchestrator built from ``config``."""
    orchestrator = AnswerOrchestrator.from_config(config or CoachConfig())
    return await orchestrator.record(engine, question, **kwargs)


async def _consume(stream: AsyncIterator[str], on_transcript: Callable[[str], None] | None) -> None:
    async for snapshot in stream:
        if on_transcript is not None:
            on_transcript(snapshot)


def finish_session(
    answers: list[AnswerRecord],
    store: SessionStore,
    *,
    interview_type: str = "general",
) -> InterviewSession | None:
    """Group answers into a session and persist it. No answers, no session."""
    if not answers:
        log_warning("No answers recorded; session not saved")
        return None
    session = InterviewSession.from_answers(answers, interview_type=interview_type)
    store.save(session)
    log_success(f"Session saved — average score {session.overall_score:.0f}/100")
    return session
