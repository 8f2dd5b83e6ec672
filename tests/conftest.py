from __future__ import annotations

import asyncio

import pytest

from echocoach.models.metrics import NLPMetrics
from echocoach.models.transcript import FinalResult, PartialResult, RecognitionFault


def P(text: str, segments: int) -> PartialResult:
    return PartialResult(text=text, segment_count=segments)


def F(text: str = "") -> FinalResult:
    return FinalResult(text=text)


def E(reason: str = "network") -> RecognitionFault:
    return RecognitionFault(reason=reason)


def run(coro, timeout: float = 5.0):
    """Run a coroutine on a fresh loop, failing instead of hanging."""
    return asyncio.run(asyncio.wait_for(coro, timeout))


async def collect_until(stream, predicate) -> list[str]:
    seen: list[str] = []
    async for snapshot in stream:
        seen.append(snapshot)
        if predicate(snapshot):
            break
    return seen


class FixedModel:
    """Scoring model stub returning a fixed raw score."""

    name = "fixed"

    def __init__(self, raw: float):
        self.raw = raw
        self.calls = 0

    def predict(self, features) -> float:
        self.calls += 1
        return self.raw


class BrokenModel:
    name = "broken"

    def predict(self, features) -> float:
        raise RuntimeError("model weights corrupted")


@pytest.fixture
def good_metrics() -> NLPMetrics:
    return NLPMetrics(
        total_word_count=60,
        sentence_count=4,
        filler_word_count=2,
        pause_count=6,
        speech_rate=140.0,
        keyword_coverage=0.6,
        semantic_similarity=0.8,
    )
