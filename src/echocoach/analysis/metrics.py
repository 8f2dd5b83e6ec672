"""Speech metrics for a finished answer."""

from __future__ import annotations

import math

from echocoach.analysis.embeddings import EmbeddingProvider, semantic_similarity
from echocoach.analysis.fillers import count_fillers
from echocoach.analysis.text import count_pause_marks, split_sentences, tokenize_words
from echocoach.models.config import AnalysisConfig
from echocoach.models.metrics import NLPMetrics


class MetricsExtractor:
    """Turns a final transcript and its duration into ``NLPMetrics``.

    Lexicons come from the injected ``AnalysisConfig``. ``analyze`` never
    raises: an empty transcript or a zero duration yields zero metrics.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        *,
        embeddings: EmbeddingProvider | None = None,
    ):
        self.config = config or AnalysisConfig()
        self.embeddings = embeddings
        self._keywords = frozenset(k.lower() for k in self.config.technical_keywords)

    def analyze(self, transcript: str, duration_seconds: float) -> NLPMetrics:
        cfg = self.config
        transcript = transcript or ""

        words = tokenize_words(transcript)
        word_count = len(words)
        sentence_count = max(len(split_sentences(transcript)), 1)
        filler_count = count_fillers(
            transcript,
            words,
            filler_words=cfg.filler_words,
            filler_phrases=cfg.filler_phrases,
        )
        speech_rate = self.speech_rate(word_count, duration_seconds)

        return NLPMetrics(
            total_word_count=word_count,
            sentence_count=sentence_count,
            filler_word_count=filler_count,
            pause_count=self.pause_count(transcript, word_count, speech_rate),
            speech_rate=speech_rate,
            keyword_coverage=self.keyword_coverage(words),
            semantic_similarity=semantic_similarity(
                transcript,
                cfg.reference_answer,
                self.embeddings,
                retry_attempts=cfg.embedding_retry_attempts,
            ),
        )

    @staticmethod
    def speech_rate(word_count: int, duration_seconds: float) -> float:
        """Words per minute; 0 when the duration is not positive."""
        if not math.isfinite(duration_seconds) or duration_seconds <= 0:
            return 0.0
        return word_count / (duration_seconds / 60.0)

    def pause_count(self, transcript: str, word_count: int, speech_rate: float) -> int:
        """Punctuation pauses plus an estimate for slow speech.

        A coarse proxy: slower than the ideal rate adds roughly one pause per
        ten words, scaled by how far below the ideal rate the speaker is.
        """
        pauses = count_pause_marks(transcript)
        ideal = self.config.ideal_speech_rate
        if speech_rate < ideal:
            pauses += math.floor(((ideal - speech_rate) / ideal) * word_count / 10)
        return pauses

    def keyword_coverage(self, words: list[str]) -> float:
        present = self._keywords.intersection(w.lower() for w in words)
        return min(len(present) / self.config.keyword_target, 1.0)


def analyze(
    transcript: str,
    duration_seconds: float,
    *,
    config: AnalysisConfig | None = None,
    embeddings: EmbeddingProvider | None = None,
) -> NLPMetrics:
    """Compute metrics with a one-off extractor."""
    return MetricsExtractor(config, embeddings=embeddings).analyze(transcript, duration_seconds)
