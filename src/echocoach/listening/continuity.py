"""Transcript accumulation over a recognizer that silently loses context.

Recognizers force-finalize long utterances and restart their hypothesis at
segment 0 without telling anyone. ``TranscriptContinuity`` keeps the committed
text (``accumulated``) apart from the in-progress hypothesis (``volatile``),
commits the hypothesis whenever the segment count goes backwards or an
attempt ends, and ignores events from superseded attempts.
"""

from __future__ import annotations

from echocoach.models.transcript import (
    FinalResult,
    PartialResult,
    TranscriptSessionState,
)


def _completeness(text: str) -> tuple[int, int]:
    return len(text.split()), len(text)


class TranscriptContinuity:
    """Pure state machine behind the continuity engine.

    ``apply_partial``/``apply_final`` return the snapshot to publish, or
    ``None`` when nothing should be emitted (stale generation, or a snapshot
    that would shrink the published transcript).
    """

    def __init__(self) -> None:
        self.state = TranscriptSessionState()
        self._published = ""

    @property
    def generation(self) -> int:
        return self.state.generation

    def reset(self) -> str:
        self.state = TranscriptSessionState(listening=True)
        self._published = ""
        return ""

    def is_current(self, generation: int) -> bool:
        return generation == self.state.generation

    def apply_partial(self, generation: int, event: PartialResult) -> str | None:
        if not self.is_current(generation):
            return None
        state = self.state
        if event.segment_count < state.last_segment_count and state.volatile.strip():
            # segment count went backwards: the recognizer dropped its context
            state.commit_volatile()
        state.last_segment_count = event.segment_count
        state.volatile = event.text.strip()
        return self._emit()

    def apply_final(self, generation: int, event: FinalResult) -> str | None:
        if not self.is_current(generation):
            return None
        state = self.state
        text = event.text.strip()
        if _completeness(text) > _completeness(state.volatile):
            state.volatile = text
        state.commit_volatile()
        return self._emit()

    def advance(self) -> int:
        """Commit pending text and move to the next generation."""
        self.state.commit_volatile()
        self.state.generation += 1
        return self.state.generation

    def finish(self) -> str:
        """Stop listening and return ``accumulated`` joined with ``volatile``."""
        self.state.listening = False
        return self.state.snapshot

    def _emit(self) -> str | None:
        snapshot = self.state.snapshot
        if snapshot == self._published:
            return None
        words, chars = _completeness(snapshot)
        last_words, last_chars = _completeness(self._published)
        if chars < last_chars or words < last_words:
            return None
        self._published = snapshot
        return snapshot
