"""Filler word and phrase detection."""

from __future__ import annotations

from typing import Iterable


def count_filler_words(words: Iterable[str], filler_words: Iterable[str]) -> int:
    """Count tokens that exactly match a single-word filler, ignoring case."""
    fillers = {w.lower() for w in filler_words}
    return sum(1 for w in words if w.lower() in fillers)


def count_filler_phrases(text: str, phrases: Iterable[str]) -> int:
    """Count non-overlapping occurrences of multi-word fillers in ``text``.

    Each phrase is scanned independently; the scan resumes at the end of the
    previous match.
    """
    lowered = text.lower()
    count = 0
    for phrase in phrases:
        needle = phrase.lower()
        if not needle:
            continue
        pos = lowered.find(needle)
        while pos != -1:
            count += 1
            pos = lowered.find(needle, pos + len(needle))
    return count


def count_fillers(
    text: str,
    words: list[str],
    *,
    filler_words: Iterable[str],
    filler_phrases: Iterable[str],
) -> int:
    return count_filler_words(words, filler_words) + count_filler_phrases(text, filler_phrases)
