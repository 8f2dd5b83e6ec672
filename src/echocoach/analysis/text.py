"""Word and sentence tokenization."""

from __future__ import annotations

import re

_WORD_RE = re.compile(r"\w+(?:['’]\w+)*", re.UNICODE)
_SENTENCE_END_RE = re.compile(r"[.!?]+")
_PAUSE_MARKS = ",.;"


def tokenize_words(text: str) -> list[str]:
    return _WORD_RE.findall(text)


def split_sentences(text: str) -> list[str]:
    """Split on terminal punctuation, keeping only pieces that contain a word."""
    return [
        piece.strip()
        for piece in _SENTENCE_END_RE.split(text)
        if _WORD_RE.search(piece)
    ]


def count_pause_marks(text: str) -> int:
    return sum(text.count(mark) for mark in _PAUSE_MARKS)
