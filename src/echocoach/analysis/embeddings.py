"""Sentence embeddings and answer-to-reference similarity."""

from __future__ import annotations

from typing import Protocol, Sequence

import numpy as np

from echocoach.utils.progress import log_warning
from echocoach.utils.retry import retry_transient


class EmbeddingProvider(Protocol):
    """Returns a sentence vector for ``text``, or ``None`` if unavailable."""

    def vector(self, text: str) -> Sequence[float] | None: ...


class SentenceTransformerEmbeddings:
    """Local sentence-transformers model as an embedding provider."""

    def __init__(self, model_name: str = "all-MiniLM-L6-v2", *, device: str = "cpu"):
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError:
            raise ImportError(
                "sentence-transformers is required for semantic similarity. "
                "Install with: pip install echocoach[embeddings]"
            )
        self.model_name = model_name
        self._model = SentenceTransformer(model_name, device=device)

    def vector(self, text: str) -> list[float] | None:
        if not text.strip():
            return None
        return self._model.encode(text).tolist()


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float | None:
    """Cosine of the angle between two vectors; ``None`` if undefined."""
    try:
        va = np.asarray(a, dtype=np.float64).ravel()
        vb = np.asarray(b, dtype=np.float64).ravel()
    except (TypeError, ValueError):
        return None
    if va.size == 0 or va.shape != vb.shape:
        return None
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if not np.isfinite(denom) or denom == 0.0:
        return None
    cos = float(np.dot(va, vb) / denom)
    if not np.isfinite(cos):
        return None
    return max(-1.0, min(1.0, cos))


def semantic_similarity(
    transcript: str,
    reference: str,
    provider: EmbeddingProvider | None,
    *,
    retry_attempts: int = 2,
) -> float:
    """Similarity of the answer to the reference, mapped from [-1, 1] to [0, 1].

    Returns 0 whenever either embedding is unavailable.
    """
    if provider is None or not transcript.strip() or not reference.strip():
        return 0.0

    fetch = retry_transient(retry_attempts)(provider.vector)
    try:
        answer_vec = fetch(transcript)
        reference_vec = fetch(reference)
    except Exception as e:
        log_warning(f"Embedding unavailable, similarity set to 0: {e}")
        return 0.0
    if answer_vec is None or reference_vec is None:
        return 0.0

    cos = cosine_similarity(answer_vec, reference_vec)
    if cos is None:
        return 0.0
    return min(max((cos + 1.0) / 2.0, 0.0), 1.0)


def load_embeddings(model_name: str | None) -> EmbeddingProvider | None:
    """Build the configured provider, or ``None`` if unset or it cannot load."""
    if not model_name:
        return None
    try:
        return SentenceTransformerEmbeddings(model_name)
    except (ImportError, OSError) as e:
        log_warning(f"Semantic similarity disabled: {e}")
        return None
