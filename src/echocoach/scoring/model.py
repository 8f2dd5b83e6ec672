"""Primary scoring models."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Protocol

import numpy as np
from pydantic import BaseModel, Field
from ruamel.yaml.error import YAMLError

from echocoach.errors import ScoringModelError
from echocoach.models.metrics import MODEL_FEATURES, ScoringFeatures
from echocoach.utils.io import read_yaml, write_yaml
from echocoach.utils.progress import log_step


class ScoringModel(Protocol):
    """Predicts a raw overall score from the seven sanitized features."""

    name: str

    def predict(self, features: ScoringFeatures) -> float: ...


class LinearWeights(BaseModel):
    """Coefficients of a linear answer-quality model."""

    intercept: float = 20.0
    coefficients: dict[str, float] = Field(default_factory=lambda: {
        "keyword_coverage": 25.0,
        "filler_ratio": -40.0,
        "sentence_count": 1.0,
        "avg_sentence_length": 0.3,
        "semantic_similarity": 40.0,
        "speech_rate": 0.05,
        "pause_count": -0.2,
    })


class LinearScoringModel:
    """``intercept + w · x`` over the model features."""

    name = "linear"

    def __init__(self, weights: LinearWeights | None = None):
        self.weights = weights or LinearWeights()
        unknown = set(self.weights.coefficients) - set(MODEL_FEATURES)
        if unknown:
            raise ScoringModelError(f"Unknown model features: {', '.join(sorted(unknown))}")
        self._w = np.array(
            [self.weights.coefficients.get(name, 0.0) for name in MODEL_FEATURES],
            dtype=np.float64,
        )

    @classmethod
    def from_yaml(cls, path: Path | str) -> LinearScoringModel:
        try:
            weights = LinearWeights(**read_yaml(path))
        except (OSError, TypeError, ValueError, YAMLError) as e:
            raise ScoringModelError(f"Cannot load scoring model from {path}: {e}") from e
        log_step("Score", f"Loaded linear model: {Path(path).name}")
        return cls(weights)

    def to_yaml(self, path: Path | str) -> None:
        write_yaml(path, self.weights.model_dump(mode="json"))

    def predict(self, features: ScoringFeatures) -> float:
        inputs = features.model_inputs()
        x = np.array([inputs[name] for name in MODEL_FEATURES], dtype=np.float64)
        score = float(self.weights.intercept + self._w @ x)
        if not math.isfinite(score):
            raise ScoringModelError(f"Model produced a non-finite score: {score}")
        return score
