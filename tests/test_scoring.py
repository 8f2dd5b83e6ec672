"""Tests for fallback scoring, the primary model and penalties."""

from __future__ import annotations

import math

import pytest
from conftest import BrokenModel, FixedModel

from echocoach.errors import ScoringModelError
from echocoach.models.config import ScoringConfig
from echocoach.models.metrics import NLPMetrics
from echocoach.scoring import fallback_scores, score
from echocoach.scoring.features import sanitize_features
from echocoach.scoring.model import LinearScoringModel, LinearWeights
from echocoach.scoring.pipeline import ScoringPipeline, apply_penalties

SCORE_FIELDS = ("overall", "clarity", "confidence", "technical", "pace")


def _in_range(scores) -> bool:
    return all(0 <= getattr(scores, f) <= 100 for f in SCORE_FIELDS)


def test_fallback_reference_values():
    metrics = NLPMetrics(total_word_count=50, sentence_count=3, speech_rate=150.0)
    s = score(metrics)
    assert s.overall == pytest.approx(65)
    assert s.clarity == pytest.approx(100)
    assert s.confidence == pytest.approx(55)
    assert s.technical == pytest.approx(50)
    assert s.pace == pytest.approx(90)


def test_fallback_rewards_similarity_and_penalizes_fillers():
    metrics = NLPMetrics(
        total_word_count=40,
        filler_word_count=4,
        speech_rate=110.0,
        semantic_similarity=1.0,
    )
    s = fallback_scores(metrics)
    # 40 + 20 + 30 + 10 - 8
    assert s.overall == pytest.approx(92)
    assert s.confidence == pytest.approx(95)
    assert s.clarity == pytest.approx(90)
    assert s.pace == pytest.approx(70)


@pytest.mark.parametrize(
    "metrics",
    [
        NLPMetrics(),
        NLPMetrics(total_word_count=-5, sentence_count=0, filler_word_count=-2, pause_count=-1),
        NLPMetrics(speech_rate=float("nan"), semantic_similarity=float("nan")),
        NLPMetrics(speech_rate=float("inf"), keyword_coverage=float("-inf")),
        NLPMetrics(total_word_count=10, filler_word_count=500, semantic_similarity=7.0),
        NLPMetrics(total_word_count=10**9, sentence_count=1, speech_rate=1e12),
    ],
)
def test_scores_stay_in_range_for_extreme_metrics(metrics):
    assert _in_range(score(metrics))
    assert _in_range(ScoringPipeline(LinearScoringModel()).score(metrics))
    assert _in_range(ScoringPipeline(FixedModel(500)).score(metrics))


def test_sanitized_features_respect_domains():
    f = sanitize_features(
        NLPMetrics(
            total_word_count=0,
            sentence_count=-3,
            speech_rate=float("nan"),
            keyword_coverage=4.0,
            semantic_similarity=-1.0,
        )
    )
    assert f.sentence_count == 1
    assert f.speech_rate == 1.0
    assert f.keyword_coverage == 1.0
    assert f.semantic_similarity == 0.0
    assert 1.0 <= f.avg_sentence_length <= 100.0
    assert all(math.isfinite(v) for v in f.model_inputs().values())


def test_broken_model_falls_back_to_rules(good_metrics):
    assert ScoringPipeline(BrokenModel()).score(good_metrics) == fallback_scores(good_metrics)


def test_non_finite_model_output_falls_back(good_metrics):
    assert ScoringPipeline(FixedModel(float("nan"))).score(good_metrics) == fallback_scores(good_metrics)


def test_primary_path_without_penalties(good_metrics):
    model = FixedModel(80)
    s = ScoringPipeline(model).score(good_metrics)
    assert model.calls == 1
    assert s.overall == pytest.approx(80)
    # 80% of 60 plus 80% of 40
    assert s.confidence == pytest.approx(80)
    assert s.technical == pytest.approx(70)
    assert s.pace == pytest.approx(90)


def test_penalties_accumulate():
    metrics = NLPMetrics(
        total_word_count=10,
        filler_word_count=3,
        speech_rate=300.0,
        keyword_coverage=0.0,
        semantic_similarity=0.0,
    )
    s = ScoringPipeline(FixedModel(80)).score(metrics)
    # speed 5, fillers 10, shortness 10, off-topic 15
    assert s.overall == pytest.approx(40)


def test_slow_speech_penalty(good_metrics):
    slow = good_metrics.model_copy(update={"speech_rate": 40.0})
    assert ScoringPipeline(FixedModel(80)).score(slow).overall == pytest.approx(72)


def test_ceiling_caps_unconvincing_high_scores(good_metrics):
    assert ScoringPipeline(FixedModel(99)).score(good_metrics).overall == pytest.approx(95)


def test_ceiling_lifted_for_near_reference_answers(good_metrics):
    close = good_metrics.model_copy(update={"semantic_similarity": 0.96})
    assert ScoringPipeline(FixedModel(99)).score(close).overall == pytest.approx(99)


def test_penalised_score_is_clamped_at_zero():
    features = sanitize_features(NLPMetrics(total_word_count=0, speech_rate=0.0))
    assert apply_penalties(10, features) == 0.0


def test_linear_model_prediction(good_metrics):
    model = LinearScoringModel()
    expected = 20 + 0.6 * 25 - (2 / 60) * 40 + 4 + 15 * 0.3 + 0.8 * 40 + 140 * 0.05 - 6 * 0.2
    assert model.predict(sanitize_features(good_metrics)) == pytest.approx(expected)


def test_linear_model_yaml_round_trip(tmp_path, good_metrics):
    weights = LinearWeights(intercept=10.0, coefficients={"semantic_similarity": 50.0})
    path = tmp_path / "model.yaml"
    LinearScoringModel(weights).to_yaml(path)

    loaded = LinearScoringModel.from_yaml(path)
    assert loaded.weights == weights
    assert loaded.predict(sanitize_features(good_metrics)) == pytest.approx(50.0)


def test_unknown_feature_is_rejected():
    with pytest.raises(ScoringModelError):
        LinearScoringModel(LinearWeights(coefficients={"charisma": 3.0}))


def test_unreadable_model_file_uses_fallback(tmp_path):
    missing = ScoringPipeline.from_config(ScoringConfig(model_path=str(tmp_path / "nope.yaml")))
    assert missing.model is None

    bad = tmp_path / "bad.yaml"
    bad.write_text("intercept: not-a-number\n")
    assert ScoringPipeline.from_config(ScoringConfig(model_path=str(bad))).model is None


def test_pipeline_without_model_path_uses_rules():
    assert ScoringPipeline.from_config(ScoringConfig()).model is None


@pytest.mark.parametrize(
    "metrics",
    [
        NLPMetrics(total_word_count=1, filler_word_count=10**400),
        NLPMetrics(total_word_count=10**400, sentence_count=1, pause_count=10**400),
        NLPMetrics(total_word_count=1, filler_word_count=-(10**400)),
    ],
)
def test_huge_counts_do_not_overflow(metrics):
    assert _in_range(score(metrics))
    assert _in_range(ScoringPipeline(LinearScoringModel()).score(metrics))


def test_huge_filler_count_saturates_ratio():
    f = sanitize_features(NLPMetrics(total_word_count=1, filler_word_count=10**400))
    assert f.filler_ratio == 1.0
    assert f.filler_word_count == 10**9
