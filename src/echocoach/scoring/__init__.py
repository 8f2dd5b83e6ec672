"""Answer scoring."""

from echocoach.scoring.fallback import fallback_scores
from echocoach.scoring.pipeline import ScoringPipeline, score

__all__ = ["ScoringPipeline", "fallback_scores", "score"]
