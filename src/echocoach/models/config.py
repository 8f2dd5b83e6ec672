"""Configuration models, loaded from ``echocoach.yaml``."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from echocoach.utils.io import read_yaml

DEFAULT_CONFIG_NAME = "echocoach.yaml"

DEFAULT_REFERENCE_ANSWER = (
    "I designed and built a scalable application using a clean architecture. "
    "I defined the API, chose the database, wrote automated tests, and monitored "
    "performance after deployment. I worked closely with my team, handled "
    "trade-offs, and measured the impact with clear metrics."
)


class ListeningConfig(BaseModel):
    """Configuration for the transcript continuity engine."""

    max_consecutive_errors: int = Field(default=3, ge=0, le=20)
    sample_rate: int = 16000


class AnalysisConfig(BaseModel):
    """Lexicons and tunables for metric extraction. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    filler_words: frozenset[str] = frozenset({"um", "uh", "like", "basically"})
    filler_phrases: tuple[str, ...] = ("you know", "sort of", "kind of")
    technical_keywords: frozenset[str] = frozenset({
        "algorithm",
        "api",
        "architecture",
        "cache",
        "database",
        "debugging",
        "deployment",
        "design",
        "framework",
        "latency",
        "optimization",
        "performance",
        "scalability",
        "scalable",
        "security",
        "testing",
        "tests",
    })
    keyword_target: float = Field(default=5.0, gt=0.0)
    reference_answer: str = DEFAULT_REFERENCE_ANSWER
    ideal_speech_rate: float = Field(default=150.0, gt=0.0)
    embedding_model: str | None = None  # sentence-transformers model name
    embedding_retry_attempts: int = Field(default=2, ge=1, le=10)


class ScoringConfig(BaseModel):
    """Configuration for the scoring pipeline."""

    model_path: str | None = None  # YAML weights for LinearScoringModel


class StorageConfig(BaseModel):
    """Configuration for interview history."""

    history_dir: str = "history"


class InterviewConfig(BaseModel):
    """Interview content."""

    interview_type: str = "general"
    questions: list[str] = Field(default_factory=lambda: [
        "Tell me about a recent project you're proud of.",
        "Describe a technical challenge you faced and how you solved it.",
        "How do you prioritize tasks when working on multiple projects?",
        "Tell me about a time you had to learn a new technology quickly.",
        "Where do you see yourself in your career in 3 years?",
    ])


class CoachConfig(BaseModel):
    """Top-level configuration."""

    listening: ListeningConfig = Field(default_factory=ListeningConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    interview: InterviewConfig = Field(default_factory=InterviewConfig)


def load_config(path: Path | str | None = None) -> CoachConfig:
    """Load configuration from YAML. A missing file yields the defaults.

    Relative ``history_dir`` and ``model_path`` entries are resolved against
    the directory holding the config file.
    """
    if path is None:
        return CoachConfig()
    path = Path(path)
    if not path.exists():
        return CoachConfig()

    config = CoachConfig(**read_yaml(path))
    base = path.resolve().parent

    history_dir = Path(config.storage.history_dir)
    if not history_dir.is_absolute():
        config.storage.history_dir = str(base / history_dir)
    if config.scoring.model_path and not Path(config.scoring.model_path).is_absolute():
        config.scoring.model_path = str(base / config.scoring.model_path)
    return config
