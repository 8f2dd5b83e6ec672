"""echocoach init — write a default configuration."""

from __future__ import annotations

from pathlib import Path

import click

from echocoach.models.config import DEFAULT_CONFIG_NAME, CoachConfig
from echocoach.scoring.model import LinearScoringModel
from echocoach.utils.io import write_yaml
from echocoach.utils.progress import log_error, log_success

MODEL_FILE_NAME = "scoring-model.yaml"


@click.command()
@click.option(
    "--output", "-o",
    default=".",
    type=click.Path(file_okay=False),
    help="Directory to write the configuration into",
)
@click.option("--force", is_flag=True, help="Overwrite an existing configuration")
@click.option(
    "--with-model/--without-model",
    default=True,
    help="Also write linear scoring model weights and enable the model",
)
def init_cmd(output: str, force: bool, with_model: bool) -> None:
    """Write echocoach.yaml (and model weights) with default settings."""
    out_dir = Path(output).resolve()
    config_path = out_dir / DEFAULT_CONFIG_NAME
    if config_path.exists() and not force:
        log_error(f"Configuration already exists: {config_path} (use --force)")
        raise SystemExit(1)

    config = CoachConfig()
    if with_model:
        model_path = out_dir / MODEL_FILE_NAME
        LinearScoringModel().to_yaml(model_path)
        config.scoring.model_path = MODEL_FILE_NAME
        log_success(f"Model weights: {model_path}")

    (out_dir / config.storage.history_dir).mkdir(parents=True, exist_ok=True)
    write_yaml(config_path, config.model_dump(mode="json"))

    log_success(f"Configuration: {config_path}")
    click.echo(f"\nNext: echocoach analyze answer.txt --duration 60 --config {config_path}")
