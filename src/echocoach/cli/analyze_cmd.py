"""echocoach analyze — score a transcript file."""

from __future__ import annotations

import click
from rich.console import Console

from echocoach.errors import CoachError
from echocoach.models.config import DEFAULT_CONFIG_NAME, load_config
from echocoach.pipeline.orchestrator import AnswerOrchestrator
from echocoach.utils.progress import log_error, show_answer_summary

console = Console()


@click.command()
@click.argument("transcript", type=click.File("r", encoding="utf-8"))
@click.option(
    "--duration", "-d",
    required=True,
    type=float,
    help="Answer duration in seconds",
)
@click.option("--question", "-q", default="", help="Question the answer responds to")
@click.option(
    "--config", "-c",
    default=DEFAULT_CONFIG_NAME,
    type=click.Path(dir_okay=False),
    help="Path to echocoach.yaml",
)
@click.option("--json", "as_json", is_flag=True, help="Print the answer record as JSON")
def analyze_cmd(transcript, duration: float, question: str, config: str, as_json: bool) -> None:
    """Compute speech metrics and scores for TRANSCRIPT ('-' for stdin)."""
    try:
        orchestrator = AnswerOrchestrator.from_config(load_config(config))
        answer = orchestrator.build_answer(question, transcript.read().strip(), duration)
    except CoachError as e:
        log_error(f"{e} {e.recovery_hint}")
        raise SystemExit(1)

    if as_json:
        click.echo(answer.model_dump_json(indent=2))
        return
    show_answer_summary(answer.metrics, answer.scores, title=question or "Answer", out=console)
