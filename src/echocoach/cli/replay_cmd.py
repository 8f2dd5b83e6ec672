"""echocoach replay — run the live transcript engine over a recognizer script."""

from __future__ import annotations

import asyncio
from pathlib import Path

import click
from pydantic import ValidationError
from rich.console import Console

from echocoach.errors import CoachError, ListeningError
from echocoach.listening.engine import TranscriptContinuityEngine
from echocoach.listening.scripted import ScriptedAudioSource, ScriptedRecognizer, load_script
from echocoach.models.config import DEFAULT_CONFIG_NAME, CoachConfig, load_config
from echocoach.models.session import AnswerRecord
from echocoach.pipeline.orchestrator import AnswerOrchestrator, finish_session
from echocoach.storage.history import SessionStore
from echocoach.utils.progress import log_error, log_step, show_answer_summary

console = Console()


async def _replay(
    script: Path,
    config: CoachConfig,
    *,
    question: str,
    duration: float,
    event_delay: float,
    timeout: float,
) -> AnswerRecord | None:
    recognizer = ScriptedRecognizer(load_script(script), event_delay=event_delay)
    source = ScriptedAudioSource(frame_interval=0.02, sample_rate=config.listening.sample_rate)
    engine = TranscriptContinuityEngine.from_config(source, recognizer, config.listening)
    orchestrator = AnswerOrchestrator.from_config(config)

    return await orchestrator.record(
        engine,
        question,
        until=recognizer.exhausted,
        max_seconds=timeout,
        duration_seconds=duration,
        on_transcript=lambda text: log_step("Live", text or "[dim](listening)[/dim]"),
    )


@click.command()
@click.argument("script", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--duration", "-d",
    required=True,
    type=float,
    help="Spoken duration in seconds the script represents",
)
@click.option("--question", "-q", default=None, help="Question text (defaults to the first configured question)")
@click.option(
    "--config", "-c",
    default=DEFAULT_CONFIG_NAME,
    type=click.Path(dir_okay=False),
    help="Path to echocoach.yaml",
)
@click.option("--event-delay", default=0.05, type=float, help="Seconds between scripted events")
@click.option("--timeout", default=30.0, type=float, help="Give up listening after this many seconds")
@click.option("--save", is_flag=True, help="Save the scored answer to history")
def replay_cmd(
    script: str,
    duration: float,
    question: str | None,
    config: str,
    event_delay: float,
    timeout: float,
    save: bool,
) -> None:
    """Replay SCRIPT through the continuity engine, then score the answer."""
    cfg = load_config(config)
    if question is None:
        question = cfg.interview.questions[0] if cfg.interview.questions else ""

    try:
        answer = asyncio.run(_replay(
            Path(script),
            cfg,
            question=question,
            duration=duration,
            event_delay=event_delay,
            timeout=timeout,
        ))
    except ListeningError as e:
        log_error(f"{e} {e.recovery_hint}")
        if e.transcript:
            console.print(f"[dim]Last transcript:[/dim] {e.transcript}")
        raise SystemExit(1)
    except (CoachError, ValidationError) as e:
        log_error(str(e))
        raise SystemExit(1)

    if answer is None:
        console.print("[yellow]No speech captured.[/yellow]")
        return

    console.print(f"\n[bold]Transcript:[/bold] {answer.transcript}\n")
    show_answer_summary(answer.metrics, answer.scores, title=question or "Answer", out=console)

    if save:
        store = SessionStore(cfg.storage.history_dir)
        try:
            finish_session([answer], store, interview_type=cfg.interview.interview_type)
        except CoachError as e:
            log_error(f"{e} {e.recovery_hint}")
            raise SystemExit(1)
