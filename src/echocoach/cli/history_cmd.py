"""echocoach history — browse and manage saved interview sessions."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from echocoach.errors import StorageError
from echocoach.models.config import DEFAULT_CONFIG_NAME, load_config
from echocoach.storage.history import SessionStore
from echocoach.utils.progress import (
    log,
    log_error,
    log_success,
    show_answer_summary,
    show_session_analytics,
)

console = Console()


@click.group(invoke_without_command=True)
@click.option(
    "--config", "-c",
    default=DEFAULT_CONFIG_NAME,
    type=click.Path(dir_okay=False),
    help="Path to echocoach.yaml",
)
@click.pass_context
def history_cmd(ctx: click.Context, config: str) -> None:
    """List saved sessions, most recent first."""
    ctx.ensure_object(dict)
    ctx.obj["store"] = SessionStore(load_config(config).storage.history_dir)

    if ctx.invoked_subcommand is not None:
        return

    sessions = ctx.obj["store"].list_sessions()
    if not sessions:
        console.print("[dim]No saved sessions.[/dim]")
        return

    table = Table(title="Interview History", show_lines=True)
    table.add_column("ID", style="bold")
    table.add_column("Date")
    table.add_column("Type")
    table.add_column("Answers", justify="right")
    table.add_column("Average", justify="right")
    for s in sessions:
        table.add_row(
            s.id,
            s.date.strftime("%Y-%m-%d %H:%M"),
            s.interview_type,
            str(len(s.answers)),
            f"{s.overall_score:.0f}",
        )
    console.print(table)


@history_cmd.command("show")
@click.argument("session_id")
@click.pass_context
def show(ctx: click.Context, session_id: str) -> None:
    """Show every answer of one session."""
    try:
        session = ctx.obj["store"].get(session_id)
    except StorageError as e:
        log_error(str(e))
        raise SystemExit(1)

    console.print(
        f"\n[bold]{session.interview_type}[/bold] — {session.date:%Y-%m-%d %H:%M} "
        f"— average {session.overall_score:.0f}/100\n"
    )
    show_session_analytics(session.analytics, out=console)
    console.print()
    for i, answer in enumerate(session.answers, 1):
        console.print(f"[dim]{answer.transcript}[/dim]")
        show_answer_summary(
            answer.metrics,
            answer.scores,
            title=f"{i}. {answer.question or 'Answer'}",
            out=console,
        )


@history_cmd.command("delete")
@click.argument("session_id")
@click.pass_context
def delete(ctx: click.Context, session_id: str) -> None:
    """Delete one session."""
    try:
        removed = ctx.obj["store"].delete(session_id)
    except StorageError as e:
        log_error(str(e))
        raise SystemExit(1)
    if not removed:
        log_error(f"Session not found: {session_id}")
        raise SystemExit(1)
    log_success(f"Deleted {session_id}")


@history_cmd.command("clear")
@click.option("--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_context
def clear(ctx: click.Context, yes: bool) -> None:
    """Delete all sessions."""
    if not yes and not click.confirm("Delete all saved sessions?", default=False):
        log("Nothing deleted.")
        return
    try:
        count = ctx.obj["store"].delete_all()
    except StorageError as e:
        log_error(str(e))
        raise SystemExit(1)
    log_success(f"Deleted {count} session(s)")
