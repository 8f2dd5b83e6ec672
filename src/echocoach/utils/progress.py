"""Console reporting helpers built on Rich."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

if TYPE_CHECKING:
    from echocoach.models.metrics import AnswerScores, NLPMetrics
    from echocoach.models.session import SessionAnalytics

console = Console(stderr=True)


def _stamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def log(message: str, *, style: str = "bold") -> None:
    """Print a timestamped line."""
    console.print(f"[dim]\\[{_stamp()}][/dim] {message}", style=style, highlight=False)


def log_step(step: str, message: str) -> None:
    """Print a timestamped line tagged with the component that produced it."""
    console.print(
        f"[dim]\\[{_stamp()}][/dim] [bold cyan]{step}[/bold cyan] {message}",
        highlight=False,
    )


def log_success(message: str) -> None:
    log(f"[green]✓[/green] {message}", style="")


def log_warning(message: str) -> None:
    log(f"[yellow]⚠[/yellow] {message}", style="")


def log_error(message: str) -> None:
    log(f"[red]✗[/red] {message}", style="")


def _score_style(value: float) -> str:
    if value >= 75:
        return "green"
    if value >= 50:
        return "yellow"
    return "red"


def show_answer_summary(
    metrics: NLPMetrics,
    scores: AnswerScores,
    *,
    title: str = "Answer",
    out: Console | None = None,
) -> None:
    """Render metrics and scores for one answer side by side."""
    metric_table = Table(show_header=False, box=None, padding=(0, 2))
    metric_table.add_column(style="bold")
    metric_table.add_column()
    metric_table.add_row("Words", str(metrics.total_word_count))
    metric_table.add_row("Sentences", str(metrics.sentence_count))
    metric_table.add_row("Fillers", f"{metrics.filler_word_count} ({metrics.filler_ratio:.0%})")
    metric_table.add_row("Pauses (est.)", str(metrics.pause_count))
    metric_table.add_row("Speech rate", f"{metrics.speech_rate:.0f} wpm")
    metric_table.add_row("Keyword coverage", f"{metrics.keyword_coverage:.0%}")
    metric_table.add_row("Similarity", f"{metrics.semantic_similarity:.2f}")

    score_table = Table(show_header=False, box=None, padding=(0, 2))
    score_table.add_column(style="bold")
    score_table.add_column(justify="right")
    for name, value in scores.model_dump().items():
        score_table.add_row(name.capitalize(), f"[{_score_style(value)}]{value:.0f}[/]")

    grid = Table.grid(padding=(0, 4))
    grid.add_row(metric_table, score_table)

    (out or console).print(Panel(grid, title=f"[bold]{title}[/bold]", border_style="cyan"))


def show_session_analytics(analytics: SessionAnalytics, *, out: Console | None = None) -> None:
    """Render session averages, totals and coaching tips."""
    table = Table(title="Session Analytics", show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold")
    table.add_column(justify="right")
    for name in ("overall", "clarity", "confidence", "technical", "pace"):
        value = getattr(analytics, name)
        table.add_row(f"Avg {name}", f"[{_score_style(value)}]{value:.0f}[/]")
    table.add_row("Avg speech rate", f"{analytics.average_speech_rate:.0f} wpm")
    table.add_row("Avg similarity", f"{analytics.average_similarity:.2f}")
    table.add_row("Total words", str(analytics.total_word_count))
    table.add_row("Total fillers", str(analytics.total_filler_words))

    out = out or console
    out.print(table)
    out.print("\n[bold]Tips[/bold]")
    for tip in analytics.tips:
        out.print(f"  • {tip}")
