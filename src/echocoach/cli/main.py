"""Root CLI group for EchoCoach."""

from __future__ import annotations

import click

from echocoach import __version__


@click.group()
@click.version_option(version=__version__, prog_name="echocoach")
def cli() -> None:
    """EchoCoach — practice spoken interview answers and get them scored."""


# Import and register subcommands
from echocoach.cli.analyze_cmd import analyze_cmd  # noqa: E402
from echocoach.cli.history_cmd import history_cmd  # noqa: E402
from echocoach.cli.init_cmd import init_cmd  # noqa: E402
from echocoach.cli.replay_cmd import replay_cmd  # noqa: E402

cli.add_command(init_cmd, "init")
cli.add_command(analyze_cmd, "analyze")
cli.add_command(replay_cmd, "replay")
cli.add_command(history_cmd, "history")
