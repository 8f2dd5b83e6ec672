"""EchoCoach — spoken interview answer coaching and scoring."""

__version__ = "0.1.0"
