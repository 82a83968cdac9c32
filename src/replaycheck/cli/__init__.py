"""replaycheck CLI - Command line interface for replaycheck."""

from __future__ import annotations

from replaycheck.cli.commands import cli, setup_logging


def main() -> None:
    """Main entry point for the replaycheck CLI."""
    cli()


__all__ = [
    "main",
    "cli",
    "setup_logging",
]
