"""Reporting surface for replay runs."""

from __future__ import annotations

from typing import Protocol

from replaycheck.errors import ReplayCheckError
from replaycheck.reporting.console import ConsoleReporter
from replaycheck.reporting.formatter import OUTCOME_LABELS, DiffFormatter, Palette
from replaycheck.reporting.json_lines import JSONLinesReporter
from replaycheck.runner.models import FixtureResult, RunSummary


class Reporter(Protocol):
    """What the CLI needs from a reporter."""

    def fixture_done(self, result: FixtureResult) -> None: ...

    def summary(self, summary: RunSummary) -> None: ...

    def fatal(self, error: ReplayCheckError) -> None: ...


def create_reporter(output_format: str = "text", color: bool = True, show_body: bool = True) -> Reporter:
    """Build the reporter for an output format ("text" or "json")."""
    if output_format == "json":
        return JSONLinesReporter(show_body=show_body)
    if output_format == "text":
        return ConsoleReporter.create(color=color, show_body=show_body)
    raise ValueError(f"Unknown output format: {output_format}")


__all__ = [
    "OUTCOME_LABELS",
    "ConsoleReporter",
    "DiffFormatter",
    "JSONLinesReporter",
    "Palette",
    "Reporter",
    "create_reporter",
]
