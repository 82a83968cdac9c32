"""Console reporter for terminal output."""

from __future__ import annotations

import json

from rich.console import Console
from rich.table import Table
from rich.text import Text

from replaycheck.errors import ReplayCheckError
from replaycheck.reporting.formatter import DiffFormatter, Palette
from replaycheck.runner.models import FixtureResult, OutcomeKind, RunSummary, mask_headers


class ConsoleReporter:
    """Prints each fixture's outcome as it completes, then a summary table.

    Example::

        reporter = ConsoleReporter()
        runner = ReplayRunner(transport, on_result=reporter.fixture_done)
        reporter.summary(runner.run(fixtures))

        # Plain output for files
        reporter = ConsoleReporter(
            console=Console(file=handle, no_color=True),
            formatter=DiffFormatter(Palette.plain()),
        )
    """

    def __init__(
        self,
        console: Console | None = None,
        formatter: DiffFormatter | None = None,
        show_body: bool = True,
        error_console: Console | None = None,
    ) -> None:
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.error_console = error_console or Console(stderr=True, highlight=False, soft_wrap=True)
        self.formatter = formatter or DiffFormatter()
        self.show_body = show_body

    @classmethod
    def create(cls, color: bool = True, show_body: bool = True) -> ConsoleReporter:
        """Build a reporter whose console and palette agree on color."""
        console = Console(highlight=False, soft_wrap=True, no_color=not color)
        error_console = Console(stderr=True, highlight=False, soft_wrap=True, no_color=not color)
        palette = Palette() if color else Palette.plain()
        return cls(
            console=console,
            formatter=DiffFormatter(palette),
            show_body=show_body,
            error_console=error_console,
        )

    def fixture_done(self, result: FixtureResult) -> None:
        """Report one fixture."""
        dim = self.formatter.palette.dim
        out = self.console

        out.print(Text.assemble(("● ", dim), (result.name, "bold"), "  ", self.formatter.outcome_label(result.outcome)))

        if result.source:
            out.print(Text(f"  File: {result.source}", style=dim))

        if result.method is not None:
            out.print(Text(f"  Request URL: {result.url}"))
            out.print(Text(f"  Request method: {result.method}"))
            out.print(Text(f"  Request headers: {json.dumps(mask_headers(result.headers))}"))

        if result.response is not None:
            out.print(Text(f"  Response status: {result.response.status_code} ({result.response.elapsed_ms:.0f}ms)"))
            if self.show_body:
                out.print(Text(f"  Response body: {result.response.text}"))

        if result.error is not None:
            self._print_error(result.error)

        if result.comparison is not None:
            lines = self.formatter.comparison(result.comparison)
            out.print(Text.assemble("  ", lines[0]))
            for line in lines[1:]:
                out.print(Text.assemble("    ", line))

        out.print()

    def _print_error(self, error: ReplayCheckError) -> None:
        style = self.formatter.palette.error
        self.console.print(Text(f"  {error.kind} [{error.error_code.value}]: {error.message}", style=style))
        if error.cause is not None:
            self.console.print(Text(f"    cause: {type(error.cause).__name__}: {error.cause}"))

    def summary(self, summary: RunSummary) -> None:
        """Print the final counts."""
        counts = summary.tally.snapshot()

        table = Table(title="Replay summary", show_header=True, header_style="bold")
        table.add_column("Outcome")
        table.add_column("Count", justify="right")
        for kind in OutcomeKind:
            if counts[kind] or kind in (OutcomeKind.MATCH, OutcomeKind.MISMATCH):
                table.add_row(self.formatter.outcome_label(kind), str(counts[kind]))
        table.add_row(Text("TOTAL", style="bold"), str(summary.tally.total))
        self.console.print(table)

        if summary.stopped_early:
            self.console.print(Text("Stopped early (fail-fast).", style=self.formatter.palette.error))

        if summary.success:
            self.console.print(Text("All fixtures fully matched.", style=self.formatter.palette.match))
        else:
            self.console.print(
                Text(
                    f"{summary.tally.matched} matched, {summary.tally.mismatched} mismatched, "
                    f"{summary.tally.errors} error(s).",
                    style=self.formatter.palette.mismatch,
                )
            )

    def fatal(self, error: ReplayCheckError) -> None:
        """Report an error that aborted the run."""
        self.error_console.print(Text(error.format_verbose(), style=self.formatter.palette.mismatch))
