"""Machine-readable reporter: one JSON object per line."""

from __future__ import annotations

import json
import sys
from typing import Any, TextIO

from replaycheck.errors import ReplayCheckError
from replaycheck.runner.models import FixtureResult, RunSummary


class JSONLinesReporter:
    """Writes each fixture's result as a JSON line, then a summary line.

    Lines carry a ``type`` of ``fixture``, ``summary`` or ``fatal``.
    """

    def __init__(self, stream: TextIO | None = None, show_body: bool = True) -> None:
        self.stream = stream or sys.stdout
        self.show_body = show_body

    def _emit(self, data: dict[str, Any]) -> None:
        self.stream.write(json.dumps(data, default=str, ensure_ascii=False) + "\n")
        self.stream.flush()

    def fixture_done(self, result: FixtureResult) -> None:
        self._emit({"type": "fixture", **result.to_dict(include_body=self.show_body)})

    def summary(self, summary: RunSummary) -> None:
        data = summary.to_dict(include_body=False)
        data.pop("results")
        self._emit({"type": "summary", **data})

    def fatal(self, error: ReplayCheckError) -> None:
        self._emit({"type": "fatal", **error.to_dict()})
