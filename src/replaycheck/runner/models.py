"""Runner configuration and per-fixture / per-run result models."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from replaycheck.comparison import Comparison
from replaycheck.errors import ReplayCheckError
from replaycheck.fixtures import AUTHORIZATION_HEADER
from replaycheck.http import DEFAULT_TIMEOUT, LiveResponse


class StatusPolicy(Enum):
    """Which live status codes allow the body to be compared.

    - OK: only 200
    - SUCCESS: any 2xx
    - BASELINE: exactly the status recorded in the fixture
    """

    OK = "ok"
    SUCCESS = "success"
    BASELINE = "baseline"

    def accepts(self, live_status: int, recorded_status: int) -> bool:
        if self is StatusPolicy.OK:
            return live_status == 200
        if self is StatusPolicy.SUCCESS:
            return 200 <= live_status < 300
        return live_status == recorded_status

    def expected(self, recorded_status: int) -> str:
        if self is StatusPolicy.OK:
            return "200"
        if self is StatusPolicy.SUCCESS:
            return "2xx"
        return f"{recorded_status} as recorded"


@dataclass
class RunnerConfig:
    """Options controlling a replay run.

    Attributes:
        strict_status_check: Require the live status to equal the recorded
            one. Overrides status_policy when set.
        status_policy: Status gating when strict_status_check is off.
        request_timeout: Per-request timeout in seconds.
        skip_body_logging: Leave live response bodies out of reports.
        workers: Number of fixtures processed in parallel (1 = sequential).
        fail_fast: Stop starting new fixtures after the first failure.
    """

    strict_status_check: bool = False
    status_policy: StatusPolicy = StatusPolicy.OK
    request_timeout: float = DEFAULT_TIMEOUT
    skip_body_logging: bool = False
    workers: int = 1
    fail_fast: bool = False

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if isinstance(self.status_policy, str):
            self.status_policy = StatusPolicy(self.status_policy)

    @property
    def effective_status_policy(self) -> StatusPolicy:
        return StatusPolicy.BASELINE if self.strict_status_check else self.status_policy


class OutcomeKind(Enum):
    """Terminal state of one fixture."""

    MATCH = "match"
    MISMATCH = "mismatch"
    TRANSPORT_ERROR = "transport_error"
    HTTP_STATUS_ERROR = "http_status_error"
    MALFORMED_INPUT = "malformed_input"
    COMPARISON_ERROR = "comparison_error"
    LOAD_ERROR = "load_error"

    @property
    def is_error(self) -> bool:
        return self not in (OutcomeKind.MATCH, OutcomeKind.MISMATCH)


def mask_headers(headers: dict[str, str]) -> dict[str, str]:
    """Copy of headers with the authorization value hidden."""
    return {
        key: ("***" if key.lower() == AUTHORIZATION_HEADER.lower() else value)
        for key, value in headers.items()
    }


@dataclass
class FixtureResult:
    """Outcome of processing one fixture."""

    index: int
    name: str
    outcome: OutcomeKind
    source: str | None = None
    method: str | None = None
    url: str | None = None
    headers: dict[str, str] = field(default_factory=dict)
    response: LiveResponse | None = None
    comparison: Comparison | None = None
    error: ReplayCheckError | None = None
    duration_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return self.outcome is OutcomeKind.MATCH

    @property
    def status_code(self) -> int | None:
        return self.response.status_code if self.response else None

    def to_dict(self, include_body: bool = True) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "name": self.name,
            "source": self.source,
            "outcome": self.outcome.value,
            "request": {
                "method": self.method,
                "url": self.url,
                "headers": mask_headers(self.headers),
            },
            "status_code": self.status_code,
            "elapsed_ms": round(self.response.elapsed_ms, 2) if self.response else None,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.comparison is not None:
            data["comparison"] = self.comparison.to_dict()
        if self.error is not None:
            data["error"] = self.error.to_dict()
        if include_body and self.response is not None:
            data["body"] = self.response.text
        return data


class RunTally:
    """Thread-safe counts of outcomes per kind."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._counts: dict[OutcomeKind, int] = {kind: 0 for kind in OutcomeKind}

    def record(self, kind: OutcomeKind) -> None:
        with self._lock:
            self._counts[kind] += 1

    def count(self, kind: OutcomeKind) -> int:
        with self._lock:
            return self._counts[kind]

    def snapshot(self) -> dict[OutcomeKind, int]:
        with self._lock:
            return dict(self._counts)

    @property
    def total(self) -> int:
        return sum(self.snapshot().values())

    @property
    def matched(self) -> int:
        return self.count(OutcomeKind.MATCH)

    @property
    def mismatched(self) -> int:
        return self.count(OutcomeKind.MISMATCH)

    @property
    def errors(self) -> int:
        counts = self.snapshot()
        return sum(n for kind, n in counts.items() if kind.is_error)

    def to_dict(self) -> dict[str, int]:
        data = {kind.value: n for kind, n in self.snapshot().items()}
        data["total"] = sum(data.values())
        return data


@dataclass
class RunSummary:
    """Finalized result of a replay run."""

    results: list[FixtureResult]
    tally: RunTally
    started_at: datetime
    finished_at: datetime
    stopped_early: bool = False

    @property
    def success(self) -> bool:
        return not self.stopped_early and self.tally.total == self.tally.matched

    @property
    def exit_code(self) -> int:
        return 0 if self.success else 1

    @property
    def duration_ms(self) -> float:
        return (self.finished_at - self.started_at).total_seconds() * 1000

    def to_dict(self, include_body: bool = True) -> dict[str, Any]:
        return {
            "success": self.success,
            "started_at": self.started_at.isoformat(),
            "finished_at": self.finished_at.isoformat(),
            "duration_ms": round(self.duration_ms, 2),
            "stopped_early": self.stopped_early,
            "tally": self.tally.to_dict(),
            "results": [r.to_dict(include_body=include_body) for r in self.results],
        }
