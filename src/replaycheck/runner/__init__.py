"""Replay Runner - re-issues recorded requests and compares the responses."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import datetime

from replaycheck.comparison import JSONComparator, parse_json
from replaycheck.errors import (
    ComparisonError,
    ErrorContext,
    FixtureLoadError,
    HTTPStatusError,
    MalformedInputError,
    TransportError,
)
from replaycheck.fixtures import Fixture
from replaycheck.http import HttpTransport
from replaycheck.runner.models import (
    FixtureResult,
    OutcomeKind,
    RunnerConfig,
    RunSummary,
    RunTally,
    StatusPolicy,
    mask_headers,
)

logger = logging.getLogger(__name__)

ResultCallback = Callable[[FixtureResult], None]


class ReplayRunner:
    """Replays fixtures against the live service one by one.

    For each fixture the runner sends the recorded request through the
    transport, gates on the live status code, then compares the live body
    with the recorded baseline. A failure in one fixture never stops the
    others; each outcome is passed to ``on_result`` as soon as it is known.

    Example:
        >>> with HttpxTransport(timeout=30) as transport:
        ...     runner = ReplayRunner(transport, credential=token, on_result=reporter.fixture_done)
        ...     summary = runner.run(fixtures)
        >>> summary.exit_code
        0
    """

    def __init__(
        self,
        transport: HttpTransport,
        config: RunnerConfig | None = None,
        credential: str | None = None,
        comparator: JSONComparator | None = None,
        on_result: ResultCallback | None = None,
    ) -> None:
        self.transport = transport
        self.config = config or RunnerConfig()
        self.credential = credential
        self.comparator = comparator or JSONComparator()
        self.on_result = on_result
        self._report_lock = threading.Lock()

    def run(self, fixtures: Sequence[Fixture | FixtureLoadError]) -> RunSummary:
        """Process every fixture and return the finalized summary.

        Items that are FixtureLoadError (as returned by
        ``FixtureLoader.load_many``) are reported as load errors without any
        network call.
        """
        tally = RunTally()
        started_at = datetime.now()

        logger.info(f"Replaying {len(fixtures)} fixture(s) with {self.config.workers} worker(s)")

        if self.config.workers > 1 and len(fixtures) > 1:
            results, stopped_early = self._run_parallel(fixtures, tally)
        else:
            results, stopped_early = self._run_sequential(fixtures, tally)

        summary = RunSummary(
            results=sorted(results, key=lambda r: r.index),
            tally=tally,
            started_at=started_at,
            finished_at=datetime.now(),
            stopped_early=stopped_early,
        )
        logger.info(
            f"Run finished: {tally.matched} matched, {tally.mismatched} mismatched, "
            f"{tally.errors} error(s) in {summary.duration_ms:.0f}ms"
        )
        return summary

    def _run_sequential(
        self,
        fixtures: Sequence[Fixture | FixtureLoadError],
        tally: RunTally,
    ) -> tuple[list[FixtureResult], bool]:
        results: list[FixtureResult] = []

        for index, fixture in enumerate(fixtures):
            result = self._process(fixture, index)
            self._finish(result, tally)
            results.append(result)

            if self.config.fail_fast and not result.passed and index < len(fixtures) - 1:
                logger.info("Fail-fast triggered, stopping.")
                return results, True

        return results, False

    def _run_parallel(
        self,
        fixtures: Sequence[Fixture | FixtureLoadError],
        tally: RunTally,
    ) -> tuple[list[FixtureResult], bool]:
        """Run fixtures on a bounded thread pool."""
        results: list[FixtureResult] = []
        stopped_early = False

        with ThreadPoolExecutor(max_workers=self.config.workers) as executor:
            futures: dict[Future[FixtureResult], int] = {
                executor.submit(self._process, fixture, index): index
                for index, fixture in enumerate(fixtures)
            }

            for future in as_completed(futures):
                if future.cancelled():
                    continue

                result = future.result()
                self._finish(result, tally)
                results.append(result)

                if self.config.fail_fast and not result.passed and not stopped_early:
                    logger.info("Fail-fast triggered, cancelling pending fixtures.")
                    for pending in futures:
                        if pending.cancel():
                            stopped_early = True

        return results, stopped_early

    def _process(self, fixture: Fixture | FixtureLoadError, index: int) -> FixtureResult:
        name = fixture.context.fixture if isinstance(fixture, FixtureLoadError) else fixture.name
        try:
            return self.run_fixture(fixture, index)
        except Exception:
            logger.exception(f"Fixture {name} raised an unexpected error")
            raise

    def _finish(self, result: FixtureResult, tally: RunTally) -> None:
        tally.record(result.outcome)
        if self.on_result is not None:
            with self._report_lock:
                self.on_result(result)

    def run_fixture(self, fixture: Fixture | FixtureLoadError, index: int = 0) -> FixtureResult:
        """Process a single fixture: send, gate on status, compare."""
        if isinstance(fixture, FixtureLoadError):
            return FixtureResult(
                index=index,
                name=fixture.context.fixture or "<unknown>",
                source=fixture.context.source,
                outcome=OutcomeKind.LOAD_ERROR,
                error=fixture,
            )

        request = fixture.request
        headers = request.headers_with_authorization(self.credential)
        result = FixtureResult(
            index=index,
            name=fixture.name,
            source=fixture.source,
            outcome=OutcomeKind.MATCH,
            method=request.method,
            url=request.url,
            headers=headers,
        )
        context = ErrorContext(
            fixture=fixture.name,
            source=fixture.source,
            request={"method": request.method, "url": request.url},
        )

        logger.debug(f"Sending {fixture.describe()} with headers {mask_headers(headers)}")
        start = time.perf_counter()

        try:
            response = self.transport.send(
                request.method,
                request.url,
                headers,
                body=request.body,
                timeout=self.config.request_timeout,
            )
        except TransportError as e:
            e.context.fixture = fixture.name
            e.context.source = fixture.source
            logger.warning(f"Transport error for {fixture.name}: {e}")
            result.outcome = OutcomeKind.TRANSPORT_ERROR
            result.error = e
            return result
        finally:
            result.duration_ms = (time.perf_counter() - start) * 1000

        result.response = response
        context.response = {"status": response.status_code}

        policy: StatusPolicy = self.config.effective_status_policy
        if not policy.accepts(response.status_code, fixture.response.status):
            result.outcome = OutcomeKind.HTTP_STATUS_ERROR
            result.error = HTTPStatusError(
                response.status_code,
                policy.expected(fixture.response.status),
                context=context,
            )
            logger.warning(f"Unexpected status for {fixture.name}: {response.status_code}")
            return result

        try:
            live_body = parse_json(response.body, side="live")
        except MalformedInputError as e:
            e.context = context
            result.outcome = OutcomeKind.MALFORMED_INPUT
            result.error = e
            return result

        try:
            comparison = self.comparator.compare(fixture.response.body, live_body)
        except ComparisonError as e:
            e.context = context
            logger.warning(f"Could not compare {fixture.name}: {e.message}")
            result.outcome = OutcomeKind.COMPARISON_ERROR
            result.error = e
            return result

        result.comparison = comparison
        result.outcome = OutcomeKind.MATCH if comparison.is_full_match else OutcomeKind.MISMATCH
        return result


__all__ = [
    "FixtureResult",
    "OutcomeKind",
    "ReplayRunner",
    "ResultCallback",
    "RunnerConfig",
    "RunSummary",
    "RunTally",
    "StatusPolicy",
    "mask_headers",
]
