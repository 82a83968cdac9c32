"""Tests for console and JSON Lines reporters."""

from __future__ import annotations

import io
import json

import pytest
from rich.console import Console

from replaycheck.comparison import compare
from replaycheck.errors import CredentialLoadError, ErrorContext, FixtureLoadError
from replaycheck.reporting import (
    ConsoleReporter,
    DiffFormatter,
    JSONLinesReporter,
    Palette,
    create_reporter,
)
from replaycheck.runner import FixtureResult, OutcomeKind, ReplayRunner, RunSummary
from tests.conftest import FakeTransport, make_fixture


def plain_reporter(show_body: bool = True) -> tuple[ConsoleReporter, io.StringIO, io.StringIO]:
    out = io.StringIO()
    err = io.StringIO()
    reporter = ConsoleReporter(
        console=Console(file=out, no_color=True, highlight=False, soft_wrap=True),
        error_console=Console(file=err, no_color=True, highlight=False, soft_wrap=True),
        formatter=DiffFormatter(Palette.plain()),
        show_body=show_body,
    )
    return reporter, out, err


def sample_run(transport: FakeTransport) -> RunSummary:
    ok = make_fixture("users", {"users": [1]})
    changed = make_fixture("leads-insights", {"status": "ok", "items": [1, 2]})
    transport.respond(ok.request.url, {"users": [1]})
    transport.respond(changed.request.url, {"status": "ok", "items": [1, 2, 3]})
    return ReplayRunner(transport, credential="Bearer secret").run([ok, changed])


class TestDiffFormatter:
    """Tests for DiffFormatter."""

    def test_full_match(self) -> None:
        lines = DiffFormatter(Palette.plain()).comparison(compare({"a": 1}, {"a": 1}))
        assert [line.plain for line in lines] == ["FullMatch"]

    def test_difference_lines(self) -> None:
        result = compare(
            {"a": 1, "b": "x", "c": [1]},
            {"a": 2, "b": 3, "d": None},
        )

        lines = [line.plain for line in DiffFormatter().comparison(result)]

        assert lines == [
            "NoMatch: 4 differences",
            "a: ~ value 1 -> 2",
            'b: ~ type string "x" -> number 3',
            "c: - removed [1]",
            "d: + added null",
        ]

    def test_superset_is_noted(self) -> None:
        lines = DiffFormatter().comparison(compare({"a": 1}, {"a": 1, "b": 2}))
        assert lines[0].plain == "NoMatch: 1 difference (live response only adds fields)"

    @pytest.mark.parametrize(
        "outcome, label",
        [
            (OutcomeKind.MATCH, "MATCH"),
            (OutcomeKind.TRANSPORT_ERROR, "TRANSPORT ERROR"),
            (OutcomeKind.MALFORMED_INPUT, "MALFORMED RESPONSE"),
            (OutcomeKind.COMPARISON_ERROR, "COMPARISON ERROR"),
        ],
    )
    def test_outcome_labels(self, outcome, label) -> None:
        assert DiffFormatter().outcome_label(outcome).plain == label

    def test_plain_palette_has_no_styles(self) -> None:
        text = DiffFormatter(Palette.plain()).outcome_label(OutcomeKind.MISMATCH)
        assert not text.style


class TestConsoleReporter:
    """Tests for ConsoleReporter."""

    def test_fixture_block(self, transport: FakeTransport) -> None:
        reporter, out, _ = plain_reporter()
        summary = sample_run(transport)

        reporter.fixture_done(summary.results[1])
        text = out.getvalue()

        assert "● leads-insights  MISMATCH" in text
        assert "Request URL: https://api.example.com/leads-insights" in text
        assert "Request method: GET" in text
        assert '"Authorization": "***"' in text
        assert "secret" not in text
        assert "Response status: 200 (1ms)" in text
        assert 'Response body: {"status": "ok", "items": [1, 2, 3]}' in text
        assert "NoMatch: 1 difference" in text
        assert "items[2]: + added 3" in text

    def test_skip_body_logging(self, transport: FakeTransport) -> None:
        reporter, out, _ = plain_reporter(show_body=False)
        summary = sample_run(transport)

        reporter.fixture_done(summary.results[1])

        assert "Response body" not in out.getvalue()

    def test_error_block(self) -> None:
        reporter, out, _ = plain_reporter()
        error = FixtureLoadError(
            "Invalid JSON in broken.json",
            context=ErrorContext(fixture="broken", source="requests/broken.json"),
            cause=ValueError("Expecting value"),
        )

        reporter.fixture_done(
            FixtureResult(index=0, name="broken", outcome=OutcomeKind.LOAD_ERROR, source=error.context.source, error=error)
        )
        text = out.getvalue()

        assert "● broken  LOAD ERROR" in text
        assert "File: requests/broken.json" in text
        assert "FixtureLoadError [E201]: Invalid JSON in broken.json" in text
        assert "cause: ValueError: Expecting value" in text
        assert "Request URL" not in text

    def test_summary_table(self, transport: FakeTransport) -> None:
        reporter, out, _ = plain_reporter()

        reporter.summary(sample_run(transport))
        text = out.getvalue()

        assert "Replay summary" in text
        assert "TOTAL" in text
        assert "1 matched, 1 mismatched, 0 error(s)." in text

    def test_summary_all_matched(self, transport: FakeTransport) -> None:
        reporter, out, _ = plain_reporter()
        fixture = make_fixture("a", {})
        transport.respond(fixture.request.url, {})

        reporter.summary(ReplayRunner(transport).run([fixture]))

        assert "All fixtures fully matched." in out.getvalue()

    def test_fatal_goes_to_error_console(self) -> None:
        reporter, out, err = plain_reporter()

        reporter.fatal(CredentialLoadError("Cannot read credential file data/token.json"))

        assert out.getvalue() == ""
        assert "CredentialLoadError: Cannot read credential file" in err.getvalue()
        assert "Suggestions:" in err.getvalue()


class TestJSONLinesReporter:
    """Tests for JSONLinesReporter."""

    def test_one_line_per_fixture_then_summary(self, transport: FakeTransport) -> None:
        stream = io.StringIO()
        reporter = JSONLinesReporter(stream)
        summary = sample_run(transport)

        for result in summary.results:
            reporter.fixture_done(result)
        reporter.summary(summary)

        records = [json.loads(line) for line in stream.getvalue().splitlines()]
        assert [r["type"] for r in records] == ["fixture", "fixture", "summary"]
        assert records[0]["outcome"] == "match"
        assert records[1]["comparison"]["differences"] == [
            {"path": "items[2]", "kind": "added", "live": 3}
        ]
        assert records[1]["request"]["headers"]["Authorization"] == "***"
        assert records[1]["elapsed_ms"] == 1.0
        assert records[2]["tally"]["total"] == 2
        assert records[2]["success"] is False
        assert "results" not in records[2]

    def test_show_body_false_omits_body(self, transport: FakeTransport) -> None:
        stream = io.StringIO()
        summary = sample_run(transport)

        JSONLinesReporter(stream, show_body=False).fixture_done(summary.results[0])

        assert "body" not in json.loads(stream.getvalue())

    def test_fatal_record(self) -> None:
        stream = io.StringIO()

        JSONLinesReporter(stream).fatal(CredentialLoadError())

        record = json.loads(stream.getvalue())
        assert record["type"] == "fatal"
        assert record["error_code"] == "E202"
        assert record["fatal"] is True


class TestCreateReporter:
    """Tests for create_reporter."""

    def test_text(self) -> None:
        reporter = create_reporter("text", color=False, show_body=False)

        assert isinstance(reporter, ConsoleReporter)
        assert reporter.show_body is False
        assert reporter.console.no_color

    def test_json(self) -> None:
        assert isinstance(create_reporter("json"), JSONLinesReporter)

    def test_unknown_format(self) -> None:
        with pytest.raises(ValueError):
            create_reporter("xml")
