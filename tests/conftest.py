"""Pytest fixtures for replaycheck tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from replaycheck.errors import TransportError, TransportTimeoutError
from replaycheck.fixtures import Fixture, RecordedRequest, RecordedResponse
from replaycheck.http import LiveResponse


class SentRequest:
    """What the fake transport was asked to send."""

    def __init__(self, method: str, url: str, headers: dict[str, str], body: Any, timeout: float | None) -> None:
        self.method = method
        self.url = url
        self.headers = headers
        self.body = body
        self.timeout = timeout


class FakeTransport:
    """Scripted HttpTransport keyed by URL.

    Each URL maps to a LiveResponse to return or an exception to raise.
    Unknown URLs answer 404.
    """

    def __init__(self, responses: dict[str, LiveResponse | Exception] | None = None) -> None:
        self.responses = responses or {}
        self.sent: list[SentRequest] = []

    def respond(self, url: str, body: Any = None, status: int = 200, raw: bytes | None = None) -> None:
        content = raw if raw is not None else json.dumps(body).encode()
        self.responses[url] = LiveResponse(status_code=status, body=content, elapsed_ms=1.0)

    def fail(self, url: str, error: Exception) -> None:
        self.responses[url] = error

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any = None,
        timeout: float | None = None,
    ) -> LiveResponse:
        self.sent.append(SentRequest(method, url, headers, body, timeout))
        outcome = self.responses.get(url, LiveResponse(status_code=404, body=b'{"error": "not found"}'))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_fixture(
    name: str,
    body: Any,
    url: str | None = None,
    status: int = 200,
    method: str = "GET",
    headers: dict[str, str] | None = None,
) -> Fixture:
    """Build a fixture without touching the filesystem."""
    return Fixture(
        name=name,
        request=RecordedRequest(
            url=url or f"https://api.example.com/{name}",
            method=method,
            headers=headers or {},
        ),
        response=RecordedResponse(status=status, body=body),
    )


def write_fixture(directory: Path, name: str, data: Any) -> Path:
    """Write a fixture file and return its path."""
    path = directory / f"{name}.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


@pytest.fixture
def transport() -> FakeTransport:
    """Create an empty fake transport."""
    return FakeTransport()


@pytest.fixture
def timeout_error() -> TransportError:
    """A transport timeout like the one HttpxTransport raises."""
    return TransportTimeoutError("Request timed out after 30s")


@pytest.fixture
def fixture_dir(tmp_path: Path) -> Path:
    """A directory holding two valid fixtures."""
    directory = tmp_path / "requests"
    directory.mkdir()
    write_fixture(
        directory,
        "leads-insights",
        {
            "request": {
                "url": "https://api.example.com/leads/insights",
                "method": "GET",
                "headers": {"Accept": "application/json"},
            },
            "response": {"status": 200, "body": {"status": "ok", "items": [1, 2]}},
        },
    )
    write_fixture(
        directory,
        "insights-v1-credits",
        {
            "request": {
                "url": "https://api.example.com/insights/v1/credits",
                "method": "GET",
                "headers": {},
            },
            "response": {"status": 200, "body": {"credits": 10}},
        },
    )
    return directory


@pytest.fixture
def credential_file(tmp_path: Path) -> Path:
    """A valid credential file at the default data/token.json location."""
    path = tmp_path / "data" / "token.json"
    path.parent.mkdir(exist_ok=True)
    path.write_text(json.dumps({"authorization": "Bearer secret-token"}), encoding="utf-8")
    return path
