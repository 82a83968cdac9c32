"""Tests for the httpx-backed transport."""

from __future__ import annotations

import json

import httpx
import pytest

from replaycheck.errors import (
    ErrorCode,
    TransportConnectError,
    TransportError,
    TransportTimeoutError,
)
from replaycheck.http import HttpTransport, HttpxTransport, LiveResponse
from replaycheck.runner import OutcomeKind, ReplayRunner
from tests.conftest import make_fixture


def make_transport(handler, timeout: float = 30.0) -> HttpxTransport:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return HttpxTransport(timeout=timeout, client=client)


class TestHttpxTransport:
    """Tests for HttpxTransport.send."""

    def test_satisfies_protocol(self) -> None:
        assert isinstance(make_transport(lambda request: httpx.Response(200)), HttpTransport)

    def test_returns_status_and_raw_body(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"status": "ok"})

        response = make_transport(handler).send("GET", "https://api.example.com/x", {})

        assert isinstance(response, LiveResponse)
        assert response.status_code == 200
        assert json.loads(response.body) == {"status": "ok"}
        assert response.is_success
        assert response.elapsed_ms >= 0

    def test_sends_method_headers_and_body(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(201, content=b"{}")

        make_transport(handler).send(
            "POST",
            "https://api.example.com/items",
            {"Authorization": "Bearer t", "X-Trace": "1"},
            body={"name": "widget"},
        )

        [request] = seen
        assert request.method == "POST"
        assert str(request.url) == "https://api.example.com/items"
        assert request.headers["Authorization"] == "Bearer t"
        assert request.headers["X-Trace"] == "1"
        assert json.loads(request.content) == {"name": "widget"}

    def test_no_body_when_fixture_has_none(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"{}")

        make_transport(handler).send("GET", "https://api.example.com/x", {})

        assert seen[0].content == b""

    def test_per_call_timeout_overrides_default(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, content=b"{}")

        transport = make_transport(handler, timeout=30.0)
        transport.send("GET", "https://api.example.com/a", {})
        transport.send("GET", "https://api.example.com/b", {}, timeout=2.5)

        assert seen[0].extensions["timeout"]["read"] == 30.0
        assert seen[1].extensions["timeout"]["read"] == 2.5

    def test_non_2xx_is_returned_not_raised(self) -> None:
        response = make_transport(lambda request: httpx.Response(503, text="down")).send(
            "GET", "https://api.example.com/x", {}
        )

        assert response.status_code == 503
        assert not response.is_success
        assert response.text == "down"

    def test_timeout_is_mapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(TransportTimeoutError) as exc_info:
            make_transport(handler, timeout=5).send("GET", "https://api.example.com/slow", {})

        error = exc_info.value
        assert error.error_code is ErrorCode.TRANSPORT_TIMEOUT
        assert "5s" in error.message
        assert error.context.request == {"method": "GET", "url": "https://api.example.com/slow"}
        assert isinstance(error.cause, httpx.ReadTimeout)

    def test_connect_error_is_mapped(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportConnectError) as exc_info:
            make_transport(handler).send("GET", "https://api.example.com/x", {})

        assert isinstance(exc_info.value, TransportError)
        assert exc_info.value.error_code is ErrorCode.TRANSPORT_CONNECT

    def test_other_network_errors_are_transport_errors(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadError("connection reset", request=request)

        with pytest.raises(TransportError) as exc_info:
            make_transport(handler).send("GET", "https://api.example.com/x", {})

        assert exc_info.value.error_code is ErrorCode.TRANSPORT_FAILED

    def test_does_not_close_borrowed_client(self) -> None:
        client = httpx.Client(transport=httpx.MockTransport(lambda request: httpx.Response(200)))

        with HttpxTransport(client=client):
            pass

        assert not client.is_closed

    def test_closes_own_client(self) -> None:
        transport = HttpxTransport(timeout=1)
        transport.close()

        assert transport._client.is_closed

    def test_follows_redirects_by_default(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/old":
                return httpx.Response(301, headers={"Location": "https://api.example.com/new"})
            return httpx.Response(200, json={"moved": True})

        response = make_transport(handler).send("GET", "https://api.example.com/old", {})

        assert response.status_code == 200
        assert json.loads(response.body) == {"moved": True}

    def test_redirects_can_be_reported(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(301, headers={"Location": "https://api.example.com/new"})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        response = HttpxTransport(client=client, follow_redirects=False).send("GET", "https://api.example.com/old", {})

        assert response.status_code == 301

    def test_non_ascii_header_is_transport_error(self) -> None:
        transport = make_transport(lambda request: httpx.Response(200, content=b"{}"))

        with pytest.raises(TransportError) as exc_info:
            transport.send("GET", "https://api.example.com/x", {"X-Name": "café"})

        assert exc_info.value.error_code is ErrorCode.TRANSPORT_FAILED
        assert isinstance(exc_info.value.cause, ValueError)
        assert exc_info.value.context.request == {"method": "GET", "url": "https://api.example.com/x"}

    def test_unbuildable_request_is_isolated_in_run(self) -> None:
        transport = make_transport(lambda request: httpx.Response(200, json={"ok": True}))
        bad = make_fixture("bad", {"ok": True}, headers={"X-Name": "café"})
        good = make_fixture("good", {"ok": True})

        summary = ReplayRunner(transport).run([bad, good])

        assert [r.outcome for r in summary.results] == [OutcomeKind.TRANSPORT_ERROR, OutcomeKind.MATCH]
