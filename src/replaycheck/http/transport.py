"""HTTP transport used to re-issue recorded requests."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

import httpx

from replaycheck.errors import (
    ErrorContext,
    TransportConnectError,
    TransportError,
    TransportTimeoutError,
)

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


@dataclass
class LiveResponse:
    """The response obtained for a fixture's request at run time."""

    status_code: int
    body: bytes = b""
    headers: dict[str, str] = field(default_factory=dict)
    elapsed_ms: float = 0.0

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@runtime_checkable
class HttpTransport(Protocol):
    """Performs one HTTP call and returns the raw response.

    Implementations raise TransportError (or a subclass) for network-level
    failures. Non-2xx statuses are returned, not raised.
    """

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any = None,
        timeout: float | None = None,
    ) -> LiveResponse: ...


class HttpxTransport:
    """HttpTransport backed by a shared ``httpx.Client``.

    The client's connection pool is thread-safe, so one transport can serve
    a pool of workers. Redirects are followed by default and the final
    response is the one compared.

    Example::

        with HttpxTransport(timeout=10) as transport:
            response = transport.send("GET", "https://api.example.com/ping", {})
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
        follow_redirects: bool = True,
    ) -> None:
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: Any = None,
        timeout: float | None = None,
    ) -> LiveResponse:
        context = ErrorContext(request={"method": method, "url": url})
        effective_timeout = self.timeout if timeout is None else timeout

        try:
            request = self._client.build_request(
                method,
                url,
                headers=headers,
                json=body,
                timeout=effective_timeout,
            )
        except httpx.InvalidURL as e:
            raise TransportError(f"Invalid URL: {url}", context=context, cause=e) from e
        except (TypeError, ValueError) as e:
            # non-ASCII header values and unserializable bodies
            raise TransportError("Cannot build request", context=context, cause=e) from e

        start = time.perf_counter()
        try:
            resp = self._client.send(request, follow_redirects=self.follow_redirects)
        except httpx.TimeoutException as e:
            raise TransportTimeoutError(
                f"Request timed out after {effective_timeout:g}s",
                context=context,
                cause=e,
            ) from e
        except httpx.ConnectError as e:
            raise TransportConnectError(context=context, cause=e) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise TransportError(context=context, cause=e) from e

        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.debug(f"{method} {url} -> {resp.status_code} ({elapsed_ms:.0f}ms)")

        return LiveResponse(
            status_code=resp.status_code,
            body=resp.content,
            headers=dict(resp.headers),
            elapsed_ms=elapsed_ms,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
