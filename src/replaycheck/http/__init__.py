"""HTTP layer for replaying recorded requests."""

from replaycheck.http.transport import (
    DEFAULT_TIMEOUT,
    HttpTransport,
    HttpxTransport,
    LiveResponse,
)

__all__ = [
    "DEFAULT_TIMEOUT",
    "HttpTransport",
    "HttpxTransport",
    "LiveResponse",
]
