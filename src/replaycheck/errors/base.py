"""Custom exception hierarchy for replaycheck.

All replaycheck errors inherit from ReplayCheckError and include:
- error_code: A unique ErrorCode enum for categorization
- context: ErrorContext with fixture/request/response details
- suggestions: List of actionable steps to resolve the issue
- fatal: Whether the error aborts the whole run

Only credential and configuration errors are fatal. Everything else is
local to a single fixture: the runner records it and moves on.

Example:
    try:
        credential = load_credential("data/token.json")
    except CredentialLoadError as e:
        print(e.format_verbose())
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes for replaycheck.

    Error codes are organized by category:
    - E0xx: Transport errors
    - E1xx: HTTP status errors
    - E2xx: Input loading errors (fixtures, credential, config)
    - E3xx: Comparison errors
    - E9xx: Unknown/internal errors
    """

    # Transport errors (E0xx)
    TRANSPORT_FAILED = "E001"
    TRANSPORT_TIMEOUT = "E002"
    TRANSPORT_CONNECT = "E003"

    # HTTP status errors (E1xx)
    UNEXPECTED_STATUS = "E101"

    # Input loading errors (E2xx)
    FIXTURE_LOAD_FAILED = "E201"
    CREDENTIAL_LOAD_FAILED = "E202"
    INVALID_CONFIG = "E203"

    # Comparison errors (E3xx)
    MALFORMED_INPUT = "E301"
    COMPARISON_FAILED = "E302"

    # Unknown/internal errors (E9xx)
    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 100:
            return "transport"
        elif code_num < 200:
            return "status"
        elif code_num < 300:
            return "input"
        elif code_num < 400:
            return "comparison"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context attached to an error.

    Attributes:
        fixture: Name of the fixture being processed.
        source: File the fixture (or credential) was loaded from.
        request: HTTP request details (method, url).
        response: HTTP response details (status).
        extra: Additional context-specific information.
        timestamp: When the error occurred.
    """

    fixture: str | None = None
    source: str | None = None
    request: dict[str, Any] | None = None
    response: dict[str, Any] | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "fixture": self.fixture,
            "source": self.source,
            "request": self.request,
            "response": self.response,
            "extra": self.extra or None,
            "timestamp": self.timestamp.isoformat(),
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.fixture:
            parts.append(f"fixture={self.fixture}")
        if self.source:
            parts.append(f"file={self.source}")
        return " > ".join(parts) if parts else "unknown location"


class ReplayCheckError(Exception):
    """Base exception for all replaycheck errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with execution details
        cause: The underlying exception (if any)
        fatal: Whether the error aborts the run
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []
    fatal: bool = False

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: BaseException | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def kind(self) -> str:
        """Short name of the error type, used in reports."""
        return self.__class__.__name__

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        if self.cause is not None:
            parts.append(f"cause: {self.cause}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [
            f"Error [{self.error_code.value}] {self.kind}: {self.message}",
        ]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.context.request:
            method = self.context.request.get("method", "?")
            url = self.context.request.get("url", "?")
            lines.append(f"Request: {method} {url}")

        if self.context.response:
            status = self.context.response.get("status", "?")
            lines.append(f"Response: HTTP {status}")

        if self.cause is not None:
            lines.append(f"Cause: {type(self.cause).__name__}: {self.cause}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.kind,
            "category": self.error_code.category,
            "message": self.message,
            "fatal": self.fatal,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class TransportError(ReplayCheckError):
    """The live request could not be completed at the network level.

    Covers connection refused, DNS failure, TLS errors and timeouts. The
    fixture is marked failed and the run continues.
    """

    error_code = ErrorCode.TRANSPORT_FAILED
    default_message = "Failed to send request"
    default_suggestions = [
        "Verify the service is running and reachable from this machine",
        "Check the URL recorded in the fixture",
    ]


class TransportTimeoutError(TransportError):
    """The live request did not complete within the configured timeout."""

    error_code = ErrorCode.TRANSPORT_TIMEOUT
    default_message = "Request timed out"
    default_suggestions = [
        "Increase the timeout with --timeout",
        "Check whether the endpoint is unusually slow",
    ]


class TransportConnectError(TransportError):
    """The connection to the service could not be established."""

    error_code = ErrorCode.TRANSPORT_CONNECT
    default_message = "Could not connect to service"
    default_suggestions = [
        "Verify the host and port in the fixture URL",
        "Ensure no firewall or proxy is blocking the connection",
    ]


class HTTPStatusError(ReplayCheckError):
    """The live status code is outside the accepted range.

    The body is not compared when this happens.
    """

    error_code = ErrorCode.UNEXPECTED_STATUS
    default_message = "Unexpected HTTP status"
    default_suggestions = [
        "Check that the credential is still valid",
        "Use --status-policy baseline if the recorded status is not 200",
    ]

    def __init__(
        self,
        status_code: int,
        expected: str,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.status_code = status_code
        self.expected = expected
        super().__init__(
            message or f"HTTP {status_code} (expected {expected})",
            **kwargs,
        )


class FixtureLoadError(ReplayCheckError):
    """A fixture file could not be read or parsed. The fixture is skipped."""

    error_code = ErrorCode.FIXTURE_LOAD_FAILED
    default_message = "Failed to load fixture"
    default_suggestions = [
        "Check the file is valid JSON with 'request' and 'response' sections",
    ]


class CredentialLoadError(ReplayCheckError):
    """The credential file is unreadable or malformed. Fatal to the run."""

    error_code = ErrorCode.CREDENTIAL_LOAD_FAILED
    default_message = "Failed to load credential"
    default_suggestions = [
        'The credential file must contain {"authorization": "<value>"}',
        "Check the path passed with --token",
    ]
    fatal = True


class ConfigValidationError(ReplayCheckError):
    """A configuration value is invalid. Fatal to the run."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    fatal = True

    def __init__(
        self,
        message: str | None = None,
        field: str | None = None,
        value: Any = None,
        **kwargs: Any,
    ) -> None:
        self.field = field
        self.value = value
        super().__init__(message, **kwargs)
        if field:
            self.context.extra["field"] = field


class MalformedInputError(ReplayCheckError):
    """A response body cannot be parsed as JSON, so no comparison is attempted.

    Attributes:
        side: Which operand failed to parse ("baseline" or "live").
    """

    error_code = ErrorCode.MALFORMED_INPUT
    default_message = "Input is not valid JSON"
    default_suggestions = [
        "Check the endpoint still returns application/json",
    ]

    def __init__(
        self,
        side: str,
        cause: BaseException | None = None,
        message: str | None = None,
        **kwargs: Any,
    ) -> None:
        self.side = side
        super().__init__(
            message or f"{side} body is not valid JSON",
            cause=cause,
            **kwargs,
        )


class ComparisonError(ReplayCheckError):
    """Two parsed documents could not be compared. The fixture is marked failed.

    Raised when the documents nest deeper than the interpreter can walk.
    """

    error_code = ErrorCode.COMPARISON_FAILED
    default_message = "Documents are nested too deeply to compare"
    default_suggestions = [
        "Compare a smaller document or raise the comparator's max_depth guard",
    ]
