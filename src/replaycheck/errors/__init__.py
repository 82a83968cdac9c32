"""replaycheck error hierarchy.

Fixture-local errors (the run continues):

- FixtureLoadError
- TransportError, TransportTimeoutError, TransportConnectError
- HTTPStatusError
- MalformedInputError
- ComparisonError

Fatal errors (the run aborts):

- CredentialLoadError
- ConfigValidationError
"""

from replaycheck.errors.base import (
    ComparisonError,
    ConfigValidationError,
    CredentialLoadError,
    ErrorCode,
    ErrorContext,
    FixtureLoadError,
    HTTPStatusError,
    MalformedInputError,
    ReplayCheckError,
    TransportConnectError,
    TransportError,
    TransportTimeoutError,
)

__all__ = [
    "ReplayCheckError",
    "ErrorCode",
    "ErrorContext",
    "TransportError",
    "TransportTimeoutError",
    "TransportConnectError",
    "HTTPStatusError",
    "FixtureLoadError",
    "CredentialLoadError",
    "ConfigValidationError",
    "MalformedInputError",
    "ComparisonError",
]
