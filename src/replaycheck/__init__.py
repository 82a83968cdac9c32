"""replaycheck - replay recorded API requests and diff the live responses.

Given a set of fixtures (a recorded request plus its baseline response),
replaycheck re-issues each request against the live service and compares
the new JSON body with the recorded one, classifying every difference as a
value change, type change, addition or removal.

Example:
    >>> from replaycheck import FixtureLoader, HttpxTransport, ReplayRunner
    >>> fixtures = FixtureLoader().load_many(["requests/"])
    >>> with HttpxTransport(timeout=30) as transport:
    ...     summary = ReplayRunner(transport, credential="Bearer abc").run(fixtures)
    >>> summary.tally.matched
    2

Comparing two documents directly:
    >>> from replaycheck import compare
    >>> compare({"x": 1}, {"x": 1.0}).match.value
    'FullMatch'
"""

from replaycheck.comparison import (
    Comparison,
    DiffKind,
    DiffNode,
    JSONComparator,
    JSONKind,
    MatchKind,
    compare,
    compare_documents,
    parse_json,
)
from replaycheck.errors import (
    ComparisonError,
    ConfigValidationError,
    CredentialLoadError,
    FixtureLoadError,
    HTTPStatusError,
    MalformedInputError,
    ReplayCheckError,
    TransportError,
    TransportTimeoutError,
)
from replaycheck.fixtures import (
    Fixture,
    FixtureLoader,
    RecordedRequest,
    RecordedResponse,
    load_credential,
)
from replaycheck.http import HttpTransport, HttpxTransport, LiveResponse
from replaycheck.runner import (
    FixtureResult,
    OutcomeKind,
    ReplayRunner,
    RunnerConfig,
    RunSummary,
    RunTally,
    StatusPolicy,
)

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Comparison
    "Comparison",
    "DiffKind",
    "DiffNode",
    "JSONComparator",
    "JSONKind",
    "MatchKind",
    "compare",
    "compare_documents",
    "parse_json",
    # Errors
    "ReplayCheckError",
    "ComparisonError",
    "ConfigValidationError",
    "CredentialLoadError",
    "FixtureLoadError",
    "HTTPStatusError",
    "MalformedInputError",
    "TransportError",
    "TransportTimeoutError",
    # Fixtures
    "Fixture",
    "FixtureLoader",
    "RecordedRequest",
    "RecordedResponse",
    "load_credential",
    # HTTP
    "HttpTransport",
    "HttpxTransport",
    "LiveResponse",
    # Runner
    "FixtureResult",
    "OutcomeKind",
    "ReplayRunner",
    "RunnerConfig",
    "RunSummary",
    "RunTally",
    "StatusPolicy",
]
