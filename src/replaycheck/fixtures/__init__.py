"""Recorded fixtures and the files they are loaded from."""

from replaycheck.fixtures.loaders import FIXTURE_SUFFIXES, FixtureLoader, load_credential
from replaycheck.fixtures.models import (
    AUTHORIZATION_HEADER,
    Fixture,
    RecordedRequest,
    RecordedResponse,
)

__all__ = [
    "AUTHORIZATION_HEADER",
    "FIXTURE_SUFFIXES",
    "Fixture",
    "FixtureLoader",
    "RecordedRequest",
    "RecordedResponse",
    "load_credential",
]
