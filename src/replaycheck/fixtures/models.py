"""Fixture data model: a recorded request paired with its expected response."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

AUTHORIZATION_HEADER = "Authorization"


class RecordedRequest(BaseModel):
    """The request half of a fixture."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    url: str = Field(..., min_length=1, description="Absolute URL of the endpoint")
    method: str = Field(default="GET", description="HTTP method")
    headers: dict[str, str] = Field(default_factory=dict, description="Recorded request headers")
    body: Any = Field(default=None, description="Optional JSON request body")

    @field_validator("method", mode="before")
    @classmethod
    def normalize_method(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip().upper() or "GET"
        return v

    @field_validator("headers", mode="before")
    @classmethod
    def stringify_headers(cls, v: Any) -> Any:
        if v is None:
            return {}
        if isinstance(v, dict):
            return {str(key): str(value) for key, value in v.items()}
        return v

    def headers_with_authorization(self, authorization: str | None) -> dict[str, str]:
        """Return the recorded headers with the credential merged in.

        Any recorded authorization header is dropped regardless of its case,
        so the credential always wins.
        """
        headers = dict(self.headers)
        if authorization is None:
            return headers
        headers = {
            key: value
            for key, value in headers.items()
            if key.lower() != AUTHORIZATION_HEADER.lower()
        }
        headers[AUTHORIZATION_HEADER] = authorization
        return headers


class RecordedResponse(BaseModel):
    """The baseline half of a fixture."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    status: int = Field(default=200, ge=100, le=599, description="Recorded HTTP status")
    body: Any = Field(default=None, description="Baseline JSON body")

    @field_validator("body")
    @classmethod
    def require_json_value(cls, v: Any) -> Any:
        # YAML can produce dates, non-string keys and other non-JSON values;
        # the round trip leaves keys as strings, like the live document's
        try:
            return json.loads(json.dumps(v, allow_nan=False))
        except (TypeError, ValueError) as e:
            raise ValueError(f"body is not a JSON value: {e}") from e
        except RecursionError as e:
            raise ValueError("body is nested too deeply") from e


class Fixture(BaseModel):
    """A named, immutable request/expected-response pair."""

    model_config = ConfigDict(frozen=True)

    name: str
    request: RecordedRequest
    response: RecordedResponse
    source: str | None = Field(default=None, description="File the fixture was loaded from")

    def describe(self) -> str:
        return f"{self.name} ({self.request.method} {self.request.url})"
