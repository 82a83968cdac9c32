"""Configuration settings and loading."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from replaycheck.errors import ConfigValidationError, ErrorContext
from replaycheck.http import DEFAULT_TIMEOUT
from replaycheck.runner.models import RunnerConfig, StatusPolicy

OUTPUT_FORMATS = ("text", "json")
DEFAULT_CREDENTIAL_FILE = "data/token.json"


class ReplayConfig(BaseSettings):
    """Configuration for a replaycheck run."""

    model_config = SettingsConfigDict(
        env_prefix="REPLAYCHECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    credential_file: str = DEFAULT_CREDENTIAL_FILE
    fixtures: list[str] = Field(default_factory=list)
    request_timeout: float = DEFAULT_TIMEOUT
    strict_status_check: bool = False
    status_policy: str = StatusPolicy.OK.value
    skip_body_logging: bool = False
    workers: int = 1
    fail_fast: bool = False
    follow_redirects: bool = True
    color: bool = True
    verbose: bool = False
    output_format: str = "text"

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ConfigValidationError(
                message="request_timeout must be positive",
                field="request_timeout",
                value=v,
            )
        return v

    @field_validator("workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        if v < 1:
            raise ConfigValidationError(
                message="workers must be at least 1",
                field="workers",
                value=v,
            )
        return v

    @field_validator("status_policy", mode="before")
    @classmethod
    def validate_status_policy(cls, v: Any) -> Any:
        valid = {policy.value for policy in StatusPolicy}
        if isinstance(v, str):
            v = v.lower()
        if v not in valid:
            raise ConfigValidationError(
                message=f"Invalid status_policy: {v}. Valid: {sorted(valid)}",
                field="status_policy",
                value=v,
                context=ErrorContext(extra={"valid_policies": sorted(valid)}),
            )
        return v

    @field_validator("output_format", mode="before")
    @classmethod
    def validate_output_format(cls, v: Any) -> Any:
        if v not in OUTPUT_FORMATS:
            raise ConfigValidationError(
                message=f"Invalid output_format: {v}. Valid: {list(OUTPUT_FORMATS)}",
                field="output_format",
                value=v,
            )
        return v

    def runner_config(self) -> RunnerConfig:
        """Build the RunnerConfig for these settings."""
        return RunnerConfig(
            strict_status_check=self.strict_status_check,
            status_policy=StatusPolicy(self.status_policy),
            request_timeout=self.request_timeout,
            skip_body_logging=self.skip_body_logging,
            workers=self.workers,
            fail_fast=self.fail_fast,
        )


def load_config(config_path: str | Path | None = None, **overrides: Any) -> ReplayConfig:
    """Load configuration from file and environment.

    Priority: overrides (CLI args) > env vars > config file > defaults.
    Overrides whose value is None are ignored.

    Raises:
        ConfigValidationError: If the file cannot be parsed or a value is
            invalid.
    """
    config_data: dict[str, Any] = {}

    if config_path is not None:
        config_path = Path(config_path)
        if config_path.exists():
            try:
                with open(config_path, encoding="utf-8") as f:
                    config_data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigValidationError(
                    message=f"Invalid YAML in {config_path}",
                    context=ErrorContext(source=str(config_path)),
                    cause=e,
                ) from e
            if not isinstance(config_data, dict):
                raise ConfigValidationError(
                    message=f"Config file {config_path} must contain a mapping",
                    context=ErrorContext(source=str(config_path)),
                )

    config_data.update(_get_env_overrides())
    config_data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ReplayConfig(**config_data)
    except ValidationError as e:
        raise ConfigValidationError(message=_first_error_message(e), cause=e) from e


def _first_error_message(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    return f"{location}: {first.get('msg', 'invalid value')}" if location else first.get("msg", str(error))


def _get_env_overrides() -> dict[str, Any]:
    """Get configuration overrides from environment variables."""
    overrides: dict[str, Any] = {}

    def _flag(x: str) -> bool:
        return x.lower() in ("true", "1", "yes")

    env_mappings = {
        "REPLAYCHECK_CREDENTIAL_FILE": "credential_file",
        "REPLAYCHECK_REQUEST_TIMEOUT": ("request_timeout", float),
        "REPLAYCHECK_STRICT_STATUS_CHECK": ("strict_status_check", _flag),
        "REPLAYCHECK_STATUS_POLICY": "status_policy",
        "REPLAYCHECK_WORKERS": ("workers", int),
        "REPLAYCHECK_FOLLOW_REDIRECTS": ("follow_redirects", _flag),
        "REPLAYCHECK_VERBOSE": ("verbose", _flag),
    }

    for env_key, config_key in env_mappings.items():
        value = os.environ.get(env_key)
        if value is not None:
            if isinstance(config_key, tuple):
                key, converter = config_key
                try:
                    overrides[key] = converter(value)
                except ValueError as e:
                    raise ConfigValidationError(
                        message=f"Invalid value for {env_key}: {value!r}",
                        field=key,
                        value=value,
                        cause=e,
                    ) from e
            else:
                overrides[config_key] = value

    if os.environ.get("NO_COLOR"):
        overrides["color"] = False

    return overrides
