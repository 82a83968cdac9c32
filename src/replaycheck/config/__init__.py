"""Configuration management for replaycheck."""

from replaycheck.config.settings import (
    DEFAULT_CREDENTIAL_FILE,
    OUTPUT_FORMATS,
    ReplayConfig,
    load_config,
)

__all__ = [
    "DEFAULT_CREDENTIAL_FILE",
    "OUTPUT_FORMATS",
    "ReplayConfig",
    "load_config",
]
