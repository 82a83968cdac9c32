"""Load fixtures and credentials from JSON/YAML files."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from replaycheck.errors import CredentialLoadError, ErrorContext, FixtureLoadError
from replaycheck.fixtures.models import Fixture

logger = logging.getLogger(__name__)

FIXTURE_SUFFIXES = (".json", ".yaml", ".yml")


class FixtureLoader:
    """Load fixtures from JSON or YAML files.

    Each file holds one fixture::

        {
          "request": {"url": "...", "method": "GET", "headers": {...}},
          "response": {"status": 200, "body": {...}}
        }
    """

    def __init__(self, base_path: str | Path | None = None) -> None:
        self.base_path = Path(base_path) if base_path else Path.cwd()

    def load(self, filepath: str | Path) -> Fixture:
        """Load one fixture.

        Raises:
            FixtureLoadError: If the file is missing, unparsable or does not
                have the fixture shape.
        """
        path = self._resolve_path(filepath)
        context = ErrorContext(fixture=path.stem, source=str(path))

        data = self._read(path, context)
        if not isinstance(data, dict):
            raise FixtureLoadError(
                f"Fixture must be an object, got {type(data).__name__}",
                context=context,
            )

        try:
            return Fixture(
                name=data.get("name") or path.stem,
                request=data.get("request"),
                response=data.get("response"),
                source=str(path),
            )
        except ValidationError as e:
            raise FixtureLoadError(
                f"Invalid fixture structure in {path.name}",
                context=context,
                cause=e,
            ) from e

    def discover(self, paths: Iterable[str | Path]) -> list[Path]:
        """Expand directories into their fixture files, sorted by name.

        Plain file paths are returned as given, even if they do not exist, so
        the load error surfaces against that fixture.
        """
        found: list[Path] = []
        for entry in paths:
            path = self._resolve_path(entry)
            if path.is_dir():
                found.extend(
                    sorted(p for p in path.iterdir() if p.is_file() and p.suffix.lower() in FIXTURE_SUFFIXES)
                )
            else:
                found.append(path)
        return found

    def load_many(self, paths: Iterable[str | Path]) -> list[Fixture | FixtureLoadError]:
        """Load every fixture under ``paths``.

        A file that fails to load is returned as its FixtureLoadError in place
        of the fixture, so callers can report it and keep going.
        """
        results: list[Fixture | FixtureLoadError] = []
        for path in self.discover(paths):
            try:
                results.append(self.load(path))
            except FixtureLoadError as e:
                logger.warning(f"Skipping fixture {path}: {e}")
                results.append(e)
        return results

    def _resolve_path(self, filepath: str | Path) -> Path:
        path = Path(filepath)
        if path.is_absolute():
            return path
        return self.base_path / path

    def _read(self, path: Path, context: ErrorContext) -> Any:
        if not path.is_file():
            raise FixtureLoadError(f"Fixture file not found: {path}", context=context)

        suffix = path.suffix.lower()
        try:
            with open(path, encoding="utf-8") as f:
                if suffix in (".yaml", ".yml"):
                    return yaml.safe_load(f)
                return json.load(f)
        except (OSError, UnicodeDecodeError) as e:
            raise FixtureLoadError(f"Cannot read {path}", context=context, cause=e) from e
        except json.JSONDecodeError as e:
            raise FixtureLoadError(f"Invalid JSON in {path}", context=context, cause=e) from e
        except yaml.YAMLError as e:
            raise FixtureLoadError(f"Invalid YAML in {path}", context=context, cause=e) from e
        except RecursionError as e:
            raise FixtureLoadError(f"Fixture nests too deeply: {path}", context=context, cause=e) from e


def load_credential(filepath: str | Path) -> str:
    """Read the authorization value from a ``{"authorization": "..."}`` file.

    Raises:
        CredentialLoadError: If the file is unreadable, not JSON, or has no
            string ``authorization`` key.
    """
    path = Path(filepath)
    context = ErrorContext(source=str(path))

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise CredentialLoadError(f"Cannot read credential file {path}", context=context, cause=e) from e
    except ValueError as e:
        raise CredentialLoadError(f"Invalid JSON in credential file {path}", context=context, cause=e) from e

    if not isinstance(data, dict):
        raise CredentialLoadError("Credential file must contain a JSON object", context=context)

    authorization = data.get("authorization")
    if not isinstance(authorization, str) or not authorization:
        raise CredentialLoadError(
            "Credential file has no 'authorization' string",
            context=context,
        )

    logger.debug(f"Loaded credential from {path}")
    return authorization
