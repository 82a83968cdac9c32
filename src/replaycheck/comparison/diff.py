"""Structural JSON comparison between a baseline and a live response body.

The comparator walks both documents in lock-step and builds a DiffNode tree
that mirrors their shape. Every node is classified as one of:

- MATCH: the subtree is identical on both sides
- VALUE_MISMATCH: same JSON kind, different value (for containers: some
  descendant differs)
- TYPE_MISMATCH: the JSON kinds differ (e.g. number vs string)
- ADDED: present only in the live document
- REMOVED: present only in the baseline document

Arrays are compared by index, objects by exact key. Numbers compare by value,
so ``1`` and ``1.0`` match, but booleans are never numbers.

Example:
    >>> from replaycheck.comparison import compare
    >>> result = compare({"status": "ok", "items": [1, 2]},
    ...                  {"status": "ok", "items": [1, 2, 3]})
    >>> result.match.value
    'NoMatch'
    >>> [(d.path_str, d.kind.value) for d in result.differences]
    [('items[2]', 'added')]
"""

from __future__ import annotations

import json
import re
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from replaycheck.errors import ComparisonError, MalformedInputError

PathElement = Union[str, int]
JSONPath = tuple[PathElement, ...]

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_\-]*$")


class JSONKind(Enum):
    """The six kinds of JSON value."""

    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"

    @property
    def is_container(self) -> bool:
        return self in (JSONKind.ARRAY, JSONKind.OBJECT)


def kind_of(value: Any) -> JSONKind:
    """Classify a parsed JSON value.

    Raises:
        TypeError: If the value is not something ``json.loads`` can produce.
    """
    if value is None:
        return JSONKind.NULL
    # bool is a subclass of int, so it must be checked first
    if isinstance(value, bool):
        return JSONKind.BOOLEAN
    if isinstance(value, (int, float)):
        return JSONKind.NUMBER
    if isinstance(value, str):
        return JSONKind.STRING
    if isinstance(value, (list, tuple)):
        return JSONKind.ARRAY
    if isinstance(value, dict):
        return JSONKind.OBJECT
    raise TypeError(f"Not a JSON value: {type(value).__name__}")


class DiffKind(Enum):
    """Classification of a single DiffNode."""

    MATCH = "match"
    VALUE_MISMATCH = "value_mismatch"
    TYPE_MISMATCH = "type_mismatch"
    ADDED = "added"
    REMOVED = "removed"


class MatchKind(Enum):
    """Aggregate classification of a whole comparison."""

    FULL_MATCH = "FullMatch"
    NO_MATCH = "NoMatch"


def format_path(path: Sequence[PathElement]) -> str:
    """Render a path as ``items[2].name``. The root renders as ``$``."""
    if not path:
        return "$"

    parts: list[str] = []
    for element in path:
        if isinstance(element, int):
            parts.append(f"[{element}]")
        elif _IDENTIFIER.match(element):
            parts.append(f".{element}" if parts else element)
        else:
            parts.append(f"[{json.dumps(element, ensure_ascii=False)}]")
    return "".join(parts)


def render_value(value: Any) -> str:
    """Render a JSON value compactly for explanations."""
    return json.dumps(value, ensure_ascii=False, separators=(", ", ": "))


@dataclass(frozen=True)
class DiffNode:
    """One classified node of the comparison tree.

    Attributes:
        kind: Classification of this node.
        path: Keys and indices leading from the root to this node.
        baseline: Baseline value at this path (None when ADDED).
        live: Live value at this path (None when REMOVED).
        children: Child nodes when both sides hold the same container kind.
    """

    kind: DiffKind
    path: JSONPath
    baseline: Any = None
    live: Any = None
    children: tuple[DiffNode, ...] = ()

    @property
    def is_match(self) -> bool:
        return self.kind is DiffKind.MATCH

    @property
    def path_str(self) -> str:
        return format_path(self.path)

    def differences(self) -> Iterator[DiffNode]:
        """Yield every non-matching leaf in depth-first document order."""
        if self.is_match:
            return
        if not self.children:
            yield self
            return
        for child in self.children:
            yield from child.differences()

    def describe(self) -> str:
        """One-line description of this node's difference."""
        if self.kind is DiffKind.ADDED:
            return f"{self.path_str}: added {render_value(self.live)}"
        if self.kind is DiffKind.REMOVED:
            return f"{self.path_str}: removed {render_value(self.baseline)}"
        if self.kind is DiffKind.TYPE_MISMATCH:
            return (
                f"{self.path_str}: type changed "
                f"{kind_of(self.baseline).value} {render_value(self.baseline)} -> "
                f"{kind_of(self.live).value} {render_value(self.live)}"
            )
        if self.kind is DiffKind.VALUE_MISMATCH:
            return (
                f"{self.path_str}: value changed "
                f"{render_value(self.baseline)} -> {render_value(self.live)}"
            )
        return f"{self.path_str}: match"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        data: dict[str, Any] = {
            "path": self.path_str,
            "kind": self.kind.value,
        }
        if self.kind is not DiffKind.ADDED:
            data["baseline"] = self.baseline
        if self.kind is not DiffKind.REMOVED:
            data["live"] = self.live
        return data


def format_explanation(differences: Sequence[DiffNode]) -> str:
    """Build the human-readable explanation for a list of differences."""
    if not differences:
        return MatchKind.FULL_MATCH.value

    noun = "difference" if len(differences) == 1 else "differences"
    lines = [f"{MatchKind.NO_MATCH.value}: {len(differences)} {noun}"]
    lines.extend(f"  {node.describe()}" for node in differences)
    return "\n".join(lines)


@dataclass(frozen=True)
class Comparison:
    """Outcome of comparing one baseline document with one live document."""

    root: DiffNode
    differences: tuple[DiffNode, ...]
    explanation: str

    @property
    def match(self) -> MatchKind:
        return MatchKind.FULL_MATCH if self.root.is_match else MatchKind.NO_MATCH

    @property
    def is_full_match(self) -> bool:
        return self.root.is_match

    @property
    def is_superset(self) -> bool:
        """True when the live document only adds to the baseline."""
        return bool(self.differences) and all(
            node.kind is DiffKind.ADDED for node in self.differences
        )

    def count(self, kind: DiffKind) -> int:
        return sum(1 for node in self.differences if node.kind is kind)

    def to_dict(self) -> dict[str, Any]:
        return {
            "match": self.match.value,
            "superset": self.is_superset,
            "differences": [node.to_dict() for node in self.differences],
        }


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name!r}")


def parse_json(data: str | bytes | bytearray, side: str = "input") -> Any:
    """Parse JSON text into a JSON value.

    Args:
        data: Raw JSON text. Bytes are decoded as UTF-8/16/32.
        side: Which operand this is, used in the error ("baseline" or "live").

    Raises:
        MalformedInputError: If the text is not valid JSON or nests too deeply
            to parse. NaN and Infinity are rejected.
    """
    try:
        return json.loads(data, parse_constant=_reject_constant)
    except ValueError as e:
        raise MalformedInputError(side, cause=e) from e
    except RecursionError as e:
        raise MalformedInputError(
            side,
            cause=e,
            message=f"{side} body is nested too deeply to parse",
        ) from e


def _json_equal(baseline: Any, live: Any) -> bool:
    """Kind-aware deep equality (1 == 1.0, but True != 1)."""
    kind = kind_of(baseline)
    if kind is not kind_of(live):
        return False
    if kind is JSONKind.ARRAY:
        return len(baseline) == len(live) and all(
            _json_equal(b, l) for b, l in zip(baseline, live)
        )
    if kind is JSONKind.OBJECT:
        return baseline.keys() == live.keys() and all(
            _json_equal(baseline[key], live[key]) for key in baseline
        )
    return baseline == live


class JSONComparator:
    """Recursive structural comparator for JSON values.

    The comparator holds no state between calls and is safe to share across
    threads.

    Example:
        >>> comparator = JSONComparator()
        >>> result = comparator.compare({"n": 5}, {"n": "5"})
        >>> result.differences[0].kind
        <DiffKind.TYPE_MISMATCH: 'type_mismatch'>
    """

    def __init__(self, max_depth: int | None = None) -> None:
        """Initialize the comparator.

        Args:
            max_depth: Containers nested deeper than this are compared as a
                whole and reported as a single node. None means unlimited.
        """
        if max_depth is not None and max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        self.max_depth = max_depth

    def compare(self, baseline: Any, live: Any) -> Comparison:
        """Compare two parsed JSON values.

        Raises:
            ComparisonError: If the documents nest deeper than the recursion
                limit allows.
        """
        try:
            root = self._diff(baseline, live, (), depth=0)
            differences = tuple(root.differences())
            explanation = format_explanation(differences)
        except RecursionError as e:
            raise ComparisonError(cause=e) from e
        return Comparison(root=root, differences=differences, explanation=explanation)

    def compare_documents(
        self,
        baseline: str | bytes | bytearray,
        live: str | bytes | bytearray,
    ) -> Comparison:
        """Parse two JSON texts and compare them.

        Raises:
            MalformedInputError: If either side is not valid JSON. The
                baseline is checked first.
            ComparisonError: If the parsed documents nest too deeply.
        """
        return self.compare(parse_json(baseline, "baseline"), parse_json(live, "live"))

    def _diff(self, baseline: Any, live: Any, path: JSONPath, depth: int) -> DiffNode:
        baseline_kind = kind_of(baseline)
        live_kind = kind_of(live)

        if baseline_kind is not live_kind:
            return DiffNode(DiffKind.TYPE_MISMATCH, path, baseline, live)

        if not baseline_kind.is_container or (
            self.max_depth is not None and depth >= self.max_depth
        ):
            kind = DiffKind.MATCH if _json_equal(baseline, live) else DiffKind.VALUE_MISMATCH
            return DiffNode(kind, path, baseline, live)

        if baseline_kind is JSONKind.ARRAY:
            children = self._diff_arrays(baseline, live, path, depth)
        else:
            children = self._diff_objects(baseline, live, path, depth)

        if all(child.is_match for child in children):
            kind = DiffKind.MATCH
        else:
            kind = DiffKind.VALUE_MISMATCH
        return DiffNode(kind, path, baseline, live, children)

    def _diff_arrays(
        self,
        baseline: Sequence[Any],
        live: Sequence[Any],
        path: JSONPath,
        depth: int,
    ) -> tuple[DiffNode, ...]:
        children: list[DiffNode] = []
        shared = min(len(baseline), len(live))

        for i in range(shared):
            children.append(self._diff(baseline[i], live[i], path + (i,), depth + 1))
        for i in range(shared, len(baseline)):
            children.append(DiffNode(DiffKind.REMOVED, path + (i,), baseline=baseline[i]))
        for i in range(shared, len(live)):
            children.append(DiffNode(DiffKind.ADDED, path + (i,), live=live[i]))

        return tuple(children)

    def _diff_objects(
        self,
        baseline: dict[str, Any],
        live: dict[str, Any],
        path: JSONPath,
        depth: int,
    ) -> tuple[DiffNode, ...]:
        children: list[DiffNode] = []

        # Baseline keys in encounter order, then live-only keys
        for key, value in baseline.items():
            key_path = path + (key,)
            if key in live:
                children.append(self._diff(value, live[key], key_path, depth + 1))
            else:
                children.append(DiffNode(DiffKind.REMOVED, key_path, baseline=value))

        for key, value in live.items():
            if key not in baseline:
                children.append(DiffNode(DiffKind.ADDED, path + (key,), live=value))

        return tuple(children)


_default_comparator = JSONComparator()


def compare(baseline: Any, live: Any) -> Comparison:
    """Compare two parsed JSON values with the default comparator."""
    return _default_comparator.compare(baseline, live)


def compare_documents(
    baseline: str | bytes | bytearray,
    live: str | bytes | bytearray,
) -> Comparison:
    """Parse and compare two JSON texts with the default comparator."""
    return _default_comparator.compare_documents(baseline, live)
