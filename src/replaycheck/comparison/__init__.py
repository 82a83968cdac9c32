"""Response comparison engine.

Compares a baseline JSON document against a live one and classifies every
difference by path.
"""

from replaycheck.comparison.diff import (
    Comparison,
    DiffKind,
    DiffNode,
    JSONComparator,
    JSONKind,
    MatchKind,
    compare,
    compare_documents,
    format_explanation,
    format_path,
    kind_of,
    parse_json,
    render_value,
)

__all__ = [
    "Comparison",
    "DiffKind",
    "DiffNode",
    "JSONComparator",
    "JSONKind",
    "MatchKind",
    "compare",
    "compare_documents",
    "format_explanation",
    "format_path",
    "kind_of",
    "parse_json",
    "render_value",
]
