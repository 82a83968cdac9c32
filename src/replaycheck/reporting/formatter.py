"""Stateless rendering of comparisons and outcomes as rich Text."""

from __future__ import annotations

from dataclasses import dataclass

from rich.text import Text

from replaycheck.comparison import Comparison, DiffKind, DiffNode, kind_of, render_value
from replaycheck.runner.models import OutcomeKind


@dataclass(frozen=True)
class Palette:
    """Rich style names used by the formatter. Empty strings mean unstyled."""

    match: str = "bold green"
    mismatch: str = "bold red"
    error: str = "bold yellow"
    added: str = "green"
    removed: str = "red"
    changed: str = "yellow"
    type_changed: str = "magenta"
    path: str = "cyan"
    dim: str = "dim"

    @classmethod
    def plain(cls) -> Palette:
        return cls(
            match="",
            mismatch="",
            error="",
            added="",
            removed="",
            changed="",
            type_changed="",
            path="",
            dim="",
        )


OUTCOME_LABELS = {
    OutcomeKind.MATCH: "MATCH",
    OutcomeKind.MISMATCH: "MISMATCH",
    OutcomeKind.TRANSPORT_ERROR: "TRANSPORT ERROR",
    OutcomeKind.HTTP_STATUS_ERROR: "HTTP STATUS ERROR",
    OutcomeKind.MALFORMED_INPUT: "MALFORMED RESPONSE",
    OutcomeKind.COMPARISON_ERROR: "COMPARISON ERROR",
    OutcomeKind.LOAD_ERROR: "LOAD ERROR",
}


class DiffFormatter:
    """Turns comparison results into styled lines.

    The formatter keeps only its palette, so one instance can be shared or
    a plain one swapped in for files and CI logs.
    """

    def __init__(self, palette: Palette | None = None) -> None:
        self.palette = palette or Palette()

    def outcome_label(self, outcome: OutcomeKind) -> Text:
        if outcome is OutcomeKind.MATCH:
            style = self.palette.match
        elif outcome is OutcomeKind.MISMATCH:
            style = self.palette.mismatch
        else:
            style = self.palette.error
        return Text(OUTCOME_LABELS[outcome], style=style)

    def difference(self, node: DiffNode) -> Text:
        """One line describing a single non-matching node."""
        p = self.palette
        path = Text(node.path_str, style=p.path)

        if node.kind is DiffKind.ADDED:
            return Text.assemble(path, ": ", ("+ added ", p.added), (render_value(node.live), p.added))
        if node.kind is DiffKind.REMOVED:
            return Text.assemble(
                path, ": ", ("- removed ", p.removed), (render_value(node.baseline), p.removed)
            )
        if node.kind is DiffKind.TYPE_MISMATCH:
            return Text.assemble(
                path,
                ": ",
                ("~ type ", p.type_changed),
                (f"{kind_of(node.baseline).value} ", p.dim),
                (render_value(node.baseline), p.removed),
                " -> ",
                (f"{kind_of(node.live).value} ", p.dim),
                (render_value(node.live), p.added),
            )
        return Text.assemble(
            path,
            ": ",
            ("~ value ", p.changed),
            (render_value(node.baseline), p.removed),
            " -> ",
            (render_value(node.live), p.added),
        )

    def comparison(self, comparison: Comparison) -> list[Text]:
        """Header line plus one line per difference."""
        if comparison.is_full_match:
            return [Text(comparison.match.value, style=self.palette.match)]

        count = len(comparison.differences)
        noun = "difference" if count == 1 else "differences"
        header = Text.assemble(
            (comparison.match.value, self.palette.mismatch),
            f": {count} {noun}",
        )
        if comparison.is_superset:
            header.append(" (live response only adds fields)", style=self.palette.dim)

        lines = [header]
        lines.extend(self.difference(node) for node in comparison.differences)
        return lines
