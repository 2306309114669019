"""
Hunk builder — turns diff regions into context-padded unified-diff hunks
and renders them as review text.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .changes import DiffRegion, extract_changes
from .lcs import compute_lcs_table

logger = logging.getLogger(__name__)

DEFAULT_CONTEXT_LINES = 3


class LineKind(str, Enum):
    """Prefix character of a hunk body line."""
    ADDED = "+"
    REMOVED = "-"
    CONTEXT = " "


@dataclass
class HunkLine:
    kind: LineKind
    text: str

    def render(self) -> str:
        return f"{self.kind.value}{self.text}"


@dataclass
class Hunk:
    """One ``@@`` block of a unified diff.

    ``old_start`` / ``new_start`` are 1-indexed positions of the first line
    of each range. Counts always match the body: context + removed lines on
    the old side, context + added lines on the new side.
    """
    old_start: int
    old_count: int = 0
    new_start: int = 0
    new_count: int = 0
    lines: list[HunkLine] = field(default_factory=list)

    @property
    def old_end(self) -> int:
        """0-indexed, exclusive end of the old range."""
        return self.old_start - 1 + self.old_count

    @property
    def old_lines(self) -> list[str]:
        """Lines the old file must contain at ``old_start``."""
        return [l.text for l in self.lines if l.kind is not LineKind.ADDED]

    @property
    def new_lines(self) -> list[str]:
        """Lines the new file contains at ``new_start``."""
        return [l.text for l in self.lines if l.kind is not LineKind.REMOVED]

    def recount(self) -> None:
        self.old_count = sum(1 for l in self.lines if l.kind is not LineKind.ADDED)
        self.new_count = sum(1 for l in self.lines if l.kind is not LineKind.REMOVED)

    def header(self) -> str:
        # An empty range is shown by the line just before it.
        old_start = self.old_start if self.old_count else self.old_start - 1
        new_start = self.new_start if self.new_count else self.new_start - 1
        return (
            f"@@ -{old_start},{self.old_count} "
            f"+{new_start},{self.new_count} @@"
        )

    def render(self) -> list[str]:
        return [self.header()] + [l.render() for l in self.lines]


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


@dataclass
class FileDiff:
    """The complete diff of one file: its regions and rendered hunks."""
    path: str
    hunks: list[Hunk] = field(default_factory=list)
    regions: list[DiffRegion] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.regions)

    @property
    def added_lines(self) -> int:
        return sum(
            1 for h in self.hunks for l in h.lines if l.kind is LineKind.ADDED
        )

    @property
    def removed_lines(self) -> int:
        return sum(
            1 for h in self.hunks for l in h.lines if l.kind is LineKind.REMOVED
        )

    def summary(self) -> str:
        if not self.has_changes:
            return f"No changes in {self.path}"

        added = self.added_lines
        removed = self.removed_lines
        summary = f"Updated {self.path}"
        if added and removed:
            summary += (
                f" with {_plural(added, 'addition')}"
                f" and {_plural(removed, 'removal')}"
            )
        elif added:
            summary += f" with {_plural(added, 'addition')}"
        elif removed:
            summary += f" with {_plural(removed, 'removal')}"
        return summary

    def render(self) -> str:
        """Render the summary line, file headers and every hunk."""
        if not self.has_changes:
            return self.summary()

        out = [
            self.summary(),
            f"--- a/{self.path}",
            f"+++ b/{self.path}",
        ]
        for hunk in self.hunks:
            out.extend(hunk.render())
        return "\n".join(out)


def build_hunks(
    old: Sequence[str],
    new: Sequence[str],
    regions: Sequence[DiffRegion] | None = None,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> list[Hunk]:
    """Expand diff regions into hunks, merging ones whose context touches.

    Parameters
    ----------
    old, new:
        The two line sequences the regions were computed from.
    regions:
        Output of ``extract_changes``; computed when omitted.
    context_lines:
        Unchanged lines shown on each side of a change.

    Returns
    -------
    list[Hunk]
        Hunks in file order.
    """
    if regions is None:
        regions = extract_changes(old, new)

    hunks: list[Hunk] = []
    offset = 0

    for region in regions:
        context_start = max(0, region.old_start - context_lines)
        context_end = min(len(old), region.old_end + context_lines)

        if hunks and hunks[-1].old_end >= context_start:
            hunk = hunks[-1]
            prev_end = hunk.old_end
            # Trailing context of the previous change that runs into this one
            overlap = prev_end - region.old_start
            if overlap > 0:
                del hunk.lines[-overlap:]
            cursor = min(prev_end, region.old_start)
        else:
            hunk = Hunk(
                old_start=context_start + 1,
                new_start=context_start + 1 + offset,
            )
            hunks.append(hunk)
            cursor = context_start

        hunk.lines.extend(
            HunkLine(LineKind.CONTEXT, line)
            for line in old[cursor:region.old_start]
        )
        hunk.lines.extend(
            HunkLine(LineKind.REMOVED, line)
            for line in old[region.old_start:region.old_end]
        )
        hunk.lines.extend(
            HunkLine(LineKind.ADDED, line)
            for line in new[region.new_start:region.new_end]
        )
        hunk.lines.extend(
            HunkLine(LineKind.CONTEXT, line)
            for line in old[region.old_end:context_end]
        )
        hunk.recount()

        offset += region.delta

    return hunks


def diff_lines(
    old: Sequence[str],
    new: Sequence[str],
    path: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> FileDiff:
    """Diff two line sequences of *path* and build its hunks."""
    table = compute_lcs_table(old, new)
    regions = extract_changes(old, new, table)
    if not regions:
        return FileDiff(path=path)

    hunks = build_hunks(old, new, regions, context_lines)
    logger.debug(
        "[PatchEngine] %s: %d region(s) in %d hunk(s)",
        path, len(regions), len(hunks),
    )
    return FileDiff(path=path, hunks=hunks, regions=list(regions))


def diff_text(
    old: str,
    new: str,
    path: str,
    context_lines: int = DEFAULT_CONTEXT_LINES,
) -> FileDiff:
    """Diff two file contents split on ``\\n``.

    An empty string is treated as a file with no lines at all.
    """
    return diff_lines(split_lines(old), split_lines(new), path, context_lines)


def split_lines(content: str) -> list[str]:
    return content.split("\n") if content else []
