"""
Patch applier — applies diff hunks to an in-memory line sequence.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from .diff_parser import DiffParser
from .hunks import Hunk, split_lines

logger = logging.getLogger(__name__)


class PatchApplyError(Exception):
    """Raised when a patch cannot be applied cleanly."""


@dataclass
class ApplyResult:
    """Result of applying a list of hunks."""
    success: bool = False
    lines: list[str] = field(default_factory=list)
    hunks_applied: int = 0
    hunks_failed: int = 0
    failed_hunks: list[Hunk] = field(default_factory=list)
    error: str = ""


class PatchApplier:
    """Apply hunks to a line sequence."""

    def __init__(self, fuzzy_match_window: int = 0) -> None:
        self._fuzzy_window = fuzzy_match_window

    def apply(self, old_lines: Sequence[str], hunks: Sequence[Hunk]) -> ApplyResult:
        """Apply *hunks* to a copy of *old_lines*.

        Hunks are applied bottom-up so the ``old_start`` of every hunk still
        refers to untouched lines when its turn comes. A hunk whose old side
        does not match (even within the fuzzy window) is skipped and
        reported.

        Parameters
        ----------
        old_lines:
            The file content the hunks were computed against.
        hunks:
            Hunks, as built by ``build_hunks`` or parsed by ``DiffParser``.

        Returns
        -------
        ApplyResult
            ``success`` is True only when every hunk applied.
        """
        result = ApplyResult(lines=list(old_lines))

        if not hunks:
            result.success = True
            return result

        # Sort hunks by old_start DESCENDING so earlier hunks keep their
        # line numbers
        for hunk in sorted(hunks, key=lambda h: h.old_start, reverse=True):
            if self._apply_hunk(result.lines, hunk):
                result.hunks_applied += 1
            else:
                result.hunks_failed += 1
                result.failed_hunks.append(hunk)
                logger.warning(
                    "[PatchEngine] Hunk at line %d failed to apply",
                    hunk.old_start,
                )

        result.success = result.hunks_failed == 0
        if not result.success:
            result.error = (
                f"{result.hunks_failed} of {len(hunks)} hunk(s) did not match"
            )
        return result

    def apply_text(self, content: str, diff_text: str) -> str:
        """Apply rendered diff text to *content* and return the new content."""
        parsed = DiffParser().parse(diff_text)
        old_lines = split_lines(content)
        return "\n".join(apply_hunks(old_lines, parsed.hunks, self._fuzzy_window))

    def _apply_hunk(self, lines: list[str], hunk: Hunk) -> bool:
        """Apply a single hunk in place.

        Tries the exact position first, then ±fuzzy_window lines.
        """
        start = hunk.old_start - 1  # Convert to 0-indexed
        expected = hunk.old_lines

        if self._lines_match(lines, start, expected):
            self._replace_lines(lines, start, hunk)
            return True

        for offset in range(1, self._fuzzy_window + 1):
            for try_start in (start - offset, start + offset):
                if self._lines_match(lines, try_start, expected):
                    logger.debug(
                        "[PatchEngine] Fuzzy match: hunk line %d matched at %d "
                        "(offset %+d)",
                        hunk.old_start, try_start + 1, try_start - start,
                    )
                    self._replace_lines(lines, try_start, hunk)
                    return True

        return False

    @staticmethod
    def _lines_match(
        file_lines: list[str],
        start: int,
        expected: list[str],
    ) -> bool:
        if start < 0 or start + len(expected) > len(file_lines):
            return False
        return file_lines[start:start + len(expected)] == expected

    @staticmethod
    def _replace_lines(lines: list[str], start: int, hunk: Hunk) -> None:
        end = start + hunk.old_count
        lines[start:end] = hunk.new_lines


def apply_hunks(
    old_lines: Sequence[str],
    hunks: Sequence[Hunk],
    fuzzy_match_window: int = 0,
) -> list[str]:
    """Apply *hunks* to *old_lines*, raising ``PatchApplyError`` on any miss."""
    result = PatchApplier(fuzzy_match_window).apply(old_lines, hunks)
    if not result.success:
        raise PatchApplyError(result.error)
    return result.lines
