"""
Diff parser — reads rendered unified-diff text back into hunks so a
reviewed preview can be re-applied or checked against a file.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Sequence

from .hunks import Hunk, HunkLine, LineKind

logger = logging.getLogger(__name__)

# Patterns
_HUNK_HEADER = re.compile(r"^@@\s+-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s+@@")
_NEW_FILE_HEADER = re.compile(r"^\+\+\+\s+(?:b/)?(.+)$")
_OLD_FILE_HEADER = re.compile(r"^---\s+(?:a/)?(.+)$")
_NO_CHANGES = re.compile(r"^No changes in (.+)$")


class PatchParseError(Exception):
    """Raised when diff text cannot be parsed into hunks."""


@dataclass
class ParsedDiff:
    """Hunks recovered from diff text, plus the file path when present."""
    path: str | None = None
    hunks: list[Hunk] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.hunks


class DiffParser:
    """Parse unified-diff text produced by ``FileDiff.render``."""

    def parse(self, diff_text: str) -> ParsedDiff:
        """Parse *diff_text* into hunks.

        Summary lines and ``---``/``+++`` headers before the first ``@@``
        are skipped; the ``+++`` path is kept.

        Raises
        ------
        PatchParseError
            On a malformed hunk header, an unknown body prefix, or a body
            whose line counts disagree with its header.
        """
        result = ParsedDiff()
        lines = diff_text.split("\n")
        i = 0

        while i < len(lines) and not lines[i].startswith("@@"):
            line = lines[i]
            no_change = _NO_CHANGES.match(line)
            if no_change:
                result.path = no_change.group(1)
            new_header = _NEW_FILE_HEADER.match(line)
            if new_header:
                result.path = new_header.group(1)
            elif result.path is None:
                old_header = _OLD_FILE_HEADER.match(line)
                if old_header:
                    result.path = old_header.group(1)
            i += 1

        while i < len(lines):
            hunk, i = self._parse_hunk(lines, i)
            result.hunks.append(hunk)

        return result

    def validate(self, parsed: ParsedDiff, file_lines: Sequence[str]) -> list[str]:
        """Check every hunk's old side against *file_lines*.

        Returns
        -------
        list[str]
            One message per hunk that does not match; empty when all do.
        """
        errors: list[str] = []
        for hunk in parsed.hunks:
            if not self._validate_hunk(hunk, file_lines):
                errors.append(
                    f"Hunk at line {hunk.old_start} does not match file content"
                )
                logger.warning(
                    "[PatchEngine] Invalid hunk at line %d in %s",
                    hunk.old_start, parsed.path or "<diff>",
                )
        return errors

    # ------------------------------------------------------------------
    # Internal parsing
    # ------------------------------------------------------------------

    def _parse_hunk(self, lines: list[str], i: int) -> tuple[Hunk, int]:
        header = lines[i]
        match = _HUNK_HEADER.match(header)
        if not match:
            raise PatchParseError(f"Invalid hunk header: {header[:80]!r}")

        old_count = int(match.group(2)) if match.group(2) is not None else 1
        new_count = int(match.group(4)) if match.group(4) is not None else 1
        old_start = int(match.group(1))
        new_start = int(match.group(3))
        # Empty ranges name the line before them
        if old_count == 0:
            old_start += 1
        if new_count == 0:
            new_start += 1

        hunk = Hunk(old_start=old_start, new_start=new_start)
        i += 1

        while i < len(lines) and not lines[i].startswith("@@"):
            line = lines[i]
            i += 1
            if line.startswith("\\"):
                continue  # "\ No newline at end of file"
            if not line:
                # Editors and chat transports strip the lone space of an
                # empty context line; only trust it while the header
                # still expects more lines.
                if self._body_complete(hunk, old_count, new_count):
                    continue
                hunk.lines.append(HunkLine(LineKind.CONTEXT, ""))
                continue
            try:
                kind = LineKind(line[0])
            except ValueError:
                raise PatchParseError(f"Invalid hunk line: {line[:80]!r}")
            hunk.lines.append(HunkLine(kind, line[1:]))

        hunk.recount()
        if hunk.old_count != old_count or hunk.new_count != new_count:
            raise PatchParseError(
                f"Hunk {header.strip()!r} body has "
                f"-{hunk.old_count} +{hunk.new_count} lines"
            )
        return hunk, i

    @staticmethod
    def _body_complete(hunk: Hunk, old_count: int, new_count: int) -> bool:
        hunk.recount()
        return hunk.old_count >= old_count and hunk.new_count >= new_count

    @staticmethod
    def _validate_hunk(hunk: Hunk, file_lines: Sequence[str]) -> bool:
        start = hunk.old_start - 1  # Convert to 0-indexed
        expected = hunk.old_lines
        end = start + len(expected)

        if start < 0 or end > len(file_lines):
            return False

        return list(file_lines[start:end]) == expected
