"""
Text editor — the public edit operations (view, create, str_replace,
replace_lines, insert, undo).

Every mutating operation previews its diff, asks the confirmation gate,
and only then writes the file and records the edit for undo. Failures are
returned as ``ToolResult`` values, never raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from ..config import Config
from .confirmation import (
    AutoApprove, ConfirmationGate, ConfirmationRequest,
)
from .errors import (
    InvalidRangeError, IOFailureError, NoChangesError, NotFoundError,
    NothingToUndoError, PatchEngineError, RejectedByUserError,
)
from .filesystem import FileSystem, LocalFileSystem
from .fuzzy_match import find_fuzzy_match
from .history import (
    CreateRecord, EditRecord, InsertRecord, StrReplaceRecord, UndoStack,
)
from .hunks import FileDiff, diff_lines
from .metrics import log_edit_metric

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Uniform result of every editor operation."""
    success: bool
    output: Optional[str] = None
    error: Optional[str] = None
    error_kind: Optional[str] = None

    @classmethod
    def ok(cls, output: str) -> "ToolResult":
        return cls(success=True, output=output)

    @classmethod
    def fail(cls, error: str, kind: str | None = None) -> "ToolResult":
        return cls(success=False, error=error, error_kind=kind)


class TextEditor:
    """Line and string level file editor with preview, approval and undo.

    Parameters
    ----------
    fs:
        Filesystem capability; defaults to local disk relative to CWD.
    gate:
        Confirmation gate consulted before each write; defaults to
        ``AutoApprove``.
    config:
        Settings (context lines, preview length, insert policy).
    journal_root:
        Project root for the JSONL edit journal; no journal when None.
    """

    def __init__(
        self,
        fs: FileSystem | None = None,
        gate: ConfirmationGate | None = None,
        config: Config | None = None,
        journal_root: str | None = None,
    ) -> None:
        self.fs = fs or LocalFileSystem()
        self.gate = gate or AutoApprove()
        self.config = config or Config()
        self.journal_root = journal_root
        self.history = UndoStack()

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    def view(
        self,
        path: str,
        view_range: tuple[int, int] | None = None,
    ) -> ToolResult:
        """List a directory, or show numbered file lines."""
        return self._guard(f"viewing {path}", lambda: self._view(path, view_range))

    def create(self, path: str, content: str) -> ToolResult:
        """Write a new file (or overwrite one) after confirmation."""
        return self._guard(f"creating {path}", lambda: self._create(path, content))

    def str_replace(
        self,
        path: str,
        old: str,
        new: str,
        replace_all: bool = False,
    ) -> ToolResult:
        """Replace the first (or every) occurrence of *old* with *new*."""
        return self._guard(
            f"replacing text in {path}",
            lambda: self._str_replace(path, old, new, replace_all),
        )

    def replace_lines(
        self,
        path: str,
        start_line: int,
        end_line: int,
        content: str,
    ) -> ToolResult:
        """Replace lines ``start_line..end_line`` (1-indexed, inclusive)."""
        return self._guard(
            f"replacing lines in {path}",
            lambda: self._replace_lines(path, start_line, end_line, content),
        )

    def insert(self, path: str, insert_line: int, content: str) -> ToolResult:
        """Insert *content* so it becomes line *insert_line*."""
        return self._guard(
            f"inserting content in {path}",
            lambda: self._insert(path, insert_line, content),
        )

    def undo(self) -> ToolResult:
        """Revert the most recent successful edit."""
        return self._guard("undoing edit", self._undo)

    def edit_history(self) -> list[EditRecord]:
        return self.history.records()

    # ------------------------------------------------------------------
    # Operation bodies
    # ------------------------------------------------------------------

    def _view(self, path: str, view_range: tuple[int, int] | None) -> ToolResult:
        if not self.fs.exists(path):
            raise NotFoundError(f"File or directory not found: {path}")

        if self.fs.is_directory(path):
            entries = self.fs.list_dir(path)
            return ToolResult.ok(
                f"Directory contents of {path}:\n" + "\n".join(entries)
            )

        lines = self.fs.read_text(path).split("\n")

        if view_range:
            start, end = view_range
            if start < 1 or end < start:
                raise InvalidRangeError(
                    f"Invalid view range: {start}-{end}. "
                    f"Expected 1 <= start <= end."
                )
            if start > len(lines):
                raise InvalidRangeError(
                    f"Invalid start line: {start}. File has {len(lines)} lines."
                )
            end = min(end, len(lines))
            numbered = "\n".join(
                f"{start + idx}: {line}"
                for idx, line in enumerate(lines[start - 1:end])
            )
            return ToolResult.ok(f"Lines {start}-{end} of {path}:\n{numbered}")

        limit = self.config.PREVIEW_LINES
        numbered = "\n".join(
            f"{idx + 1}: {line}" for idx, line in enumerate(lines[:limit])
        )
        more = f"\n... +{len(lines) - limit} more lines" if len(lines) > limit else ""
        return ToolResult.ok(f"Contents of {path}:\n{numbered}{more}")

    def _create(self, path: str, content: str) -> ToolResult:
        previous: str | None = None
        if self.fs.exists(path) and not self.fs.is_directory(path):
            previous = self.fs.read_text(path)

        diff = diff_lines([], content.split("\n"), path, self.config.CONTEXT_LINES)
        preview = diff.render()
        self._confirm("create", "Write", path, preview, diff,
                      default_feedback="File creation cancelled by user")

        self.fs.ensure_parent_dirs(path)
        self.fs.write_text(path, content)
        self.history.push(CreateRecord(path=path, previous_content=previous))
        self._journal("create", path, True, diff)
        logger.info("[PatchEngine] Created %s (%d lines)", path, diff.added_lines)
        return ToolResult.ok(preview)

    def _str_replace(
        self,
        path: str,
        old: str,
        new: str,
        replace_all: bool,
    ) -> ToolResult:
        content = self._read_file(path)
        if not old:
            raise NotFoundError("Search string must not be empty")

        target = old
        fuzzy = False
        if old not in content:
            if "\n" not in old:
                raise NotFoundError(f'String not found in file: "{old}"')
            target = find_fuzzy_match(content, old)
            if target is None:
                raise NotFoundError(
                    "String not found in file. For multi-line replacements, "
                    "consider using line-based editing."
                )
            fuzzy = True

        occurrences = content.count(target)
        if replace_all:
            new_content = content.replace(target, new)
        else:
            new_content = content.replace(target, new, 1)
        positions = _written_positions(
            content, target, new, occurrences if replace_all else 1,
        )
        if new_content == content:
            raise NoChangesError(f"No changes in {path}")

        diff = self._diff(content, new_content, path)
        preview = diff.render()
        operation = "Edit file"
        if replace_all and occurrences > 1:
            operation += f" ({occurrences} occurrences)"
        self._confirm("str_replace", operation, path, preview, diff,
                      default_feedback="File edit cancelled by user",
                      fuzzy=fuzzy)

        self.fs.write_text(path, new_content)
        self.history.push(StrReplaceRecord(
            path=path,
            old=old,
            new=new,
            replace_all=replace_all,
            occurrences=occurrences if replace_all else 1,
            positions=positions,
        ))
        self._journal("str_replace", path, True, diff, fuzzy=fuzzy)
        logger.info(
            "[PatchEngine] Replaced %d occurrence(s) in %s%s",
            occurrences if replace_all else 1, path,
            " (fuzzy match)" if fuzzy else "",
        )
        return ToolResult.ok(preview)

    def _replace_lines(
        self,
        path: str,
        start_line: int,
        end_line: int,
        content: str,
    ) -> ToolResult:
        file_content = self._read_file(path)
        lines = file_content.split("\n")

        if start_line < 1 or start_line > len(lines):
            raise InvalidRangeError(
                f"Invalid start line: {start_line}. File has {len(lines)} lines."
            )
        if end_line < start_line or end_line > len(lines):
            raise InvalidRangeError(
                f"Invalid end line: {end_line}. "
                f"Must be between {start_line} and {len(lines)}."
            )

        replaced = "\n".join(lines[start_line - 1:end_line])
        new_lines = lines[:start_line - 1] + content.split("\n") + lines[end_line:]
        new_content = "\n".join(new_lines)
        if new_content == file_content:
            raise NoChangesError(f"No changes in {path}")

        diff = diff_lines(lines, new_lines, path, self.config.CONTEXT_LINES)
        preview = diff.render()
        self._confirm("replace_lines", f"Replace lines {start_line}-{end_line}",
                      path, preview, diff,
                      default_feedback="Line replacement cancelled by user")

        self.fs.write_text(path, new_content)
        self.history.push(StrReplaceRecord(
            path=path, old=replaced, new=content, start_line=start_line,
        ))
        self._journal("replace_lines", path, True, diff)
        logger.info("[PatchEngine] Replaced lines %d-%d in %s",
                    start_line, end_line, path)
        return ToolResult.ok(preview)

    def _insert(self, path: str, insert_line: int, content: str) -> ToolResult:
        file_content = self._read_file(path)
        lines = file_content.split("\n")

        if insert_line < 1 or insert_line > len(lines) + 1:
            raise InvalidRangeError(
                f"Invalid insert line: {insert_line}. "
                f"Must be between 1 and {len(lines) + 1}."
            )

        new_lines = list(lines)
        new_lines.insert(insert_line - 1, content)
        new_content = "\n".join(new_lines)

        diff = self._diff(file_content, new_content, path)
        # Inserts skip the gate unless the policy asks for it
        if self.config.CONFIRM_INSERTS:
            self._confirm("insert", f"Insert at line {insert_line}",
                          path, diff.render(), diff,
                          default_feedback="Insert cancelled by user")

        self.fs.write_text(path, new_content)
        self.history.push(InsertRecord(
            path=path, line_number=insert_line, content=content,
        ))
        self._journal("insert", path, True, diff)
        logger.info("[PatchEngine] Inserted content at line %d in %s",
                    insert_line, path)
        return ToolResult.ok(
            f"Successfully inserted content at line {insert_line} in {path}"
        )

    def _undo(self) -> ToolResult:
        record = self.history.pop()
        if record is None:
            raise NothingToUndoError("No edits to undo")

        logger.info("[Undo] Reverting %s on %s", record.command, record.path)

        if isinstance(record, CreateRecord):
            if record.previous_content is None:
                self.fs.remove(record.path)
            else:
                self.fs.write_text(record.path, record.previous_content)

        elif isinstance(record, InsertRecord):
            lines = self.fs.read_text(record.path).split("\n")
            start = record.line_number - 1
            # content may itself span several lines once joined
            del lines[start:start + len(record.content.split("\n"))]
            self.fs.write_text(record.path, "\n".join(lines))

        elif isinstance(record, StrReplaceRecord):
            content = self.fs.read_text(record.path)
            self.fs.write_text(record.path, _revert_replacement(record, content))

        self._journal(f"undo_{record.command}", record.path, True)
        return ToolResult.ok(f"Successfully undid {record.command} operation")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _guard(self, action: str, func: Callable[[], ToolResult]) -> ToolResult:
        """Run an operation body and convert its errors into a ToolResult."""
        try:
            return func()
        except PatchEngineError as exc:
            logger.info("[PatchEngine] %s failed (%s): %s", action, exc.kind, exc)
            return ToolResult.fail(str(exc), exc.kind)
        except (OSError, UnicodeDecodeError) as exc:
            logger.error("[PatchEngine] Error %s: %s", action, exc)
            return ToolResult.fail(f"Error {action}: {exc}", IOFailureError.kind)

    def _read_file(self, path: str) -> str:
        if not self.fs.exists(path):
            raise NotFoundError(f"File not found: {path}")
        return self.fs.read_text(path)

    def _diff(self, old_content: str, new_content: str, path: str) -> FileDiff:
        return diff_lines(
            old_content.split("\n"),
            new_content.split("\n"),
            path,
            self.config.CONTEXT_LINES,
        )

    def _confirm(
        self,
        command: str,
        operation: str,
        path: str,
        preview: str,
        diff: FileDiff,
        default_feedback: str,
        fuzzy: bool = False,
    ) -> None:
        """Ask the gate; raise ``RejectedByUserError`` unless approved."""
        response = self.gate.request_confirmation(
            ConfirmationRequest(operation=operation, path=path, preview_diff=preview)
        )
        if not response.confirmed:
            self._journal(command, path, False, diff, fuzzy=fuzzy)
            raise RejectedByUserError(response.feedback or default_feedback)

    def _journal(
        self,
        operation: str,
        path: str,
        approved: bool,
        diff: FileDiff | None = None,
        fuzzy: bool = False,
    ) -> None:
        if self.journal_root is None:
            return
        log_edit_metric(
            {
                "operation": operation,
                "path": path,
                "approved": approved,
                "fuzzy_match": fuzzy,
                "lines_added": diff.added_lines if diff else 0,
                "lines_removed": diff.removed_lines if diff else 0,
            },
            project_root=self.journal_root,
        )


def _written_positions(
    content: str,
    target: str,
    new: str,
    count: int,
) -> tuple[int, ...]:
    """Offsets in the edited content of the first *count* replacements."""
    positions = []
    shift = len(new) - len(target)
    start = 0
    for k in range(count):
        idx = content.find(target, start)
        if idx < 0:
            break
        # each earlier replacement moved this one by ``shift``
        positions.append(idx + k * shift)
        start = idx + len(target)
    return tuple(positions)


def _revert_replacement(record: StrReplaceRecord, content: str) -> str:
    """Put ``record.old`` back where ``record.new`` was written."""
    missing = NotFoundError(
        f"Cannot undo str_replace: replacement text no longer "
        f"found in {record.path}"
    )

    if record.start_line is not None:
        lines = content.split("\n")
        start = record.start_line - 1
        written = record.new.split("\n")
        if lines[start:start + len(written)] != written:
            raise missing
        lines[start:start + len(written)] = record.old.split("\n")
        return "\n".join(lines)

    if record.positions:
        size = len(record.new)
        if any(content[pos:pos + size] != record.new for pos in record.positions):
            raise missing
        for pos in reversed(record.positions):
            content = content[:pos] + record.old + content[pos + size:]
        return content

    if not record.new or record.new not in content:
        raise missing
    if record.replace_all and record.occurrences > 1:
        return content.replace(record.new, record.old)
    return content.replace(record.new, record.old, 1)
