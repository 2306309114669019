"""
Edit history — tagged edit records and the undo stack that holds them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class CreateRecord:
    """A file was created (or overwritten) by ``create``.

    ``previous_content`` holds what an overwritten file contained, so undo
    restores it instead of deleting the file.
    """
    path: str
    previous_content: Optional[str] = None

    command = "create"


@dataclass(frozen=True)
class StrReplaceRecord:
    """``new`` was written where ``old`` used to be.

    ``positions`` are the character offsets of every written ``new`` in the
    edited content, so undo touches only the text this edit produced.
    ``start_line`` is set by ``replace_lines`` instead: ``new`` then spans
    the lines starting there. A record with neither reverts the first
    occurrence of ``new``.
    """
    path: str
    old: str
    new: str
    replace_all: bool = False
    occurrences: int = 1
    positions: tuple[int, ...] = ()
    start_line: Optional[int] = None

    command = "str_replace"


@dataclass(frozen=True)
class InsertRecord:
    """``content`` was spliced in as line ``line_number`` (1-indexed)."""
    path: str
    line_number: int
    content: str

    command = "insert"


EditRecord = Union[CreateRecord, StrReplaceRecord, InsertRecord]


class UndoStack:
    """LIFO of successfully applied edits for one editor session."""

    def __init__(self) -> None:
        self._records: list[EditRecord] = []

    def push(self, record: EditRecord) -> None:
        self._records.append(record)

    def pop(self) -> EditRecord | None:
        """Remove and return the newest record, or None when empty."""
        if not self._records:
            return None
        return self._records.pop()

    def peek(self) -> EditRecord | None:
        return self._records[-1] if self._records else None

    def records(self) -> list[EditRecord]:
        """Copy of the stack, oldest first."""
        return list(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def __bool__(self) -> bool:
        return bool(self._records)
