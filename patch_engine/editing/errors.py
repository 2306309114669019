"""
Error taxonomy for the patch engine.

Operations raise these internally; ``TextEditor`` catches them at its
public boundary and turns them into failed ``ToolResult`` values.
"""

from __future__ import annotations


class PatchEngineError(Exception):
    """Base class for every recoverable patch engine failure."""

    kind = "PatchEngineError"


class NotFoundError(PatchEngineError):
    """A path or a search string does not exist."""

    kind = "NotFound"


class InvalidRangeError(PatchEngineError):
    """Line bounds outside ``[1, len]`` or ``end < start``."""

    kind = "InvalidRange"


class RejectedByUserError(PatchEngineError):
    """The confirmation gate denied the operation."""

    kind = "RejectedByUser"


class NoChangesError(PatchEngineError):
    """The edit would leave the file unchanged."""

    kind = "NoChanges"


class NothingToUndoError(PatchEngineError):
    """The undo stack is empty."""

    kind = "NothingToUndo"


class IOFailureError(PatchEngineError):
    """An underlying read, write or remove failed."""

    kind = "IOFailure"
