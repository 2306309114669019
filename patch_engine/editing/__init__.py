"""Patch engine — LCS diffs, unified-diff hunks, fuzzy matching and undoable edits."""

from .lcs import compute_lcs_table, lcs_length
from .changes import DiffRegion, extract_changes
from .hunks import FileDiff, Hunk, HunkLine, LineKind, build_hunks, diff_lines, diff_text
from .diff_parser import DiffParser, ParsedDiff, PatchParseError
from .patch_applier import PatchApplier, ApplyResult, PatchApplyError, apply_hunks
from .fuzzy_match import find_fuzzy_match
from .history import CreateRecord, StrReplaceRecord, InsertRecord, EditRecord, UndoStack
from .confirmation import (
    ConfirmationGate, ConfirmationRequest, ConfirmationResponse,
    AutoApprove, RejectAll, SessionGate,
)
from .filesystem import FileSystem, LocalFileSystem
from .errors import (
    PatchEngineError, NotFoundError, InvalidRangeError, RejectedByUserError,
    NoChangesError, NothingToUndoError, IOFailureError,
)
from .text_editor import TextEditor, ToolResult
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "compute_lcs_table", "lcs_length",
    "DiffRegion", "extract_changes",
    "FileDiff", "Hunk", "HunkLine", "LineKind", "build_hunks", "diff_lines", "diff_text",
    "DiffParser", "ParsedDiff", "PatchParseError",
    "PatchApplier", "ApplyResult", "PatchApplyError", "apply_hunks",
    "find_fuzzy_match",
    "CreateRecord", "StrReplaceRecord", "InsertRecord", "EditRecord", "UndoStack",
    "ConfirmationGate", "ConfirmationRequest", "ConfirmationResponse",
    "AutoApprove", "RejectAll", "SessionGate",
    "FileSystem", "LocalFileSystem",
    "PatchEngineError", "NotFoundError", "InvalidRangeError", "RejectedByUserError",
    "NoChangesError", "NothingToUndoError", "IOFailureError",
    "TextEditor", "ToolResult",
    "log_edit_metric", "read_edit_stats",
]
