"""
patch_engine — line diffs, reviewable unified-diff hunks and undoable file edits.

Public API for library usage::

    from patch_engine import TextEditor, AutoApprove

    editor = TextEditor(gate=AutoApprove())
    result = editor.str_replace("app.js", "var x = 1;", "const x = 1;")
    print(result.output)
"""

from .editing import (
    TextEditor, ToolResult, FileDiff, diff_lines, diff_text,
    AutoApprove, RejectAll, SessionGate,
)

__all__ = [
    "TextEditor", "ToolResult", "FileDiff", "diff_lines", "diff_text",
    "AutoApprove", "RejectAll", "SessionGate",
]
