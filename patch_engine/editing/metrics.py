"""
Edit journal — records every committed or rejected edit in a JSONL file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_JOURNAL_DIR = ".patchengine"
_JOURNAL_FILE = "edit_journal.jsonl"


def _journal_path(project_root: str | None = None) -> str:
    """Return the absolute path to the journal file."""
    base = project_root or os.getcwd()
    return os.path.join(base, _JOURNAL_DIR, _JOURNAL_FILE)


def log_edit_metric(data: dict, project_root: str | None = None) -> None:
    """Append a single edit entry to the JSONL journal.

    Parameters
    ----------
    data:
        Entry fields (operation, path, approved, fuzzy_match,
        lines_added, lines_removed, ...).
    project_root:
        Optional project root directory. Defaults to CWD.
    """
    path = _journal_path(project_root)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[PatchEngine] Failed to write edit journal: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
) -> dict:
    """Compute rolling statistics from the journal.

    Parameters
    ----------
    last_n:
        Number of most-recent entries to include.
    project_root:
        Optional project root directory.

    Returns
    -------
    dict
        total_edits, approval_rate, fuzzy_match_rate (percentages),
        lines_added, lines_removed and per-operation counts.
    """
    path = _journal_path(project_root)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[PatchEngine] Failed to read edit journal: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "approval_rate": 0.0,
            "fuzzy_match_rate": 0.0,
            "lines_added": 0,
            "lines_removed": 0,
            "operations": {},
        }

    total = len(entries)
    approved = sum(1 for e in entries if e.get("approved", False))
    fuzzy = sum(1 for e in entries if e.get("fuzzy_match", False))
    operations = Counter(e.get("operation", "unknown") for e in entries)

    return {
        "total_edits": total,
        "approval_rate": approved / total * 100,
        "fuzzy_match_rate": fuzzy / total * 100,
        "lines_added": sum(e.get("lines_added", 0) for e in entries),
        "lines_removed": sum(e.get("lines_removed", 0) for e in entries),
        "operations": dict(operations.most_common()),
    }
