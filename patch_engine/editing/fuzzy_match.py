"""
Fuzzy structural matcher — finds a same-named function block when an
exact multi-line search string is not present in a file.

The check is a heuristic: two blocks are considered equivalent when their
control-flow keyword skeletons are identical. Formatting, quoting and
identifier differences are ignored entirely.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

_FUNCTION_NAME = re.compile(r"function\s+(\w+)")
_STRUCTURAL_TOKENS = re.compile(
    r"\b(function|console\.log|return|if|else|for|while)\b"
)

# Normalization passes, applied in order
_QUOTES = re.compile(r"[\"'`]")
_WHITESPACE = re.compile(r"\s+")
_OPEN_BRACE = re.compile(r"{\s+")
_CLOSE_BRACE = re.compile(r"\s+}")
_SEMICOLON = re.compile(r";\s*")


def extract_function_name(search: str) -> str | None:
    """Return the name in the first ``function <name>`` of *search*."""
    match = _FUNCTION_NAME.search(search)
    return match.group(1) if match else None


def find_function_start(lines: list[str], name: str) -> int | None:
    """Index of the first line declaring ``function <name>`` with a ``{``."""
    needle = f"function {name}"
    for i, line in enumerate(lines):
        if needle in line and "{" in line:
            return i
    return None


def extract_block(lines: list[str], start: int) -> str:
    """Return the brace-delimited block that opens on ``lines[start]``.

    Depth is counted character by character; the block ends on the first
    line where it returns to zero after opening. An unterminated block runs
    to the end of the file.
    """
    depth = 0
    opened = False
    end = len(lines) - 1

    for i in range(start, len(lines)):
        for ch in lines[i]:
            if ch == "{":
                depth += 1
                opened = True
            elif ch == "}":
                depth -= 1
        if opened and depth <= 0:
            end = i
            break

    return "\n".join(lines[start:end + 1])


def normalize_for_comparison(text: str) -> str:
    text = _QUOTES.sub('"', text)
    text = _WHITESPACE.sub(" ", text)
    text = _OPEN_BRACE.sub("{ ", text)
    text = _CLOSE_BRACE.sub(" }", text)
    text = _SEMICOLON.sub(";", text)
    return text.strip()


def structural_tokens(text: str) -> list[str]:
    return _STRUCTURAL_TOKENS.findall(text)


def is_similar_structure(search: str, actual: str) -> bool:
    """True when both texts share the same control-flow token sequence."""
    return structural_tokens(search) == structural_tokens(actual)


def find_fuzzy_match(content: str, search: str) -> str | None:
    """Locate the block in *content* that *search* most likely meant.

    Parameters
    ----------
    content:
        Full text of the file being edited.
    search:
        The multi-line string the caller asked to replace.

    Returns
    -------
    str | None
        The exact text of the matching block in *content*, usable as the
        replacement target, or None when no equivalent block exists.
    """
    name = extract_function_name(search)
    if name is None:
        logger.debug("[Fuzzy] No function name in search string")
        return None

    lines = content.split("\n")
    start = find_function_start(lines, name)
    if start is None:
        logger.debug("[Fuzzy] function %s not found in file", name)
        return None

    block = extract_block(lines, start)
    if not is_similar_structure(
        normalize_for_comparison(search),
        normalize_for_comparison(block),
    ):
        logger.info(
            "[Fuzzy] function %s found at line %d but its structure differs",
            name, start + 1,
        )
        return None

    logger.info("[Fuzzy] Matched function %s at line %d", name, start + 1)
    return block
