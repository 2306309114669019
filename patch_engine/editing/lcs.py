"""
LCS core — longest-common-subsequence table over two line sequences.
"""

from __future__ import annotations

from typing import Sequence


def compute_lcs_table(old: Sequence[str], new: Sequence[str]) -> list[list[int]]:
    """Build the ``(m+1) x (n+1)`` LCS length table.

    ``table[i][j]`` is the length of the LCS of ``old[:i]`` and ``new[:j]``.
    Lines are compared with plain equality (no trimming).

    Parameters
    ----------
    old:
        Lines of the old file version.
    new:
        Lines of the new file version.

    Returns
    -------
    list[list[int]]
        The table; row 0 and column 0 are all zeros.
    """
    m = len(old)
    n = len(new)
    table = [[0] * (n + 1) for _ in range(m + 1)]

    for i in range(1, m + 1):
        old_line = old[i - 1]
        row = table[i]
        prev_row = table[i - 1]
        for j in range(1, n + 1):
            if old_line == new[j - 1]:
                row[j] = prev_row[j - 1] + 1
            else:
                row[j] = max(prev_row[j], row[j - 1])

    return table


def lcs_length(old: Sequence[str], new: Sequence[str]) -> int:
    """Return the length of the longest common subsequence of two sequences."""
    return compute_lcs_table(old, new)[len(old)][len(new)]
