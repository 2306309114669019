"""
Change extractor — backtracks an LCS table into contiguous diff regions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .lcs import compute_lcs_table


@dataclass(frozen=True)
class DiffRegion:
    """A maximal span where the old and new sequences diverge.

    All indices are 0-based; ``*_end`` is exclusive.
    """
    old_start: int
    old_end: int
    new_start: int
    new_end: int

    @property
    def old_length(self) -> int:
        return self.old_end - self.old_start

    @property
    def new_length(self) -> int:
        return self.new_end - self.new_start

    @property
    def delta(self) -> int:
        """Net line-count change contributed by this region."""
        return self.new_length - self.old_length


def extract_changes(
    old: Sequence[str],
    new: Sequence[str],
    table: list[list[int]] | None = None,
) -> list[DiffRegion]:
    """Walk the LCS table back from ``(m, n)`` and collect diff regions.

    When stepping left (insertion) and stepping up (deletion) keep the same
    LCS length, the insertion is taken first so the output is deterministic.

    Parameters
    ----------
    old, new:
        The two line sequences.
    table:
        A precomputed table from ``compute_lcs_table(old, new)``.

    Returns
    -------
    list[DiffRegion]
        Regions in ascending order; never overlapping.
    """
    if table is None:
        table = compute_lcs_table(old, new)

    regions: list[DiffRegion] = []
    i = len(old)
    j = len(new)
    old_end = i
    new_end = j
    in_change = False

    while i > 0 or j > 0:
        if i > 0 and j > 0 and old[i - 1] == new[j - 1]:
            if in_change:
                regions.append(DiffRegion(i, old_end, j, new_end))
                in_change = False
            i -= 1
            j -= 1
            continue

        if not in_change:
            old_end = i
            new_end = j
            in_change = True

        if j > 0 and (i == 0 or table[i][j - 1] >= table[i - 1][j]):
            j -= 1
        else:
            i -= 1

    if in_change:
        regions.append(DiffRegion(0, old_end, 0, new_end))

    regions.reverse()
    return regions
