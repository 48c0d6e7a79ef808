"""Checks that let a hunk succeed without touching the target."""

from __future__ import annotations

from typing import Sequence

from .normalize import normalize_lines
from .types import Hunk


def is_noop(hunk: Hunk) -> bool:
    """Return True if the hunk replaces its old block with an equivalent one.

    Equivalence is judged on normalized lines, so a whitespace-only edit is
    an identity edit. A hunk with both blocks empty is also a no-op.
    """

    return normalize_lines(hunk.old_lines) == normalize_lines(hunk.new_lines)


def already_applied(normalized_target: Sequence[str], hunk: Hunk) -> bool:
    """Return True if the hunk's new block already appears in the target.

    Any contiguous window of the normalized target equal to the normalized
    new block counts. Pure deletions are never short-circuited.
    """

    n = len(hunk.new_lines)
    if n == 0:
        return False

    needle = normalize_lines(hunk.new_lines)
    first = needle[0]

    for i in range(len(normalized_target) - n + 1):
        if normalized_target[i] != first:
            continue
        if list(normalized_target[i : i + n]) == needle:
            return True

    return False
