"""Splice a hunk's new block into the target document."""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from ..errors import EmptyOutputError
from .document import TargetDocument
from .types import Hunk, MatchCandidate


def _last_index(lines: Sequence[str], wanted: Optional[str]) -> Optional[int]:
    if wanted is None:
        return None
    for i in range(len(lines) - 1, -1, -1):
        if lines[i] == wanted:
            return i
    return None


def _first_index(lines: Sequence[str], wanted: Optional[str]) -> Optional[int]:
    if wanted is None:
        return None
    for i, line in enumerate(lines):
        if line == wanted:
            return i
    return None


def insertion_point(normalized_target: Sequence[str], hunk: Hunk) -> int:
    """Return the index at which a pure insertion's new block goes.

    The block goes right after the last line equal to ``ctx_before``. If that
    would put it after the first line equal to ``ctx_after``, it goes right
    before that line instead. With neither anchor present it goes at the end.
    """

    before = _last_index(normalized_target, hunk.ctx_before)
    after = _first_index(normalized_target, hunk.ctx_after)

    if before is not None:
        pos = before + 1
        if after is not None and pos > after:
            return after
        return pos
    if after is not None:
        return after
    return len(normalized_target)




def splice_range(
    normalized_target: Sequence[str],
    hunk: Hunk,
    candidate: Optional[MatchCandidate] = None,
) -> Tuple[int, int]:
    """Return the ``[start, stop)`` slice of the target that the new block replaces.

    For a replacement this covers every line from the span's first to last
    index, so gap lines skipped by a subsequence match are discarded too. For
    a pure insertion the slice is empty.

    Raises:
        ValueError: if a replacement hunk is given without a candidate.
    """

    if hunk.is_insertion:
        pos = insertion_point(normalized_target, hunk)
        return pos, pos
    if candidate is None:
        raise ValueError("A resolved span is required to apply a replacement hunk")
    return candidate.first, candidate.last + 1


def apply_hunk(document: TargetDocument, hunk: Hunk, candidate: Optional[MatchCandidate] = None) -> None:
    """Splice ``hunk``'s new block into ``document`` in place.

    The new block is written verbatim. Lines outside the slice are untouched.

    Raises:
        EmptyOutputError: if the result would have no lines. ``document`` is
            left as it was.
        ValueError: if a replacement hunk is given without a candidate.
    """

    start, stop = splice_range(document.normalized, hunk, candidate)
    if len(document) - (stop - start) + len(hunk.new_lines) == 0:
        raise EmptyOutputError(
            f"Applying {hunk.describe()} would leave the target empty",
            hint="Keep at least one line in the file, or delete it outside of the patch",
        )
    document.splice(start, stop, hunk.new_lines)
