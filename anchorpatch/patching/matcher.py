"""Locate the target span that corresponds to a hunk's old block.

Matching runs on normalized lines in two passes:

1) exact: contiguous windows equal to the old block
2) subsequence: the old block aligned greedily as an ordered subsequence,
   allowing unlisted lines in between

Each candidate is scored by its context anchors: the line right before the
span equal to ``ctx_before`` and the line right after equal to
``ctx_after``. Exact candidates add a baseline point. Subsequence candidates
add a density term that rewards tight spans, but scores compare as
``(anchor_points, density)`` so anchors always dominate density.

A unique best exact window wins outright. Otherwise the subsequence pass
decides, and a tie for the best score there is reported as ambiguous rather
than resolved by position.
"""

from __future__ import annotations

from bisect import bisect_right
from typing import Dict, List, Optional, Sequence, Tuple

from ..logging import get_logger
from .normalize import normalize_lines
from .types import Hunk, MatchCandidate, MatchKind, MatchResult, MatchStatus

logger = get_logger(__name__)

ANCHOR_WEIGHT: int = 2
EXACT_BASELINE: int = 1
DENSITY_SCALE: int = 1000


def _anchor_points(target: Sequence[str], first: int, last: int, hunk: Hunk) -> int:
    points = 0
    if hunk.ctx_before is not None and first > 0 and target[first - 1] == hunk.ctx_before:
        points += ANCHOR_WEIGHT
    if hunk.ctx_after is not None and last + 1 < len(target) and target[last + 1] == hunk.ctx_after:
        points += ANCHOR_WEIGHT
    return points


def _collect_matching_positions(lines: Sequence[str], pattern: Sequence[str]) -> List[int]:
    """Return all indices where pattern matches lines contiguously."""

    n = len(pattern)
    max_i = len(lines) - n
    if n == 0 or max_i < 0:
        return []

    first = pattern[0]
    positions: List[int] = []

    for i in range(max_i + 1):
        if lines[i] != first:
            continue
        for j in range(1, n):
            if lines[i + j] != pattern[j]:
                break
        else:
            positions.append(i)

    return positions


def _build_position_index(lines: Sequence[str]) -> Dict[str, List[int]]:
    """Map each distinct line to the sorted list of indices where it occurs."""

    index: Dict[str, List[int]] = {}
    for i, line in enumerate(lines):
        index.setdefault(line, []).append(i)
    return index


def _align_from(index: Dict[str, List[int]], pattern: Sequence[str], start: int) -> Optional[Tuple[int, ...]]:
    """Greedily align pattern[1:] after ``start``, taking the next equal line each time."""

    indices = [start]
    prev = start
    for line in pattern[1:]:
        positions = index.get(line)
        if not positions:
            return None
        k = bisect_right(positions, prev)
        if k == len(positions):
            return None
        prev = positions[k]
        indices.append(prev)
    return tuple(indices)


def exact_candidates(target: Sequence[str], pattern: Sequence[str], hunk: Hunk) -> List[MatchCandidate]:
    n = len(pattern)
    candidates: List[MatchCandidate] = []
    for pos in _collect_matching_positions(target, pattern):
        points = EXACT_BASELINE + _anchor_points(target, pos, pos + n - 1, hunk)
        candidates.append(MatchCandidate(MatchKind.EXACT, tuple(range(pos, pos + n)), (float(points),)))
    return candidates


def subsequence_candidates(
    target: Sequence[str],
    pattern: Sequence[str],
    hunk: Hunk,
    *,
    max_gap: Optional[int] = None,
) -> List[MatchCandidate]:
    n = len(pattern)
    if n == 0:
        return []

    index = _build_position_index(target)
    candidates: List[MatchCandidate] = []

    for start in index.get(pattern[0], []):
        indices = _align_from(index, pattern, start)
        if indices is None:
            # Later starts can only push every alignment further right.
            break
        first, last = indices[0], indices[-1]
        span = last - first + 1
        if max_gap is not None and span - n > max_gap:
            continue
        density = n * DENSITY_SCALE / span
        points = _anchor_points(target, first, last, hunk)
        candidates.append(MatchCandidate(MatchKind.SUBSEQUENCE, indices, (float(points), density)))

    return candidates


def _best(candidates: Sequence[MatchCandidate]) -> List[MatchCandidate]:
    top = max(c.score for c in candidates)
    return [c for c in candidates if c.score == top]


def locate(
    normalized_target: Sequence[str],
    hunk: Hunk,
    *,
    max_gap: Optional[int] = None,
) -> MatchResult:
    """Find where ``hunk.old_lines`` sits in the normalized target.

    Args:
        normalized_target: Target lines, already normalized.
        hunk: A hunk with a non-empty old block.
        max_gap: If set, subsequence candidates that skip more than this many
            target lines are discarded.

    Returns:
        A MatchResult with status exact, subsequence, ambiguous or not_found.

    Raises:
        ValueError: if the hunk is a pure insertion.
    """

    if hunk.is_insertion:
        raise ValueError("Pure insertion hunks have no span to locate")

    pattern = normalize_lines(hunk.old_lines)

    exact = exact_candidates(normalized_target, pattern, hunk)
    if exact:
        best = _best(exact)
        if len(best) == 1:
            logger.debug("exact_match", first=best[0].first, last=best[0].last, score=best[0].score)
            return MatchResult(MatchStatus.EXACT, candidate=best[0])
        logger.debug("exact_match_tied", count=len(best))

    fuzzy = subsequence_candidates(normalized_target, pattern, hunk, max_gap=max_gap)
    if not fuzzy:
        return MatchResult(MatchStatus.NOT_FOUND)

    best = _best(fuzzy)
    if len(best) > 1:
        logger.debug("subsequence_match_tied", count=len(best), score=best[0].score)
        return MatchResult(MatchStatus.AMBIGUOUS, tied=best)

    logger.debug("subsequence_match", first=best[0].first, last=best[0].last, score=best[0].score)
    return MatchResult(MatchStatus.SUBSEQUENCE, candidate=best[0])
