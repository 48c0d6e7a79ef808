"""Tests for locating a hunk's old block in the target.

Tests cover:
- Exact window matching and anchor tie-breaks
- Subsequence matching with gaps, anchors and density
- Ambiguity and not-found results
"""
import pytest

from anchorpatch.patching.matcher import exact_candidates, locate, subsequence_candidates
from anchorpatch.patching.normalize import normalize_lines
from anchorpatch.patching.types import Hunk, MatchKind, MatchStatus


def lines(*items: str) -> list:
    return normalize_lines(list(items))


# ---------------------------------------------------------------------------
# Exact pass
# ---------------------------------------------------------------------------
class TestExactMatching:
    def test_unique_exact_window(self) -> None:
        result = locate(lines("A", "B", "C"), Hunk(old_lines=["B"], new_lines=["B2"]))

        assert result.status == MatchStatus.EXACT
        assert result.candidate.indices == (1,)
        assert result.candidate.kind == MatchKind.EXACT

    def test_multi_line_exact_window(self) -> None:
        target = lines("head", "x = 1", "y = 2", "tail")
        result = locate(target, Hunk(old_lines=["x = 1", "y = 2"], new_lines=["z"]))

        assert result.status == MatchStatus.EXACT
        assert (result.candidate.first, result.candidate.last) == (1, 2)

    def test_whitespace_drift_still_matches_exactly(self) -> None:
        target = lines("    if x:", "        return  1")
        result = locate(target, Hunk(old_lines=["if x:", "\treturn 1"], new_lines=["pass"]))

        assert result.status == MatchStatus.EXACT
        assert result.candidate.indices == (0, 1)

    def test_anchor_breaks_exact_tie(self) -> None:
        target = lines("P", "X", "Q", "R", "X", "S")
        result = locate(target, Hunk(old_lines=["X"], new_lines=["Y"], ctx_before="R"))

        assert result.status == MatchStatus.EXACT
        assert result.candidate.first == 4

    def test_exact_window_preferred_over_anchored_subsequence(self) -> None:
        # A..B at 1-3 has both anchors but skips Q; the contiguous A,B at 6-7 wins.
        target = lines("P", "A", "Q", "B", "R", "x", "A", "B", "y")
        hunk = Hunk(old_lines=["A", "B"], new_lines=["C"], ctx_before="P", ctx_after="R")
        result = locate(target, hunk)

        assert result.status == MatchStatus.EXACT
        assert result.candidate.indices == (6, 7)

    def test_exact_scores_count_anchors(self) -> None:
        target = lines("P", "X", "R", "X")
        hunk = Hunk(old_lines=["X"], new_lines=["Y"], ctx_before="P", ctx_after="R")
        scores = sorted(c.score for c in exact_candidates(target, ["X"], hunk))

        assert scores == [(1.0,), (5.0,)]


# ---------------------------------------------------------------------------
# Subsequence pass
# ---------------------------------------------------------------------------
class TestSubsequenceMatching:
    def test_gap_lines_are_spanned(self) -> None:
        target = lines("def f():", "a = 1", "log(a)", "return a")
        result = locate(target, Hunk(old_lines=["a = 1", "return a"], new_lines=["return 1"]))

        assert result.status == MatchStatus.SUBSEQUENCE
        assert result.candidate.indices == (1, 3)
        assert result.candidate.gap == 1

    def test_anchored_loose_span_beats_unanchored_tight_span(self) -> None:
        target = lines("H", "A", "z", "z2", "B", "T", "w", "A", "q", "B")
        hunk = Hunk(old_lines=["A", "B"], new_lines=["C"], ctx_before="H", ctx_after="T")
        result = locate(target, hunk)

        assert result.status == MatchStatus.SUBSEQUENCE
        assert (result.candidate.first, result.candidate.last) == (1, 4)

    def test_density_breaks_tie_without_anchors(self) -> None:
        target = lines("A", "z", "z", "B", "w", "A", "q", "B")
        result = locate(target, Hunk(old_lines=["A", "B"], new_lines=["C"]))

        assert result.status == MatchStatus.SUBSEQUENCE
        assert (result.candidate.first, result.candidate.last) == (5, 7)

    def test_subsequence_runs_when_exact_windows_tie(self) -> None:
        # Both contiguous windows score the same; the anchored loose span decides.
        target = lines("A", "B", "x", "A", "B", "x", "H", "A", "z", "B", "T")
        hunk = Hunk(old_lines=["A", "B"], new_lines=["C"], ctx_before="H", ctx_after="T")
        result = locate(target, hunk)

        assert result.status == MatchStatus.SUBSEQUENCE
        assert result.candidate.indices == (7, 9)

    def test_greedy_alignment_takes_next_occurrence(self) -> None:
        target = lines("A", "B", "x", "B")
        candidates = subsequence_candidates(target, ["A", "B"], Hunk(old_lines=["A", "B"]))

        assert [c.indices for c in candidates] == [(0, 1)]

    def test_order_matters(self) -> None:
        result = locate(lines("B", "A"), Hunk(old_lines=["A", "B"], new_lines=["C"]))
        assert result.status == MatchStatus.NOT_FOUND

    def test_max_gap_discards_wide_spans(self) -> None:
        target = lines("A", "z", "z", "B")
        hunk = Hunk(old_lines=["A", "B"], new_lines=["C"])

        assert locate(target, hunk, max_gap=1).status == MatchStatus.NOT_FOUND
        assert locate(target, hunk, max_gap=2).status == MatchStatus.SUBSEQUENCE

    def test_anchors_dominate_density_in_scores(self) -> None:
        target = lines("H", "A", "z", "z", "z", "B", "A", "B")
        hunk = Hunk(old_lines=["A", "B"], ctx_before="H")
        candidates = subsequence_candidates(target, ["A", "B"], hunk)
        best = max(candidates, key=lambda c: c.score)

        assert best.first == 1
        assert best.score[0] > 0


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------
class TestMatchFailures:
    def test_duplicate_block_without_anchors_is_ambiguous(self) -> None:
        target = lines("X", "A", "Y", "X", "A", "Y")
        result = locate(target, Hunk(old_lines=["A"], new_lines=["A2"]))

        assert result.status == MatchStatus.AMBIGUOUS
        assert result.candidate is None
        assert not result.found
        assert [c.first for c in result.tied] == [1, 4]

    def test_equally_loose_spans_are_ambiguous(self) -> None:
        target = lines("A", "z", "B", "w", "A", "q", "B")
        result = locate(target, Hunk(old_lines=["A", "B"], new_lines=["C"]))

        assert result.status == MatchStatus.AMBIGUOUS
        assert [c.first for c in result.tied] == [0, 4]

    def test_missing_block(self) -> None:
        result = locate(lines("A", "B"), Hunk(old_lines=["C"], new_lines=["D"]))

        assert result.status == MatchStatus.NOT_FOUND
        assert result.tied == []

    def test_block_longer_than_target(self) -> None:
        result = locate(lines("A"), Hunk(old_lines=["A", "B"], new_lines=["C"]))
        assert result.status == MatchStatus.NOT_FOUND

    def test_insertion_has_nothing_to_locate(self) -> None:
        with pytest.raises(ValueError):
            locate(lines("A"), Hunk(new_lines=["B"], ctx_before="A"))
