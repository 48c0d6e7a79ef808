"""Tests for splicing new blocks into the target."""
import pytest

from anchorpatch.errors import EmptyOutputError
from anchorpatch.patching.applier import apply_hunk, insertion_point, splice_range
from anchorpatch.patching.document import TargetDocument
from anchorpatch.patching.normalize import normalize_lines
from anchorpatch.patching.types import Hunk, MatchCandidate, MatchKind


def candidate(*indices: int, kind: MatchKind = MatchKind.EXACT) -> MatchCandidate:
    return MatchCandidate(kind, tuple(indices), (1.0,))


class TestInsertionPoint:
    def test_between_anchors(self) -> None:
        target = normalize_lines(["A", "C"])
        hunk = Hunk(new_lines=["B"], ctx_before="A", ctx_after="C")
        assert insertion_point(target, hunk) == 1

    def test_after_last_occurrence_of_ctx_before(self) -> None:
        target = normalize_lines(["A", "x", "A", "y"])
        assert insertion_point(target, Hunk(new_lines=["B"], ctx_before="A")) == 3

    def test_before_ctx_after_when_ctx_before_comes_later(self) -> None:
        target = normalize_lines(["C", "A"])
        hunk = Hunk(new_lines=["B"], ctx_before="A", ctx_after="C")
        assert insertion_point(target, hunk) == 0

    def test_only_ctx_after(self) -> None:
        target = normalize_lines(["A", "B", "C"])
        assert insertion_point(target, Hunk(new_lines=["x"], ctx_after="C")) == 2

    def test_no_anchors_appends(self) -> None:
        target = normalize_lines(["A", "B"])
        assert insertion_point(target, Hunk(new_lines=["x"])) == 2

    def test_anchors_absent_from_target_append(self) -> None:
        target = normalize_lines(["A", "B"])
        hunk = Hunk(new_lines=["x"], ctx_before="nope", ctx_after="also nope")
        assert insertion_point(target, hunk) == 2

    def test_anchor_comparison_is_whitespace_tolerant(self) -> None:
        target = normalize_lines(["    def  f():", "        pass"])
        assert insertion_point(target, Hunk(new_lines=["x"], ctx_before="def f():")) == 1


class TestSpliceRange:
    def test_replacement_covers_gap_lines(self) -> None:
        hunk = Hunk(old_lines=["a", "b"], new_lines=["X"])
        assert splice_range(["a", "gap", "b", "c"], hunk, candidate(0, 2, kind=MatchKind.SUBSEQUENCE)) == (0, 3)

    def test_insertion_is_an_empty_slice(self) -> None:
        hunk = Hunk(new_lines=["B"], ctx_before="A", ctx_after="C")
        assert splice_range(["A", "C"], hunk) == (1, 1)

    def test_replacement_requires_candidate(self) -> None:
        with pytest.raises(ValueError):
            splice_range(["A"], Hunk(old_lines=["A"], new_lines=["B"]))


class TestApplyHunk:
    def test_replacement_writes_new_block_verbatim(self) -> None:
        doc = TargetDocument.from_text("  A  \nB\nC\n")
        apply_hunk(doc, Hunk(old_lines=["A"], new_lines=["A2"], ctx_after="B"), candidate(0))

        assert doc.lines == ["A2", "B", "C"]
        assert doc.normalized == ["A2", "B", "C"]

    def test_new_block_indentation_is_kept(self) -> None:
        doc = TargetDocument.from_text("def f():\n    return 1\n")
        hunk = Hunk(old_lines=["return 1"], new_lines=["\treturn 2", "\t# done"])
        apply_hunk(doc, hunk, candidate(1))

        assert doc.to_text() == "def f():\n\treturn 2\n\t# done\n"

    def test_gap_lines_are_discarded(self) -> None:
        doc = TargetDocument.from_text("a\ngap\nb\nc\n")
        apply_hunk(doc, Hunk(old_lines=["a", "b"], new_lines=["X"]), candidate(0, 2, kind=MatchKind.SUBSEQUENCE))

        assert doc.lines == ["X", "c"]

    def test_insertion(self) -> None:
        doc = TargetDocument.from_text("A\nC\n")
        apply_hunk(doc, Hunk(new_lines=["B"], ctx_before="A", ctx_after="C"))

        assert doc.to_text() == "A\nB\nC\n"

    def test_deletion(self) -> None:
        doc = TargetDocument.from_text("A\nB\nC\n")
        apply_hunk(doc, Hunk(old_lines=["B"]), candidate(1))

        assert doc.to_text() == "A\nC\n"

    def test_empty_result_is_refused(self) -> None:
        doc = TargetDocument.from_text("A\nB\n")

        with pytest.raises(EmptyOutputError) as exc_info:
            apply_hunk(doc, Hunk(old_lines=["A", "B"]), candidate(0, 1))

        assert "empty" in exc_info.value.error
        assert exc_info.value.hint
        assert doc.lines == ["A", "B"]
