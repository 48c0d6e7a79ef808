"""Tests for no-op and already-applied detection."""
from anchorpatch.patching.guard import already_applied, is_noop
from anchorpatch.patching.normalize import normalize_lines
from anchorpatch.patching.types import Hunk


class TestIsNoop:
    def test_identical_blocks(self) -> None:
        assert is_noop(Hunk(old_lines=["a", "b"], new_lines=["a", "b"]))

    def test_whitespace_only_change_is_noop(self) -> None:
        assert is_noop(Hunk(old_lines=["    x = 1"], new_lines=["\tx  =  1"]))

    def test_degenerate_hunk_is_noop(self) -> None:
        assert is_noop(Hunk())

    def test_real_change_is_not_noop(self) -> None:
        assert not is_noop(Hunk(old_lines=["a"], new_lines=["b"]))

    def test_insertion_is_not_noop(self) -> None:
        assert not is_noop(Hunk(new_lines=["b"]))

    def test_deletion_is_not_noop(self) -> None:
        assert not is_noop(Hunk(old_lines=["a"]))


class TestAlreadyApplied:
    def test_new_block_present(self) -> None:
        target = normalize_lines(["A", "B2", "C"])
        hunk = Hunk(old_lines=["B"], new_lines=["B2"], ctx_before="A", ctx_after="C")
        assert already_applied(target, hunk)

    def test_new_block_absent(self) -> None:
        target = normalize_lines(["A", "B", "C"])
        hunk = Hunk(old_lines=["B"], new_lines=["B2"])
        assert not already_applied(target, hunk)

    def test_whitespace_differences_are_ignored(self) -> None:
        target = normalize_lines(["  def f():", "        return 2"])
        hunk = Hunk(old_lines=["return 1"], new_lines=["\treturn  2"])
        assert already_applied(target, hunk)

    def test_multi_line_block_must_be_contiguous(self) -> None:
        target = normalize_lines(["x", "y", "gap", "z"])
        hunk = Hunk(old_lines=["q"], new_lines=["y", "z"])
        assert not already_applied(target, hunk)

        target = normalize_lines(["x", "y", "z"])
        assert already_applied(target, hunk)

    def test_pure_deletion_is_never_short_circuited(self) -> None:
        target = normalize_lines(["A", "C"])
        hunk = Hunk(old_lines=["B"], new_lines=[])
        assert not already_applied(target, hunk)

    def test_block_longer_than_target(self) -> None:
        target = normalize_lines(["A"])
        hunk = Hunk(old_lines=["A"], new_lines=["A", "B"])
        assert not already_applied(target, hunk)
