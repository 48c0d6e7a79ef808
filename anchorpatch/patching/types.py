"""Data types shared by the parser, matcher, applier and driver."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class Hunk:
    """One atomic edit unit taken from an edit document.

    Attributes:
        old_lines: Raw lines to remove (empty for a pure insertion).
        new_lines: Raw lines to insert, written out verbatim.
        ctx_before: Normalized first context line of the hunk, if any.
        ctx_after: Normalized last context line of the hunk, if any.
        index: 0-based position of the hunk in its document.
        header_line: 1-based line number of the hunk's ``@@`` line in the
            edit document, or None for an implicit hunk.
    """

    old_lines: List[str] = field(default_factory=list)
    new_lines: List[str] = field(default_factory=list)
    ctx_before: Optional[str] = None
    ctx_after: Optional[str] = None
    index: int = 0
    header_line: Optional[int] = None

    @property
    def is_insertion(self) -> bool:
        return not self.old_lines

    @property
    def is_degenerate(self) -> bool:
        return not self.old_lines and not self.new_lines

    def describe(self) -> str:
        """Short human-readable label used in diagnostics."""
        label = f"hunk {self.index + 1}"
        if self.header_line is not None:
            label += f" (edit line {self.header_line})"
        return label


class MatchKind(str, Enum):
    EXACT = "exact"
    SUBSEQUENCE = "subsequence"


class MatchStatus(str, Enum):
    EXACT = "exact"
    SUBSEQUENCE = "subsequence"
    AMBIGUOUS = "ambiguous"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class MatchCandidate:
    """A target span aligned 1:1 with a hunk's old block.

    ``indices`` is strictly increasing and has one entry per old line.
    Exact candidates are contiguous; subsequence candidates may skip lines.
    ``score`` compares lexicographically.
    """

    kind: MatchKind
    indices: Tuple[int, ...]
    score: Tuple[float, ...]

    @property
    def first(self) -> int:
        return self.indices[0]

    @property
    def last(self) -> int:
        return self.indices[-1]

    @property
    def gap(self) -> int:
        """Number of target lines inside the span that the old block does not list."""
        return (self.last - self.first + 1) - len(self.indices)


@dataclass
class MatchResult:
    """Result of locating a hunk's old block in the target."""

    status: MatchStatus
    candidate: Optional[MatchCandidate] = None
    tied: List[MatchCandidate] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.candidate is not None


class Outcome(str, Enum):
    """Terminal state of one hunk."""

    APPLIED = "applied"
    SKIPPED_NOOP = "skipped_noop"
    SKIPPED_ALREADY_APPLIED = "skipped_already_applied"
    FAILED_NO_MATCH = "failed_no_match"
    FAILED_AMBIGUOUS = "failed_ambiguous"
    FAILED_EMPTY_OUTPUT = "failed_empty_output"

    @property
    def is_failure(self) -> bool:
        return self.value.startswith("failed_")

    @property
    def is_skip(self) -> bool:
        return self.value.startswith("skipped_")


@dataclass
class HunkReport:
    """What happened to one hunk."""

    index: int
    outcome: Outcome
    first: Optional[int] = None
    last: Optional[int] = None
    match_kind: Optional[MatchKind] = None
    message: str = ""
    detail: str = ""

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "hunk": self.index + 1,
            "outcome": self.outcome.value,
        }
        if self.first is not None:
            # 1-based for humans.
            result["first_line"] = self.first + 1
        if self.last is not None:
            result["last_line"] = self.last + 1
        if self.match_kind is not None:
            result["match"] = self.match_kind.value
        if self.message:
            result["message"] = self.message
        if self.detail:
            result["detail"] = self.detail
        return result


@dataclass
class RunReport:
    """Aggregate result of applying an edit document to a target file."""

    target: Path
    hunks: List[HunkReport] = field(default_factory=list)
    backup: Optional[Path] = None
    changed: bool = False
    dry_run: bool = False
    report_error: Optional[str] = None

    @property
    def applied(self) -> int:
        """Number of non-failing hunks (skips count as success)."""
        return sum(1 for h in self.hunks if not h.outcome.is_failure)

    @property
    def failed(self) -> int:
        return sum(1 for h in self.hunks if h.outcome.is_failure)

    @property
    def exit_code(self) -> int:
        return 1 if self.failed else 0

    def counts(self) -> Dict[str, int]:
        counter = Counter(h.outcome.value for h in self.hunks)
        return {o.value: counter.get(o.value, 0) for o in Outcome}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target": str(self.target),
            "backup": str(self.backup) if self.backup is not None else None,
            "dry_run": self.dry_run,
            "changed": self.changed,
            "applied": self.applied,
            "failed": self.failed,
            "outcomes": self.counts(),
            "hunks": [h.to_dict() for h in self.hunks],
        }
