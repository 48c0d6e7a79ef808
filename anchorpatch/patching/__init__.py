"""Context-anchored, whitespace-tolerant hunk application.

This module provides:
- parse_edit_document: split an edit document into hunks
- locate: exact-then-subsequence matching with anchor scoring
- apply_hunk / insertion_point: splice a hunk into target lines
- apply_hunks / PatchDriver: sequence hunks and report outcomes
"""

from .applier import apply_hunk, insertion_point, splice_range
from .document import TargetDocument, create_backup, read_target
from .driver import PatchDriver, apply_hunks, process_hunk
from .guard import already_applied, is_noop
from .matcher import locate
from .normalize import normalize, normalize_lines
from .parser import parse_edit_document
from .types import (
    Hunk,
    HunkReport,
    MatchCandidate,
    MatchKind,
    MatchResult,
    MatchStatus,
    Outcome,
    RunReport,
)

__all__ = [
    # Parsing and normalization
    "parse_edit_document",
    "normalize",
    "normalize_lines",
    # Matching and application
    "is_noop",
    "already_applied",
    "locate",
    "apply_hunk",
    "insertion_point",
    "splice_range",
    # Driver
    "TargetDocument",
    "read_target",
    "create_backup",
    "apply_hunks",
    "process_hunk",
    "PatchDriver",
    # Types
    "Hunk",
    "HunkReport",
    "MatchCandidate",
    "MatchKind",
    "MatchResult",
    "MatchStatus",
    "Outcome",
    "RunReport",
]
