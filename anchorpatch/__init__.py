"""
anchorpatch

Applies hand-written or generated edit hunks to a file that may have drifted
from what the edits were written against. Hunks are located by
whitespace-insensitive matching, ranked by their context anchors, and
rejected as ambiguous instead of guessed when two places fit equally well.

Main exports:
    - PatchDriver: apply an edit document to a target file
    - ApplyConfig / load_config: run configuration
    - parse_edit_document, locate, apply_hunk: the individual stages

Example:
    >>> from anchorpatch import PatchDriver
    >>> report = PatchDriver().run("src/app.py", "changes.edit")
    >>> print(report.applied, report.failed)
"""

__version__ = "0.1.0"

from .config import ApplyConfig, ConfigError, load_config
from .errors import (
    BinaryContentError,
    DecodeError,
    EmptyOutputError,
    EmptyTargetError,
    PatchError,
    UsageError,
)
from .patching import (
    Hunk,
    HunkReport,
    MatchResult,
    Outcome,
    PatchDriver,
    RunReport,
    apply_hunk,
    apply_hunks,
    locate,
    parse_edit_document,
)

__all__ = [
    "__version__",
    # Config
    "ApplyConfig",
    "ConfigError",
    "load_config",
    # Errors
    "PatchError",
    "UsageError",
    "EmptyTargetError",
    "EmptyOutputError",
    "BinaryContentError",
    "DecodeError",
    # Patching
    "PatchDriver",
    "parse_edit_document",
    "locate",
    "apply_hunk",
    "apply_hunks",
    "Hunk",
    "HunkReport",
    "MatchResult",
    "Outcome",
    "RunReport",
]
