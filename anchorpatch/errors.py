"""Exceptions for fatal patching conditions.

Per-hunk failures are not exceptions: they are recorded as an ``Outcome``
and the run continues. The classes here cover conditions that stop a run
before any hunk is processed, plus the internal empty-output signal raised
by the applier.
"""
from typing import Optional


class PatchError(Exception):
    """Base exception raised during edit parsing or application."""

    def __init__(self, error: str, path: Optional[str] = None, hint: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.path = path
        self.hint = hint


class UsageError(PatchError):
    """A required input is missing or unusable."""
    pass


class EmptyTargetError(PatchError):
    """The target file has no lines to patch."""
    pass


class BinaryContentError(PatchError):
    """The input contains NUL bytes."""
    pass


class DecodeError(PatchError):
    """The input is not valid text in the configured encoding."""
    pass


class EmptyOutputError(PatchError):
    """Applying a hunk would leave the target with no lines."""
    pass
