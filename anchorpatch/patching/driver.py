"""Apply an edit document to a target file, one hunk at a time.

Hunks run in document order against the buffer left by the hunks before
them. Every hunk ends in exactly one ``Outcome``; failures are recorded and
the run moves on to the next hunk. The target file is backed up before the
first hunk and rewritten once, atomically, at the end if anything applied.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from ..config import ApplyConfig
from ..errors import EmptyOutputError, UsageError
from ..logging import bind_context, get_logger, unbind_context
from .applier import apply_hunk, insertion_point
from .diagnostics import format_ambiguous_locations, format_expected_block, write_report
from .document import TargetDocument, atomic_write_bytes, create_backup, decode_text, read_target
from .guard import already_applied, is_noop
from .matcher import locate
from .parser import parse_edit_document
from .types import Hunk, HunkReport, MatchCandidate, MatchStatus, Outcome, RunReport

logger = get_logger(__name__)


def process_hunk(document: TargetDocument, hunk: Hunk, *, max_gap: Optional[int] = None) -> HunkReport:
    """Run one hunk against ``document``, mutating it only if the hunk applies."""

    if is_noop(hunk):
        logger.info("hunk_skipped", reason="noop")
        return HunkReport(hunk.index, Outcome.SKIPPED_NOOP, message="old and new blocks are equivalent")

    if already_applied(document.normalized, hunk):
        logger.info("hunk_skipped", reason="already_applied")
        return HunkReport(
            hunk.index,
            Outcome.SKIPPED_ALREADY_APPLIED,
            message="new block is already present in the target",
        )

    candidate: Optional[MatchCandidate] = None
    if hunk.is_insertion:
        first = insertion_point(document.normalized, hunk)
        last = first + len(hunk.new_lines) - 1
        match_kind = None
    else:
        result = locate(document.normalized, hunk, max_gap=max_gap)

        if result.status == MatchStatus.NOT_FOUND:
            logger.warning("hunk_failed", reason="no_match", old_lines=len(hunk.old_lines))
            return HunkReport(
                hunk.index,
                Outcome.FAILED_NO_MATCH,
                message="could not locate the old block",
                detail=format_expected_block(hunk.old_lines),
            )

        if result.status == MatchStatus.AMBIGUOUS:
            logger.warning("hunk_failed", reason="ambiguous", candidates=len(result.tied))
            return HunkReport(
                hunk.index,
                Outcome.FAILED_AMBIGUOUS,
                message=(
                    f"old block matches {len(result.tied)} locations equally well; "
                    "add context lines next to the change to pick one"
                ),
                detail=format_ambiguous_locations(document.lines, result.tied),
            )

        candidate = result.candidate
        first, last = candidate.first, candidate.last
        match_kind = candidate.kind

    try:
        apply_hunk(document, hunk, candidate)
    except EmptyOutputError:
        logger.warning("hunk_failed", reason="empty_output")
        return HunkReport(
            hunk.index,
            Outcome.FAILED_EMPTY_OUTPUT,
            first=first,
            last=last,
            message="applying it would leave the target empty",
        )

    logger.info(
        "hunk_applied",
        first=first,
        last=last,
        match=match_kind.value if match_kind else "insertion",
        removed=0 if hunk.is_insertion else last - first + 1,
        added=len(hunk.new_lines),
    )
    return HunkReport(hunk.index, Outcome.APPLIED, first=first, last=last, match_kind=match_kind)


def apply_hunks(
    document: TargetDocument,
    hunks: Sequence[Hunk],
    *,
    max_gap: Optional[int] = None,
) -> List[HunkReport]:
    """Apply ``hunks`` in order to ``document``. Returns one report per hunk."""

    reports: List[HunkReport] = []
    for hunk in hunks:
        bind_context(hunk=hunk.index + 1)
        try:
            reports.append(process_hunk(document, hunk, max_gap=max_gap))
        finally:
            unbind_context("hunk")
    return reports


class PatchDriver:
    """Runs an edit document against a target file.

    Example:
        >>> driver = PatchDriver(ApplyConfig(max_subsequence_gap=40))
        >>> report = driver.run("src/app.py", "fix.edit")
        >>> report.exit_code
        0
    """

    def __init__(self, config: Optional[ApplyConfig] = None):
        self.config = config or ApplyConfig()

    def _load_hunks(self, edit_path: Path) -> List[Hunk]:
        text, _ = decode_text(edit_path.read_bytes(), path=str(edit_path), encoding=self.config.encoding)
        return parse_edit_document(text)

    def _check_report_path(self) -> None:
        path = self.config.report_path
        if path is None:
            return
        if path.is_dir():
            raise UsageError(
                f"report path is a directory: {path}",
                path=str(path),
                hint="Pass a file name for --report",
            )
        parent = next((p for p in path.parents if p.exists()), None)
        if parent is not None and not parent.is_dir():
            raise UsageError(
                f"report path is inside a file: {path}",
                path=str(path),
                hint=f"{parent} is not a directory",
            )

    def _write_report(self, report: RunReport) -> None:
        path = self.config.report_path
        try:
            write_report(report, path)
        except OSError as e:
            # The target may already be rewritten; keep the run's result.
            logger.error("report_write_failed", report=str(path), error=str(e))
            report.report_error = f"could not write report to {path}: {e.strerror or e}"

    def run(self, target_path: str | Path, edit_path: str | Path) -> RunReport:
        """Apply the edit document at ``edit_path`` to ``target_path``.

        A report file that cannot be written does not fail the run; the
        reason is kept in ``RunReport.report_error``.

        Raises:
            UsageError: if either file is missing or the report path is unusable.
            EmptyTargetError, BinaryContentError, DecodeError: if the target
                or edit document cannot be used. Nothing is written in that case.
        """

        target = Path(target_path)
        edit = Path(edit_path)

        if not target.is_file():
            raise UsageError(f"target not found: {target}", path=str(target))
        if not edit.is_file():
            raise UsageError(f"edit document not found: {edit}", path=str(edit))
        self._check_report_path()

        hunks = self._load_hunks(edit)
        raw, document = read_target(target, encoding=self.config.encoding)

        bind_context(target=str(target))
        try:
            report = RunReport(target=target, dry_run=self.config.dry_run)

            if not self.config.dry_run:
                report.backup = create_backup(
                    target,
                    raw,
                    suffix=self.config.backup_suffix,
                    timestamp_format=self.config.timestamp_format,
                )
                logger.info("backup_created", backup=str(report.backup))

            report.hunks = apply_hunks(document, hunks, max_gap=self.config.max_subsequence_gap)
            report.changed = any(h.outcome == Outcome.APPLIED for h in report.hunks)

            if report.changed and not self.config.dry_run:
                mode = target.stat().st_mode & 0o777
                atomic_write_bytes(target, document.to_bytes(self.config.encoding), mode=mode)

            if self.config.report_path is not None:
                self._write_report(report)

            logger.info(
                "run_finished",
                hunks=len(hunks),
                applied=report.applied,
                failed=report.failed,
                changed=report.changed,
                dry_run=report.dry_run,
            )
            return report
        finally:
            unbind_context("target")
