"""Human-readable per-hunk diagnostics and the YAML run report."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

import yaml

from .types import HunkReport, MatchCandidate, Outcome, RunReport

PREFIXES = {
    Outcome.SKIPPED_NOOP: "SKIP",
    Outcome.SKIPPED_ALREADY_APPLIED: "SKIP",
    Outcome.FAILED_NO_MATCH: "FAIL",
    Outcome.FAILED_EMPTY_OUTPUT: "FAIL",
    Outcome.FAILED_AMBIGUOUS: "AMBIGUOUS",
}


def format_expected_block(expected: Sequence[str], max_lines: int = 5) -> str:
    """Preview the old block that could not be found."""

    preview = "\n".join(f"  {s}" for s in expected[:max_lines])
    if len(expected) > max_lines:
        preview += f"\n  ... ({len(expected) - max_lines} more lines)"
    return f"Expected old block:\n{preview}"


def format_ambiguous_locations(
    file_lines: Sequence[str],
    candidates: Sequence[MatchCandidate],
    *,
    max_candidates: int = 5,
) -> str:
    """Format a short summary of ambiguous match candidates."""

    parts: List[str] = []
    for cand in list(candidates)[:max_candidates]:
        first_line = file_lines[cand.first] if 0 <= cand.first < len(file_lines) else ""
        parts.append(f"  - lines {cand.first + 1}-{cand.last + 1}: {first_line[:200]}")

    remaining = len(candidates) - max_candidates
    if remaining > 0:
        parts.append(f"  ... and {remaining} more matches")

    return "Candidate locations:\n" + "\n".join(parts)


def format_hunk_report(report: HunkReport) -> str:
    """Render one ``FAIL:``/``AMBIGUOUS:``/``SKIP:`` diagnostic. Applied hunks render as empty."""

    prefix = PREFIXES.get(report.outcome)
    if prefix is None:
        return ""
    text = f"{prefix}: hunk {report.index + 1}: {report.message}"
    if report.detail:
        text += "\n" + report.detail
    return text


def format_summary(report: RunReport) -> str:
    return f"Done: applied={report.applied} failed={report.failed}"


def write_report(report: RunReport, path: Path) -> Path:
    """Write the run report as YAML, creating directories as needed. Returns path."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(
            report.to_dict(),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )
    return path
