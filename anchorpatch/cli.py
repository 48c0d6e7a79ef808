"""Command line front end.

Usage:
    anchorpatch apply <target-file> <edit-document> [--dry-run] [--config PATH]
                      [--report PATH] [--max-gap N] [--log-level LEVEL] [--log-format FORMAT]

Exit status:
    0  every hunk applied or was skipped
    1  at least one hunk failed (no match, ambiguous, or empty output)
    2  usage error: missing file, empty/binary target, bad config
"""
from __future__ import annotations

import argparse
import dataclasses
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import ApplyConfig, load_config
from .errors import PatchError
from .logging import LogFormat, LogLevel, configure_logging
from .patching.diagnostics import format_hunk_report, format_summary
from .patching.driver import PatchDriver

EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anchorpatch",
        description="Apply context-anchored edit hunks to a file, tolerating whitespace drift.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser("apply", help="Apply an edit document to a target file")
    apply_parser.add_argument("target", help="File to patch")
    apply_parser.add_argument("edit", help="Edit document with @@ hunks")
    apply_parser.add_argument("--dry-run", action="store_true", help="Report outcomes without writing anything")
    apply_parser.add_argument("--config", type=Path, help="YAML config file")
    apply_parser.add_argument("--report", type=Path, help="Write a YAML run report to this path")
    apply_parser.add_argument(
        "--max-gap",
        type=int,
        help="Maximum number of unlisted lines a fuzzy match may span",
    )
    apply_parser.add_argument(
        "--log-level",
        choices=[level.value for level in LogLevel],
        type=str.upper,
        help="Log level for diagnostics logging (default: WARNING)",
    )
    apply_parser.add_argument(
        "--log-format",
        choices=[fmt.value for fmt in LogFormat],
        type=str.lower,
        help="Log output format",
    )

    return parser


def _resolve_config(args: argparse.Namespace) -> ApplyConfig:
    config = load_config(args.config) if args.config else ApplyConfig()

    log_config = config.log
    if args.log_level:
        log_config = dataclasses.replace(log_config, level=LogLevel(args.log_level))
    if args.log_format:
        log_config = dataclasses.replace(log_config, format=LogFormat(args.log_format))

    overrides = {"log": log_config}
    if args.dry_run:
        overrides["dry_run"] = True
    if args.report is not None:
        overrides["report_path"] = args.report
    if args.max_gap is not None:
        overrides["max_subsequence_gap"] = args.max_gap

    return dataclasses.replace(config, **overrides)


def _print_error(e: PatchError) -> None:
    print(f"Error: {e.error}", file=sys.stderr)
    if e.hint:
        print(f"Hint: {e.hint}", file=sys.stderr)


def run_apply(args: argparse.Namespace) -> int:
    try:
        config = _resolve_config(args)
    except PatchError as e:
        _print_error(e)
        return EXIT_USAGE

    configure_logging(config.log)

    try:
        report = PatchDriver(config).run(args.target, args.edit)
    except PatchError as e:
        _print_error(e)
        return EXIT_USAGE

    if report.backup is not None:
        print(f"Backup: {report.backup}")

    for hunk_report in report.hunks:
        line = format_hunk_report(hunk_report)
        if line:
            print(line, file=sys.stderr)

    if report.report_error:
        print(f"Warning: {report.report_error}", file=sys.stderr)

    print(format_summary(report))
    if report.changed and not report.dry_run:
        print(f"Review with: git diff -- {report.target}", file=sys.stderr)

    return report.exit_code


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command == "apply":
        return run_apply(args)

    parser.error(f"unknown command: {args.command}")
    return EXIT_USAGE
