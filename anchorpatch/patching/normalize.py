"""Whitespace-insensitive line projection used for all comparisons."""
from __future__ import annotations

import re
from typing import Iterable, List

_WS_RE = re.compile(r"\s+")


def normalize(line: str) -> str:
    """Normalize a line by collapsing all whitespace runs and trimming."""

    return _WS_RE.sub(" ", line).strip()


def normalize_lines(lines: Iterable[str]) -> List[str]:
    return [normalize(ln) for ln in lines]
