"""Edit-document tokenizer.

An edit document is a sequence of hunks, each introduced by an ``@@`` line::

    @@
     def greet():
    -    print("hi")
    +    print("hello")
     return None

Inside a hunk the first character of a line classifies it:

- ``-``: the rest of the line is appended to the old block
- ``+``: the rest of the line is appended to the new block
- anything else: an unchanged context line. The first one becomes
  ``ctx_before`` and every one updates ``ctx_after``, so ``ctx_after`` ends
  up as the last context line of the hunk. Both are stored normalized.

Context lines that are blank after normalization carry no anchor
information and are skipped, as are ``\\ No newline at end of file``
markers. Text before the first ``@@`` (``---``/``+++`` headers, prose) is
ignored; a document without any ``@@`` line is read as one implicit hunk.
"""

from __future__ import annotations

import re
from typing import List, Optional

from ..logging import get_logger
from .normalize import normalize
from .types import Hunk

logger = get_logger(__name__)

# "@@" alone or followed by whitespace. Trailing unified-diff ranges are ignored;
# "@@name" is an ordinary context line.
RE_HUNK_HEADER = re.compile(r"^@@(\s|$)")
RE_NO_NEWLINE_MARKER = re.compile(r"^\\ No newline at end of file", re.IGNORECASE)


def parse_edit_document(text: str) -> List[Hunk]:
    """Split an edit document into ordered hunks."""

    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    lines = normalized.split("\n")

    has_headers = any(RE_HUNK_HEADER.match(line) for line in lines)

    hunks: List[Hunk] = []
    in_hunk = not has_headers
    current_header: Optional[int] = None
    old_lines: List[str] = []
    new_lines: List[str] = []
    ctx_before: Optional[str] = None
    ctx_after: Optional[str] = None
    preamble = 0

    def finalize_hunk() -> None:
        nonlocal old_lines, new_lines, ctx_before, ctx_after

        if old_lines or new_lines or ctx_before is not None:
            hunks.append(
                Hunk(
                    old_lines=old_lines,
                    new_lines=new_lines,
                    ctx_before=ctx_before,
                    ctx_after=ctx_after,
                    index=len(hunks),
                    header_line=current_header,
                )
            )

        old_lines = []
        new_lines = []
        ctx_before = None
        ctx_after = None

    for lineno, line in enumerate(lines, start=1):
        if RE_HUNK_HEADER.match(line):
            if in_hunk:
                finalize_hunk()
            in_hunk = True
            current_header = lineno
            continue

        if not in_hunk:
            if line.strip():
                preamble += 1
            continue

        if line.startswith("-"):
            old_lines.append(line[1:])
        elif line.startswith("+"):
            new_lines.append(line[1:])
        elif RE_NO_NEWLINE_MARKER.match(line):
            continue
        else:
            anchor = normalize(line)
            if not anchor:
                continue
            if ctx_before is None:
                ctx_before = anchor
            ctx_after = anchor

    if in_hunk:
        finalize_hunk()

    if preamble:
        logger.debug("edit_preamble_ignored", lines=preamble)
    logger.debug("edit_document_parsed", hunks=len(hunks), implicit=not has_headers)

    return hunks
