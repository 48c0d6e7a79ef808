"""The target document buffer and the file operations around it.

``TargetDocument`` keeps raw lines without terminators, the terminator each
line was read with, and a parallel normalized array. Lines outside an
applied span are written back with exactly the bytes they were read with.
"""

from __future__ import annotations

import os
import re
import shutil
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..errors import BinaryContentError, DecodeError, EmptyTargetError
from .normalize import normalize, normalize_lines

UTF8_BOM: bytes = b"\xef\xbb\xbf"

# A lone CR only ends a line in files that contain no LF at all.
_RE_LF_TERMINATOR = re.compile(r"(\r\n|\n)")
_RE_CR_TERMINATOR = re.compile(r"(\r)")


def _split_keep_terminators(text: str) -> Tuple[List[str], List[str]]:
    """Split text into lines and the terminator that ended each one.

    The last terminator is ``""`` when the text does not end with a line
    break. Empty text has no lines.
    """

    splitter = _RE_LF_TERMINATOR if "\n" in text else _RE_CR_TERMINATOR
    parts = splitter.split(text)
    lines = parts[0::2]
    endings = parts[1::2] + [""]
    if lines[-1] == "":
        lines.pop()
        endings.pop()
    return lines, endings


def _dominant_ending(endings: Sequence[str]) -> str:
    counts = Counter(e for e in endings if e)
    if not counts:
        return "\n"
    return counts.most_common(1)[0][0]


def _decode_preserve_bom(data: bytes, encoding: str) -> Tuple[str, bytes]:
    """Decode while preserving a UTF-8 BOM if present."""

    if encoding.lower().replace("-", "") == "utf8" and data.startswith(UTF8_BOM):
        return data[len(UTF8_BOM) :].decode("utf-8"), UTF8_BOM
    return data.decode(encoding), b""


def decode_text(data: bytes, *, path: Optional[str] = None, encoding: str = "utf-8") -> Tuple[str, bytes]:
    """Decode file bytes, rejecting binary content."""

    if b"\x00" in data:
        raise BinaryContentError(
            "Cannot read file: appears to be binary (contains NUL bytes)",
            path=path,
            hint="Only text files can be patched",
        )
    try:
        return _decode_preserve_bom(data, encoding)
    except UnicodeDecodeError:
        raise DecodeError(
            f"Cannot read file: not valid {encoding} text",
            path=path,
            hint="Set 'encoding' in the config file if the target uses another encoding",
        ) from None


@dataclass
class TargetDocument:
    """Mutable line buffer owned by the driver.

    ``endings[i]`` is the terminator that followed ``lines[i]`` (``""`` for
    a final line without one). ``line_ending`` is the file's most common
    terminator and is used for lines that have no original to inherit from.
    """

    lines: List[str]
    endings: List[str] = field(default_factory=list)
    bom: bytes = b""
    line_ending: str = field(init=False)
    normalized: List[str] = field(init=False)

    def __post_init__(self) -> None:
        if not self.endings:
            self.endings = ["\n"] * len(self.lines)
        if len(self.endings) != len(self.lines):
            raise ValueError("lines and endings must have the same length")
        self.line_ending = _dominant_ending(self.endings)
        self.normalized = normalize_lines(self.lines)

    @classmethod
    def from_text(cls, text: str, *, bom: bytes = b"") -> "TargetDocument":
        lines, endings = _split_keep_terminators(text)
        return cls(lines=lines, endings=endings, bom=bom)

    @classmethod
    def from_bytes(cls, data: bytes, *, path: Optional[str] = None, encoding: str = "utf-8") -> "TargetDocument":
        text, bom = decode_text(data, path=path, encoding=encoding)
        return cls.from_text(text, bom=bom)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def trailing_newline(self) -> bool:
        return bool(self.endings) and self.endings[-1] != ""

    def splice(self, start: int, stop: int, new_lines: Sequence[str]) -> None:
        """Replace ``lines[start:stop]`` with ``new_lines``.

        New lines take the terminators of the lines they replace, position by
        position, and ``line_ending`` beyond that. A splice that reaches the
        end of the buffer hands the final terminator (possibly none) on to
        the new last line.
        """

        new_lines = list(new_lines)
        replaced = self.endings[start:stop]
        new_endings = [
            replaced[i] if i < len(replaced) and replaced[i] else self.line_ending for i in range(len(new_lines))
        ]
        endings = list(self.endings)

        if self.lines and stop == len(self.lines):
            tail = endings[-1]
            if new_lines:
                new_endings[-1] = tail
                if start == stop and tail == "":
                    endings[start - 1] = self.line_ending
            elif start > 0:
                endings[start - 1] = tail

        self.lines = self.lines[:start] + new_lines + self.lines[stop:]
        self.endings = endings[:start] + new_endings + endings[stop:]
        self.normalized = self.normalized[:start] + [normalize(ln) for ln in new_lines] + self.normalized[stop:]

    def to_text(self) -> str:
        return "".join(line + ending for line, ending in zip(self.lines, self.endings))

    def to_bytes(self, encoding: str = "utf-8") -> bytes:
        return self.bom + self.to_text().encode(encoding)


def read_target(path: Path, *, encoding: str = "utf-8") -> Tuple[bytes, TargetDocument]:
    """Read and decode the target.

    Returns the raw bytes alongside the document so the backup can be written
    from exactly the bytes that were decoded.
    """

    raw = path.read_bytes()
    document = TargetDocument.from_bytes(raw, path=str(path), encoding=encoding)
    if not document.lines:
        raise EmptyTargetError(
            "Target file is empty",
            path=str(path),
            hint="There is nothing to anchor hunks against; write the content directly instead",
        )
    return raw, document


def atomic_write_bytes(path: Path, data: bytes, *, mode: Optional[int] = None) -> None:
    """Atomically replace ``path`` with ``data``.

    Writes to a temporary file in the same directory and then uses ``os.replace``.
    """

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.anchorpatch.", dir=str(path.parent))
    tmp_path = Path(tmp_name)

    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())

        if mode is not None:
            os.chmod(tmp_path, mode)

        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def backup_path_for(
    path: Path,
    *,
    suffix: str = "bak",
    timestamp_format: str = "%Y%m%d-%H%M%S",
    now: Optional[datetime] = None,
) -> Path:
    """Return a free ``<path>.<suffix>.<timestamp>`` name.

    If a backup with that timestamp already exists, ``.1``, ``.2``, ... is appended.
    """

    stamp = (now or datetime.now()).strftime(timestamp_format)
    candidate = path.with_name(f"{path.name}.{suffix}.{stamp}")
    counter = 1
    while candidate.exists():
        candidate = path.with_name(f"{path.name}.{suffix}.{stamp}.{counter}")
        counter += 1
    return candidate


def create_backup(path: Path, data: Optional[bytes] = None, **kwargs) -> Path:
    """Copy ``path`` to a timestamped backup and return the backup path.

    If ``data`` is given it is written as the backup content, so the backup
    holds exactly the bytes the caller read. File metadata is copied either way.
    """

    backup = backup_path_for(path, **kwargs)
    if data is None:
        shutil.copy2(path, backup)
    else:
        backup.write_bytes(data)
        shutil.copystat(path, backup)
    return backup
