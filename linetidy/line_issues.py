"""
Line checks: CRs, TABs, trailing spaces and a missing final line feed.

Detection reads the file once and stops at the first offending line. Fixing
streams the file into a replacement, one bounded line at a time, so memory
use does not depend on the file size.
"""

import logging
import os
from typing import BinaryIO, Optional

from .errors import LineTidyError, SeekFailure, WriteFailure
from .replace import atomic_replace
from .scanner import LINE_LIMIT, LineScanner, open_for_reading, stream_name
from .verdict import Verdict

logger = logging.getLogger(__name__)

TAB_WIDTH: int = 8
TAB_SPACES: bytes = b" " * TAB_WIDTH

# Stripped from the end of every line before its line feed.
TRAILING_WHITESPACE: bytes = b" \t\r"


def has_line_issues(fp: BinaryIO, limit: int = LINE_LIMIT) -> Verdict:
    """Return HAS_ISSUE at the first line holding a CR, a TAB or trailing space."""
    try:
        fp.seek(0, os.SEEK_SET)
    except OSError as e:
        return Verdict.failed(SeekFailure(stream_name(fp), e))

    try:
        for line in LineScanner(fp, limit):
            if b"\r" in line or b"\t" in line:
                return Verdict.HAS_ISSUE
            # Covers a final line without a line feed and an overlong line.
            if not line.endswith(b"\n"):
                return Verdict.HAS_ISSUE
            if line.endswith(b" \n"):
                return Verdict.HAS_ISSUE
    except LineTidyError as e:
        return Verdict.failed(e)

    return Verdict.NO_ISSUE


class OutputWindow:
    """Small write buffer that is flushed before it would overflow."""

    def __init__(
        self, out: BinaryIO, size: int = LINE_LIMIT + TAB_WIDTH, path: Optional[str] = None
    ) -> None:
        self.out = out
        self.size = size
        self.path = path or stream_name(out)
        self._buf = bytearray()

    def put(self, data: bytes) -> None:
        if len(self._buf) + len(data) > self.size:
            self.flush()
        self._buf += data

    def flush(self) -> None:
        if not self._buf:
            return
        try:
            self.out.write(bytes(self._buf))
        except OSError as e:
            raise WriteFailure(self.path, e) from e
        self._buf.clear()


def trim_line(line: bytes, limit: int = LINE_LIMIT) -> bytes:
    """
    Give ``line`` exactly one line feed and drop the whitespace before it.

    A line that filled the read buffer without a line feed is returned as is:
    it is only a fragment of a longer line and is never rewritten.
    """
    if not line.endswith(b"\n"):
        if len(line) >= limit:
            return line
        line += b"\n"

    if line == b"\n":
        return line

    body = line[:-1].rstrip(TRAILING_WHITESPACE)
    if not body:
        return b"\n"
    return body + b"\n"


def _expand(line: bytes, window: OutputWindow) -> None:
    for i, piece in enumerate(line.split(b"\t")):
        if i:
            window.put(TAB_SPACES)
        window.put(piece.replace(b"\r", b""))


def rewrite_lines(
    src: BinaryIO,
    dst: BinaryIO,
    limit: int = LINE_LIMIT,
    path: Optional[str] = None,
) -> None:
    """Copy ``src`` to ``dst`` with CRs removed, TABs expanded and lines trimmed."""
    scanner = LineScanner(src, limit)
    window = OutputWindow(dst, limit + TAB_WIDTH, path)

    for raw in scanner:
        if scanner.is_full(raw):
            window.put(raw)
            continue

        line = trim_line(raw, limit)
        if b"\r" not in line and b"\t" not in line:
            window.put(line)
        else:
            _expand(line, window)

    window.flush()


def fix_line_issues(path: str) -> None:
    """
    Rewrite ``path`` so that every line is clean.

    Raises:
        LineTidyError: on any failure; the original file is left untouched.
    """
    with atomic_replace(path) as dst:
        with open_for_reading(path) as src:
            rewrite_lines(src, dst, path=path)
    logger.debug("Fixed line issues in %s", path)
