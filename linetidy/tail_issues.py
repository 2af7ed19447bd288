"""
Tail checks: more than one line feed at the end of a file.

Only the last few bytes of a file are ever read. The fixer truncates the file
in place, walking backwards through runs of trailing line feeds with a small
window, so a file with thousands of blank lines at the end costs a handful of
tiny reads rather than a full scan.
"""

import errno
import logging
import os
from typing import BinaryIO, Tuple

from .errors import ReadFailure, SeekFailure, TruncateFailure
from .scanner import open_for_reading, stream_name
from .verdict import Verdict

logger = logging.getLogger(__name__)

# Largest window first; each smaller size is tried when the file is too short.
TAIL_WINDOWS: Tuple[int, ...] = (16, 8, 4, 2, 1)


def has_tail_issues(fp: BinaryIO) -> Verdict:
    """Return HAS_ISSUE if the file ends in two line feeds or is a lone line feed."""
    name = stream_name(fp)
    try:
        fp.seek(-2, os.SEEK_END)
    except OSError as e:
        if e.errno != errno.EINVAL:
            return Verdict.failed(SeekFailure(name, e))
        # Shorter than two bytes. Empty is fine, a lone "\n" is not.
        try:
            fp.seek(0, os.SEEK_SET)
            head = fp.read(1)
        except OSError as e2:
            return Verdict.failed(ReadFailure(name, e2))
        return Verdict.issue_if(head == b"\n")

    try:
        tail = fp.read(2)
    except OSError as e:
        return Verdict.failed(ReadFailure(name, e))
    if len(tail) != 2:
        return Verdict.failed(ReadFailure(name, reason=f"short read ({len(tail)} of 2 bytes)"))

    return Verdict.issue_if(tail == b"\n\n")


def _seek_window(fp: BinaryIO, path: str) -> int:
    """Seek to the largest window before EOF that fits; 0 means an empty file."""
    for window in TAIL_WINDOWS:
        try:
            fp.seek(-window, os.SEEK_END)
        except OSError as e:
            if e.errno == errno.EINVAL:
                continue
            raise SeekFailure(path, e) from e
        return window
    return 0


def fix_tail_issues(path: str) -> None:
    """
    Truncate ``path`` so that it ends in exactly one line feed.

    A file made up of nothing but line feeds is truncated to zero bytes.

    Raises:
        LineTidyError: on any failure. Each truncation that did happen leaves
            a well-formed prefix of the original behind.
    """
    while True:
        with open_for_reading(path) as fp:
            window = _seek_window(fp, path)
            if not window:
                break
            try:
                buf = fp.read(window)
                end = fp.tell()
            except OSError as e:
                raise ReadFailure(path, e) from e
            if len(buf) != window:
                raise ReadFailure(path, reason="file modified during processing")

        # Offset of the first line feed of the trailing run.
        run_start = len(buf.rstrip(b"\n"))
        if run_start == window:
            break

        size = end - (window - (run_start + 1))
        if size == 1:
            # Only line feeds were found all the way back to the start.
            size = 0

        if size != end:
            try:
                os.truncate(path, size)
            except OSError as e:
                raise TruncateFailure(path, e) from e
            logger.debug("Truncated %s from %d to %d bytes", path, end, size)

        if window <= 1 or run_start > 0:
            break
