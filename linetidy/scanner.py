"""Bounded line reader used by the line checks."""

import io
from typing import BinaryIO, Iterator

from .errors import OpenFailure, ReadFailure

# One I/O block, keeping a byte free like a NUL-terminated line buffer would.
LINE_LIMIT: int = io.DEFAULT_BUFFER_SIZE - 1


def stream_name(fp: object) -> str:
    name = getattr(fp, "name", None)
    return name if isinstance(name, str) else "<stream>"


class LineScanner:
    """
    Read a binary file line by line, never returning more than ``limit`` bytes.

    A line longer than ``limit`` is handed out in ``limit``-sized pieces; only
    the last piece carries the line feed. The end of the file is signalled by
    an empty bytes object.
    """

    def __init__(self, fp: BinaryIO, limit: int = LINE_LIMIT) -> None:
        if limit < 2:
            raise ValueError("limit must leave room for data and a line feed")
        self.fp = fp
        self.limit = limit

    def next_line(self) -> bytes:
        try:
            return self.fp.readline(self.limit)
        except OSError as e:
            raise ReadFailure(stream_name(self.fp), e) from e

    def is_full(self, line: bytes) -> bool:
        """Whether ``line`` filled the whole buffer without reaching a line feed."""
        return len(line) >= self.limit and not line.endswith(b"\n")

    def __iter__(self) -> Iterator[bytes]:
        while True:
            line = self.next_line()
            if not line:
                return
            yield line


def open_for_reading(path: str) -> BinaryIO:
    try:
        return open(path, "rb")
    except OSError as e:
        raise OpenFailure(path, e) from e
