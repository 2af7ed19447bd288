"""
Error kinds raised while checking and fixing files.

Every error is tied to a single file and carries the underlying OSError (if
any), so the orchestrator can log "<path>: <operation>: <reason>" and move on
to the next file.
"""

from typing import Optional


class LineTidyError(Exception):
    """Base class for per-file failures."""

    operation: str = "io"

    def __init__(
        self,
        path: str,
        cause: Optional[BaseException] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.path = path
        self.cause = cause
        self.reason = reason
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.reason is not None:
            detail = self.reason
        elif isinstance(self.cause, OSError) and self.cause.strerror:
            detail = self.cause.strerror
        elif self.cause is not None:
            detail = str(self.cause)
        else:
            detail = "unknown error"
        return f"{self.path}: {self.operation}: {detail}"


class OpenFailure(LineTidyError):
    operation = "open"


class SeekFailure(LineTidyError):
    operation = "seek"


class ReadFailure(LineTidyError):
    """Read error, including a short read where a full read was expected."""

    operation = "read"


class WriteFailure(LineTidyError):
    operation = "write"


class TruncateFailure(LineTidyError):
    operation = "truncate"


class RenameFailure(LineTidyError):
    operation = "rename"
