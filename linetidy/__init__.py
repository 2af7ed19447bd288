"""
LineTidy - A fast checker and fixer for whitespace problems in text files.

This package provides functionality to:
- Remove carriage returns and expand tabs to eight spaces
- Remove trailing spaces at the end of lines
- Add a missing line feed at the end of a file
- Collapse redundant trailing blank lines
- Leave files that are already clean untouched (no writes at all)
"""

__version__ = "1.0.0"
__author__ = "tboy1337"

from .checks import CHECKS, Check, detect_all, fix_all
from .errors import (
    LineTidyError,
    OpenFailure,
    ReadFailure,
    RenameFailure,
    SeekFailure,
    TruncateFailure,
    WriteFailure,
)
from .line_issues import fix_line_issues, has_line_issues
from .tail_issues import fix_tail_issues, has_tail_issues
from .verdict import Verdict, VerdictState

__all__ = [
    "CHECKS",
    "Check",
    "LineTidyError",
    "OpenFailure",
    "ReadFailure",
    "RenameFailure",
    "SeekFailure",
    "TruncateFailure",
    "Verdict",
    "VerdictState",
    "WriteFailure",
    "detect_all",
    "fix_all",
    "fix_line_issues",
    "fix_tail_issues",
    "has_line_issues",
    "has_tail_issues",
]
