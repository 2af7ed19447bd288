"""
The fixed list of checks run against every file.

Each check pairs a detector, which reads an already open file and returns a
Verdict, with a fixer, which takes the path and rewrites or truncates the
file. Detectors seek to wherever they need to start; they make no promise
about where they leave the cursor.
"""

import logging
from typing import BinaryIO, Callable, List, NamedTuple, Sequence

from .line_issues import fix_line_issues, has_line_issues
from .scanner import open_for_reading, stream_name
from .tail_issues import fix_tail_issues, has_tail_issues
from .verdict import Verdict

logger = logging.getLogger(__name__)


class Check(NamedTuple):
    name: str
    detect: Callable[[BinaryIO], Verdict]
    fix: Callable[[str], None]


# Order matters: collapsing the tail assumes every line already ends in "\n".
CHECKS: Sequence[Check] = (
    Check("line issues", has_line_issues, fix_line_issues),
    Check("tail issues", has_tail_issues, fix_tail_issues),
)


def detect_all(fp: BinaryIO, checks: Sequence[Check] = CHECKS) -> List[Verdict]:
    """Run every detector, even after one of them has found something."""
    verdicts: List[Verdict] = []
    for check in checks:
        verdict = check.detect(fp)
        logger.debug("%s: %s: %s", stream_name(fp), check.name, verdict)
        verdicts.append(verdict)
    return verdicts


def fix_all(
    path: str, verdicts: Sequence[Verdict], checks: Sequence[Check] = CHECKS
) -> int:
    """
    Run the fixer of every check whose detector fired, in registry order.

    Once a fixer has changed the file, the later checks that found nothing
    are detected again, since trimming lines can expose new trailing blank
    lines. Returns the number of fixers run. A LineTidyError from a fixer or
    from a repeated detection stops the remaining fixers and propagates.
    """
    fixed = 0
    for check, verdict in zip(checks, verdicts):
        if fixed and not verdict.has_issue:
            with open_for_reading(path) as fp:
                verdict = check.detect(fp)
            if verdict.error is not None:
                raise verdict.error
        if verdict.has_issue:
            logger.debug("%s: fixing %s", path, check.name)
            check.fix(path)
            fixed += 1
    return fixed
