"""Outcome of a detection pass."""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional

from .errors import LineTidyError


class VerdictState(Enum):
    NO_ISSUE = "no issue"
    HAS_ISSUE = "has issue"
    FAILED = "detection failed"


@dataclass(frozen=True)
class Verdict:
    """
    Tri-state detector result.

    A failed detection is kept apart from a clean file so that an unreadable
    file is never mistaken for one that needs no work.
    """

    state: VerdictState
    error: Optional[LineTidyError] = None

    NO_ISSUE: ClassVar["Verdict"]
    HAS_ISSUE: ClassVar["Verdict"]

    @classmethod
    def failed(cls, error: LineTidyError) -> "Verdict":
        return cls(VerdictState.FAILED, error)

    @classmethod
    def issue_if(cls, condition: bool) -> "Verdict":
        return cls.HAS_ISSUE if condition else cls.NO_ISSUE

    @property
    def has_issue(self) -> bool:
        return self.state is VerdictState.HAS_ISSUE

    @property
    def is_failure(self) -> bool:
        return self.state is VerdictState.FAILED

    def __str__(self) -> str:
        if self.error is not None:
            return f"{self.state.value} ({self.error})"
        return self.state.value


Verdict.NO_ISSUE = Verdict(VerdictState.NO_ISSUE)
Verdict.HAS_ISSUE = Verdict(VerdictState.HAS_ISSUE)
