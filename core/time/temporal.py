"""
GATE Core Time — Temporal Helpers
===================================
Comparisons against an explicit `as_of`. Nothing here reads a clock.

Boundary rule shared by every caller: an instant equal to a deadline
has not yet passed it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class TimeWindow:
    """
    Closed validity interval [start, end], start strictly before end.
    A credential's [valid_from, valid_until] is one of these.
    """

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(
                f"TimeWindow start ({self.start}) must be before end ({self.end})."
            )

    def has_started(self, as_of: datetime) -> bool:
        return as_of >= self.start

    def has_ended(self, as_of: datetime) -> bool:
        return is_past(self.end, as_of)


def is_past(deadline: datetime, as_of: datetime) -> bool:
    """Strictly after the deadline."""
    return as_of > deadline
