"""
GATE Core Concurrency — Optimistic Read-Check-Write
=====================================================
Every state transition on a single record runs as:

    1. load the current record (with its version)
    2. decide: pure function of the record → Decision
    3. compare-and-swap the new record against the loaded version
    4. on a lost race, reload and decide again

Contention is per record. There is no lock spanning unrelated
records. The retry budget is small; when it runs out the caller
gets Conflict, which is retryable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, Tuple, TypeVar

from core.errors import Conflict

logger = logging.getLogger("gate.concurrency")

R = TypeVar("R")


@dataclass(frozen=True)
class Decision(Generic[R]):
    """
    Result of the decide step.

    Fields:
        replacement: Record to write, or None to finish without writing.
        outcome:     Value handed back to the caller with the record.
    """

    replacement: Optional[R]
    outcome: Any = None


def apply_optimistic(
    *,
    record_id: str,
    load: Callable[[], Optional[R]],
    decide: Callable[[Optional[R]], Decision],
    swap: Callable[[R, R], Optional[R]],
    attempts: int,
) -> Tuple[Optional[R], Any]:
    """
    Run load → decide → swap until a decision lands.

    Returns (record, outcome) where record is the stored replacement
    when a write happened, the loaded record otherwise.

    `decide` may raise AccessError subclasses (NotFound,
    InvalidTransition, ...). Those propagate immediately and are never
    retried. `swap(current, replacement)` returns the stored record, or
    None when the stored version no longer matches `current`.
    """
    for attempt in range(1, attempts + 1):
        current = load()
        decision = decide(current)
        if decision.replacement is None:
            return current, decision.outcome
        stored = swap(current, decision.replacement)
        if stored is not None:
            return stored, decision.outcome
        logger.debug(
            "Version conflict on %s (attempt %d/%d)", record_id, attempt, attempts
        )

    logger.warning("Retry budget exhausted for %s after %d attempts", record_id, attempts)
    raise Conflict(record_id, attempts)
