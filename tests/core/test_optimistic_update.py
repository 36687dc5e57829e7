"""
Tests for core.concurrency — optimistic read-check-write.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.concurrency import Decision, KeyedLocks, apply_optimistic
from core.errors import Conflict, NotFound


class VersionedCell:
    """Minimal versioned record store for exercising the helper."""

    def __init__(self, value=0):
        self.value = value
        self.version = 1
        self.swaps = 0

    def load(self):
        return (self.value, self.version)

    def swap(self, current, replacement):
        self.swaps += 1
        if current[1] != self.version:
            return None
        self.value = replacement[0]
        self.version += 1
        return (self.value, self.version)


def test_successful_write_returns_stored_record():
    cell = VersionedCell(1)
    record, outcome = apply_optimistic(
        record_id="cell",
        load=cell.load,
        decide=lambda cur: Decision((cur[0] + 1, cur[1]), "bumped"),
        swap=cell.swap,
        attempts=3,
    )
    assert record == (2, 2)
    assert outcome == "bumped"


def test_no_replacement_skips_write():
    cell = VersionedCell(1)
    record, outcome = apply_optimistic(
        record_id="cell",
        load=cell.load,
        decide=lambda cur: Decision(None, "nothing to do"),
        swap=cell.swap,
        attempts=3,
    )
    assert record == (1, 1)
    assert outcome == "nothing to do"
    assert cell.swaps == 0


def test_retries_after_lost_race():
    cell = VersionedCell(1)
    interfered = []

    def decide(cur):
        if not interfered:
            # Another writer lands between our read and our write.
            cell.value, cell.version = 10, cell.version + 1
            interfered.append(True)
        return Decision((cur[0] + 1, cur[1]))

    record, _ = apply_optimistic(
        record_id="cell", load=cell.load, decide=decide, swap=cell.swap, attempts=3
    )
    assert record == (11, 3)
    assert cell.swaps == 2


def test_exhausted_budget_raises_conflict(caplog):
    with caplog.at_level(logging.WARNING, logger="gate.concurrency"):
        with pytest.raises(Conflict) as info:
            apply_optimistic(
                record_id="cell",
                load=lambda: (0, 1),
                decide=lambda cur: Decision((1, 1)),
                swap=lambda cur, new: None,
                attempts=3,
            )
    assert info.value.attempts == 3
    assert info.value.retryable is True
    assert "Retry budget exhausted" in caplog.text


def test_decide_errors_propagate_without_retry():
    calls = []

    def decide(cur):
        calls.append(cur)
        raise NotFound("delivery", "d-1")

    with pytest.raises(NotFound):
        apply_optimistic(
            record_id="d-1", load=lambda: None, decide=decide,
            swap=lambda cur, new: new, attempts=3,
        )
    assert len(calls) == 1


def test_keyed_locks_serialize_same_key():
    locks = KeyedLocks()
    inside = []
    overlaps = []
    guard = threading.Lock()

    def work(_):
        with locks.hold("a"):
            with guard:
                inside.append(1)
                if len(inside) > 1:
                    overlaps.append(len(inside))
            time.sleep(0.001)
            with guard:
                inside.pop()

    with ThreadPoolExecutor(max_workers=8) as pool:
        list(pool.map(work, range(40)))
    assert overlaps == []


def test_keyed_locks_do_not_block_other_keys():
    locks = KeyedLocks()
    with locks.hold("a"):
        with locks.hold("b"):
            assert len(locks) == 2


def test_keyed_locks_are_dropped_after_release():
    locks = KeyedLocks()
    for n in range(100):
        with locks.hold(f"code-{n}"):
            pass
    assert len(locks) == 0

    with pytest.raises(RuntimeError):
        with locks.hold("x"):
            raise RuntimeError("boom")
    assert len(locks) == 0
