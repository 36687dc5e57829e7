"""
GATE Core Time — Injectable Clock
===================================
Engine code never reads the wall clock directly; it asks a Clock.

Every expiry and overdue decision reads time from ONE Clock that is
handed to the service at construction. Within a single logical
operation the clock is read once and the value is passed down, so a
credential cannot be "valid" for the check and "expired" for the write.
"""

from __future__ import annotations

import threading
from datetime import datetime, timedelta, timezone
from typing import Protocol, Union

from core.errors import ValidationError


# ══════════════════════════════════════════════════════════════
# CLOCK PROTOCOL
# ══════════════════════════════════════════════════════════════

class Clock(Protocol):
    """Anything that can tell the current UTC time."""

    def now_utc(self) -> datetime:
        """Return current UTC time (timezone-aware)."""
        ...  # pragma: no cover


# ══════════════════════════════════════════════════════════════
# IMPLEMENTATIONS
# ══════════════════════════════════════════════════════════════

class SystemClock:
    """Wall-clock time from the host."""

    def now_utc(self) -> datetime:
        return datetime.now(timezone.utc)


class FixedClock:
    """
    Test clock — returns a controllable timestamp.

    Usage:
        clock = FixedClock(datetime(2026, 1, 1, tzinfo=timezone.utc))
        clock.advance(timedelta(hours=2))
    """

    def __init__(self, fixed_dt: datetime) -> None:
        require_aware(fixed_dt, "fixed_dt")
        self._lock = threading.Lock()
        self._fixed_dt = fixed_dt

    def now_utc(self) -> datetime:
        with self._lock:
            return self._fixed_dt

    def advance(self, delta: Union[timedelta, float]) -> None:
        """Move time forward by a timedelta or a number of seconds."""
        if not isinstance(delta, timedelta):
            delta = timedelta(seconds=delta)
        with self._lock:
            self._fixed_dt = self._fixed_dt + delta

    def set(self, dt: datetime) -> None:
        require_aware(dt, "dt")
        with self._lock:
            self._fixed_dt = dt


def require_aware(dt: datetime, field: str) -> None:
    """ValidationError (a ValueError) unless dt is a timezone-aware datetime."""
    if not isinstance(dt, datetime):
        raise ValidationError(f"{field} must be a datetime.", field=field)
    if dt.tzinfo is None:
        raise ValidationError(f"{field} must be timezone-aware.", field=field)


# ══════════════════════════════════════════════════════════════
# DEFAULT CLOCK (wiring only)
# ══════════════════════════════════════════════════════════════

_default_clock: Clock = SystemClock()


def set_default_clock(clock: Clock) -> None:
    """Swap the process-wide clock. Tests use this; services take a clock argument."""
    global _default_clock
    _default_clock = clock


def get_default_clock() -> Clock:
    """Clock used when a caller does not inject one."""
    return _default_clock
