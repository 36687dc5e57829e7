"""
GATE Core Time — Public API
=============================
Injectable clock and pure temporal helpers.
"""

from core.time.clock import (
    Clock,
    FixedClock,
    SystemClock,
    get_default_clock,
    require_aware,
    set_default_clock,
)
from core.time.temporal import TimeWindow, is_past

__all__ = [
    "Clock",
    "FixedClock",
    "SystemClock",
    "get_default_clock",
    "set_default_clock",
    "require_aware",
    "TimeWindow",
    "is_past",
]
