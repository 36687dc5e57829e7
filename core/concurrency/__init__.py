"""
GATE Core Concurrency — Public API
====================================
"""

from core.concurrency.locks import KeyedLocks
from core.concurrency.optimistic import Decision, apply_optimistic

__all__ = [
    "Decision",
    "KeyedLocks",
    "apply_optimistic",
]
