"""
GATE Core Concurrency — Per-Key Locks
=======================================
One lock per record id (or per code). Two operations contend only
when they touch the same key.

A key's lock lives only while someone holds or waits on it, so the
table stays as small as the number of in-flight operations.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class _Slot:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class KeyedLocks:
    """
    Usage:
        locks = KeyedLocks()
        with locks.hold(credential.code):
            ...
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._slots: Dict[str, _Slot] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self._guard:
            slot = self._slots.get(key)
            if slot is None:
                slot = self._slots[key] = _Slot()
            slot.users += 1
        try:
            with slot.lock:
                yield
        finally:
            with self._guard:
                slot.users -= 1
                if slot.users == 0:
                    del self._slots[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)
