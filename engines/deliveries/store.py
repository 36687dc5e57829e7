"""
GATE Deliveries Engine — Delivery Store
=========================================
The ONLY component that mutates delivery records.

Atomic primitives:
    create(delivery)                — insert a new record (version 1)
    compare_and_swap(version, new)  — write iff the stored version still
                                      equals `version`; bumps version
"""

from __future__ import annotations

from dataclasses import replace
from typing import Dict, Optional, Protocol, Tuple

from core.concurrency import KeyedLocks
from engines.deliveries.models import Delivery


class DeliveryStore(Protocol):
    def create(self, delivery: Delivery) -> Delivery:
        ...

    def get(self, delivery_id: str) -> Optional[Delivery]:
        ...

    def compare_and_swap(self, expected_version: int, replacement: Delivery) -> Optional[Delivery]:
        ...

    def list_all(self) -> Tuple[Delivery, ...]:
        ...


class InMemoryDeliveryStore:
    """Thread-safe in-memory store with per-delivery locks."""

    def __init__(self):
        self._records: Dict[str, Delivery] = {}
        self._locks = KeyedLocks()

    def create(self, delivery: Delivery) -> Delivery:
        with self._locks.hold(delivery.delivery_id):
            if delivery.delivery_id in self._records:
                raise ValueError(f"delivery_id '{delivery.delivery_id}' already exists.")
            stored = replace(delivery, version=1)
            self._records[stored.delivery_id] = stored
            return stored

    def get(self, delivery_id: str) -> Optional[Delivery]:
        return self._records.get(delivery_id)

    def compare_and_swap(self, expected_version: int, replacement: Delivery) -> Optional[Delivery]:
        with self._locks.hold(replacement.delivery_id):
            current = self._records.get(replacement.delivery_id)
            if current is None or current.version != expected_version:
                return None
            stored = replace(replacement, version=current.version + 1)
            self._records[stored.delivery_id] = stored
            return stored

    def list_all(self) -> Tuple[Delivery, ...]:
        return tuple(sorted(
            list(self._records.values()),
            key=lambda d: (d.authorized_at, d.delivery_id),
            reverse=True,
        ))
