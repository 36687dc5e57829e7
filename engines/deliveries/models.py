"""
GATE Deliveries Engine — Delivery Model
=========================================
Immutable delivery snapshots, swapped atomically against `version`.
Overdue is derived from the clock and never persisted.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Optional


class DeliveryStatus(str, Enum):
    AUTHORIZED = "authorized"
    DELIVERED = "delivered"
    FAILED = "failed"
    CANCELLED = "cancelled"


RESOLUTION_OUTCOMES = frozenset({DeliveryStatus.DELIVERED, DeliveryStatus.FAILED})


@dataclass(frozen=True)
class Delivery:
    """
    Fields:
        delivery_id:      Unique id.
        resident_id:      Resident the delivery is for.
        unit_number:      Unit the delivery goes to.
        delivery_company: Carrier name.
        expected_date:    When the delivery is expected.
        authorized_at:    Creation time.
        authorized_by:    Principal that created it.
        status:           authorized | delivered | failed | cancelled.
        tracking_number:  Optional carrier reference.
        notes:            Optional free text.
        delivered_at:     Set iff status is delivered.
        resolved_at:      Time the record left `authorized`.
        resolved_by:      Principal that resolved or cancelled it.
        version:          Store-managed optimistic-concurrency version.
    """

    delivery_id: str
    resident_id: str
    unit_number: str
    delivery_company: str
    expected_date: datetime
    authorized_at: datetime
    authorized_by: str
    status: DeliveryStatus = DeliveryStatus.AUTHORIZED
    tracking_number: Optional[str] = None
    notes: Optional[str] = None
    delivered_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    version: int = 0

    def __post_init__(self):
        if not self.delivery_id:
            raise ValueError("delivery_id must be non-empty.")
        if not self.resident_id:
            raise ValueError("resident_id must be non-empty.")
        if not self.unit_number:
            raise ValueError("unit_number must be non-empty.")
        if not self.delivery_company:
            raise ValueError("delivery_company must be non-empty.")
        if not isinstance(self.status, DeliveryStatus):
            object.__setattr__(self, "status", DeliveryStatus(self.status))
        if (self.status == DeliveryStatus.DELIVERED) != (self.delivered_at is not None):
            raise ValueError("delivered_at must be set iff status is delivered.")

    @classmethod
    def new_id(cls) -> str:
        return str(uuid.uuid4())

    def resolved(self, outcome: DeliveryStatus, at: datetime, by: str) -> "Delivery":
        return replace(
            self,
            status=outcome,
            delivered_at=at if outcome == DeliveryStatus.DELIVERED else None,
            resolved_at=at,
            resolved_by=by,
        )
