"""
GATE Deliveries Engine — Event Types and Payload Builders
===========================================================
Engine: deliveries
Scope:  authorized, resolved (delivered | failed), cancelled.
"""

from __future__ import annotations

from datetime import datetime

from core.events.models import DomainEvent
from engines.deliveries.models import Delivery

DELIVERY_AUTHORIZED_V1 = "delivery.parcel.authorized.v1"
DELIVERY_RESOLVED_V1   = "delivery.parcel.resolved.v1"
DELIVERY_CANCELLED_V1  = "delivery.parcel.cancelled.v1"

DELIVERY_EVENT_TYPES = (
    DELIVERY_AUTHORIZED_V1,
    DELIVERY_RESOLVED_V1,
    DELIVERY_CANCELLED_V1,
)


def build_delivery_authorized_event(delivery: Delivery, actor_id: str, at: datetime) -> DomainEvent:
    return DomainEvent(
        event_type=DELIVERY_AUTHORIZED_V1,
        record_id=delivery.delivery_id,
        actor_id=actor_id,
        occurred_at=at,
        payload={
            "resident_id":     delivery.resident_id,
            "unit_number":     delivery.unit_number,
            "company":         delivery.delivery_company,
            "tracking_number": delivery.tracking_number,
            "expected_date":   delivery.expected_date.isoformat(),
        },
    )


def build_delivery_resolved_event(delivery: Delivery, actor_id: str, at: datetime) -> DomainEvent:
    return DomainEvent(
        event_type=DELIVERY_RESOLVED_V1,
        record_id=delivery.delivery_id,
        actor_id=actor_id,
        occurred_at=at,
        payload={
            "resident_id": delivery.resident_id,
            "unit_number": delivery.unit_number,
            "company":     delivery.delivery_company,
            "outcome":     delivery.status.value,
        },
    )


def build_delivery_cancelled_event(delivery: Delivery, actor_id: str, at: datetime) -> DomainEvent:
    return DomainEvent(
        event_type=DELIVERY_CANCELLED_V1,
        record_id=delivery.delivery_id,
        actor_id=actor_id,
        occurred_at=at,
        payload={
            "resident_id": delivery.resident_id,
            "unit_number": delivery.unit_number,
            "company":     delivery.delivery_company,
        },
    )
