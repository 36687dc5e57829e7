"""
GATE Deliveries Engine — Workflow and Ordering Rules
======================================================
Pure functions. No store, no clock.
"""
from __future__ import annotations

from datetime import datetime
from typing import Tuple

from core.primitives.workflow import WorkflowDefinition
from core.time import is_past
from engines.deliveries.models import Delivery, DeliveryStatus

DELIVERY_WORKFLOW = WorkflowDefinition(
    name="Delivery",
    initial_state=DeliveryStatus.AUTHORIZED.value,
    terminal_states=frozenset({
        DeliveryStatus.DELIVERED.value,
        DeliveryStatus.FAILED.value,
        DeliveryStatus.CANCELLED.value,
    }),
    transitions={
        DeliveryStatus.AUTHORIZED.value: frozenset({
            DeliveryStatus.DELIVERED.value,
            DeliveryStatus.FAILED.value,
            DeliveryStatus.CANCELLED.value,
        }),
        DeliveryStatus.DELIVERED.value: frozenset(),
        DeliveryStatus.FAILED.value: frozenset(),
        DeliveryStatus.CANCELLED.value: frozenset(),
    },
)

STATUS_PRIORITY = {
    DeliveryStatus.AUTHORIZED: 0,
    DeliveryStatus.DELIVERED: 1,
    DeliveryStatus.FAILED: 2,
    DeliveryStatus.CANCELLED: 2,
}


def is_overdue(delivery: Delivery, as_of: datetime) -> bool:
    return delivery.status == DeliveryStatus.AUTHORIZED and is_past(delivery.expected_date, as_of)


def is_terminal(delivery: Delivery) -> bool:
    return DELIVERY_WORKFLOW.is_terminal(delivery.status.value)


def can_transition(delivery: Delivery, to_status: DeliveryStatus) -> bool:
    return DELIVERY_WORKFLOW.is_valid_transition(delivery.status.value, to_status.value)


def sort_key(delivery: Delivery) -> Tuple[int, datetime]:
    """
    (status priority, expected_date). authorized first, then
    delivered, then failed/cancelled; earliest expected first.
    """
    return (STATUS_PRIORITY[delivery.status], delivery.expected_date)
