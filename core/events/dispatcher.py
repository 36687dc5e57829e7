"""
GATE Event Bus — Local Dispatch
=================================
Runs every local subscriber for an event, in registration order.

A failing subscriber is logged and skipped; the rest still run. The
store write that produced the event is never undone, and dispatch()
never raises.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List

from core.events.models import DomainEvent
from core.events.registry import SubscriberRegistry

logger = logging.getLogger("gate.events")


@dataclass(frozen=True)
class SubscriberFailure:
    subscriber_name: str
    handler_name: str
    error_type: str
    error: str


@dataclass
class DispatchReport:
    event_type: str
    event_id: str
    delivered: int = 0
    failures: List[SubscriberFailure] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


def dispatch(event: DomainEvent, registry: SubscriberRegistry) -> DispatchReport:
    report = DispatchReport(event_type=event.event_type, event_id=str(event.event_id))

    for subscription in registry.get_subscribers(event.event_type):
        try:
            subscription.handler(event)
        except Exception as exc:
            report.failures.append(SubscriberFailure(
                subscriber_name=subscription.subscriber_name,
                handler_name=subscription.handler_name,
                error_type=type(exc).__name__,
                error=str(exc),
            ))
            logger.error(
                "%s failed on %s (event_id: %s): %s",
                subscription.subscriber_name, event.event_type, event.event_id, exc,
                exc_info=True,
            )
        else:
            report.delivered += 1

    if not report.delivered and not report.failures:
        logger.debug("No local subscribers for %s", event.event_type)
    return report
