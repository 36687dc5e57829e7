"""
GATE Event Bus — Emitter
==========================
The single way services announce a state change.

emit(event):
    1. dispatch to local subscribers (synchronous, guarded)
    2. hand the event to the notification sink — through the executor
       when one is configured, inline otherwise (guarded)

Neither step can fail or block the operation that produced the
event. Sink failures are logged here and nowhere else. emit() returns
the local DispatchReport so a caller can inspect subscriber failures.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, Future
from typing import Optional

from core.events.dispatcher import DispatchReport, dispatch
from core.events.models import DomainEvent
from core.events.registry import SubscriberRegistry
from core.events.sink import NotificationSink, NullNotificationSink

logger = logging.getLogger("gate.events")


class EventEmitter:
    def __init__(
        self,
        *,
        sink: Optional[NotificationSink] = None,
        registry: Optional[SubscriberRegistry] = None,
        executor: Optional[Executor] = None,
    ):
        self._sink = sink or NullNotificationSink()
        self._registry = registry or SubscriberRegistry()
        self._executor = executor

    @property
    def registry(self) -> SubscriberRegistry:
        return self._registry

    def emit(self, event: DomainEvent) -> DispatchReport:
        report = dispatch(event, self._registry)
        if report.failed:
            logger.warning(
                "%d of %d local subscribers failed on %s (event_id: %s)",
                report.failed, report.failed + report.delivered,
                event.event_type, event.event_id,
            )

        if self._executor is None:
            self._publish(event)
            return report

        try:
            future = self._executor.submit(self._publish, event)
        except Exception as exc:
            # Executor shut down or saturated. Drop, never block.
            logger.error(
                "Could not schedule notification for %s (event_id: %s): %s",
                event.event_type, event.event_id, exc,
            )
            return report
        future.add_done_callback(self._log_unexpected)
        return report

    def _publish(self, event: DomainEvent) -> None:
        try:
            self._sink.publish(event)
        except Exception as exc:
            logger.error(
                "Notification delivery failed for %s (event_id: %s): %s",
                event.event_type, event.event_id, exc,
                exc_info=True,
            )

    @staticmethod
    def _log_unexpected(future: Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error("Notification task crashed: %s", exc)
