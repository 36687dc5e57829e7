"""
GATE Event Bus — Notification Sink Port
=========================================
The external notification service is a collaborator. The engine
hands it DomainEvents and does not care what it does with them.
"""

from __future__ import annotations

from threading import Lock
from typing import List, Protocol

from core.events.models import DomainEvent


class NotificationSink(Protocol):
    def publish(self, event: DomainEvent) -> None:
        ...


class NullNotificationSink:
    """Drops every event. Default when no sink is wired."""

    def publish(self, event: DomainEvent) -> None:
        return None


class InMemoryNotificationSink:
    """Collects events. Used by tests and local development."""

    def __init__(self):
        self._events: List[DomainEvent] = []
        self._lock = Lock()

    def publish(self, event: DomainEvent) -> None:
        with self._lock:
            self._events.append(event)

    @property
    def events(self) -> List[DomainEvent]:
        with self._lock:
            return list(self._events)

    def of_type(self, event_type: str) -> List[DomainEvent]:
        return [e for e in self.events if e.event_type == event_type]

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
