"""
GATE Event Bus — Public API
=============================
Store writes first. Events after. Notifications best-effort.
"""

from core.events.dispatcher import DispatchReport, dispatch
from core.events.emitter import EventEmitter
from core.events.models import DomainEvent
from core.events.registry import (
    DuplicateSubscriberError,
    EventBusError,
    InvalidEventTypeFormat,
    SubscriberRegistry,
)
from core.events.sink import (
    InMemoryNotificationSink,
    NotificationSink,
    NullNotificationSink,
)

__all__ = [
    "dispatch",
    "DispatchReport",
    "DomainEvent",
    "EventEmitter",
    "SubscriberRegistry",
    "NotificationSink",
    "NullNotificationSink",
    "InMemoryNotificationSink",
    "EventBusError",
    "InvalidEventTypeFormat",
    "DuplicateSubscriberError",
]
