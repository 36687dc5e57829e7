"""
GATE Event Bus — Subscriber Registry
======================================
In-process listeners keyed by event type (the access-log projection
today). The external notification sink is not a subscriber; the
emitter holds it directly.

A subscription is refused when the event type is not at least
three dot-separated segments, or when the same handler already
listens to that type.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from threading import Lock
from typing import Callable, Dict, Iterable, List, NamedTuple

logger = logging.getLogger("gate.events")


# ══════════════════════════════════════════════════════════════
# WIRING ERRORS
# ══════════════════════════════════════════════════════════════

class EventBusError(Exception):
    """Subscription rejected at wiring time. Dispatch never raises."""


class InvalidEventTypeFormat(EventBusError):
    def __init__(self, event_type: str):
        self.event_type = event_type
        super().__init__(f"'{event_type}' is not an engine.domain.action event type.")


class DuplicateSubscriberError(EventBusError):
    def __init__(self, event_type: str, handler_name: str, subscriber_name: str):
        self.event_type = event_type
        self.handler_name = handler_name
        self.subscriber_name = subscriber_name
        super().__init__(
            f"{subscriber_name} already listens to {event_type} with {handler_name}."
        )


# ══════════════════════════════════════════════════════════════
# REGISTRY
# ══════════════════════════════════════════════════════════════

class Subscription(NamedTuple):
    handler: Callable
    subscriber_name: str

    @property
    def handler_name(self) -> str:
        return handler_label(self.handler)


def handler_label(handler: Callable) -> str:
    return getattr(handler, "__qualname__", repr(handler))


def is_valid_event_type(event_type) -> bool:
    return isinstance(event_type, str) and len(event_type.strip().split(".")) >= 3


class SubscriberRegistry:
    def __init__(self):
        self._by_type: Dict[str, List[Subscription]] = defaultdict(list)
        self._lock = Lock()

    def register_subscriber(
        self,
        event_type: str,
        handler: Callable,
        subscriber_name: str,
    ) -> None:
        if not is_valid_event_type(event_type):
            raise InvalidEventTypeFormat(str(event_type or ""))
        if not callable(handler):
            raise EventBusError(f"{subscriber_name}: handler is not callable ({handler!r}).")

        with self._lock:
            current = self._by_type[event_type]
            # Bound methods compare equal, not identical.
            if any(sub.handler == handler for sub in current):
                raise DuplicateSubscriberError(
                    event_type, handler_label(handler), subscriber_name
                )
            current.append(Subscription(handler, subscriber_name))

        logger.info("%s subscribed to %s", subscriber_name, event_type)

    def register_many(
        self,
        event_types: Iterable[str],
        handler: Callable,
        subscriber_name: str,
    ) -> None:
        for event_type in event_types:
            self.register_subscriber(event_type, handler, subscriber_name)

    def get_subscribers(self, event_type: str) -> List[Subscription]:
        """Snapshot; an unknown type yields an empty list."""
        with self._lock:
            return list(self._by_type.get(event_type, ()))

    def subscriber_count(self, event_type: str) -> int:
        return len(self.get_subscribers(event_type))
