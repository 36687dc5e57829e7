"""
GATE Access Log Engine — Projection
=====================================
Built from events:
- guest.credential.consumed.v1
- guest.credential.consumption_rejected.v1

Disposable: losing it loses history, never credential state.
Bounded: only the newest `capacity` entries are kept.
"""

from __future__ import annotations

import logging
from collections import deque
from threading import Lock
from typing import Deque, List, Optional

from core.events import DomainEvent, SubscriberRegistry
from engines.access_log.models import AccessLogEntry, AccessResult
from engines.guest_access.events import (
    CREDENTIAL_CONSUMED_V1,
    CREDENTIAL_CONSUMPTION_REJECTED_V1,
    UNMATCHED_RECORD_ID,
)

logger = logging.getLogger("gate.access_log")

ACCESS_LOG_EVENT_TYPES = (
    CREDENTIAL_CONSUMED_V1,
    CREDENTIAL_CONSUMPTION_REJECTED_V1,
)


class AccessLogProjection:
    projection_name = "access_log"

    def __init__(self, capacity: int = 10_000) -> None:
        if capacity < 1:
            raise ValueError("capacity must be >= 1.")
        # Oldest entries fall off once capacity is reached.
        self._entries: Deque[AccessLogEntry] = deque(maxlen=capacity)
        self._lock = Lock()

    def subscribe(self, registry: SubscriberRegistry) -> None:
        registry.register_many(ACCESS_LOG_EVENT_TYPES, self.apply, self.projection_name)

    def apply(self, event: DomainEvent) -> None:
        if event.event_type not in ACCESS_LOG_EVENT_TYPES:
            return
        entry = _entry_from_event(event)
        with self._lock:
            self._entries.append(entry)
        logger.debug("Access log entry %s (%s)", entry.entry_id, entry.outcome)

    def entries(
        self,
        result: Optional[AccessResult] = None,
        limit: Optional[int] = None,
    ) -> List[AccessLogEntry]:
        """Newest first."""
        with self._lock:
            entries = list(self._entries)
        entries.reverse()
        entries.sort(key=lambda e: e.occurred_at, reverse=True)
        if result is not None:
            entries = [e for e in entries if e.result == result]
        if limit is not None:
            entries = entries[:limit]
        return entries

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    @property
    def count(self) -> int:
        with self._lock:
            return len(self._entries)


def _entry_from_event(event: DomainEvent) -> AccessLogEntry:
    payload = event.payload
    accepted = event.event_type == CREDENTIAL_CONSUMED_V1
    guest_name = payload.get("guest_name")
    matched = event.record_id != UNMATCHED_RECORD_ID

    if accepted:
        details = f"Guest entry - {guest_name}"
        outcome = "accepted"
    else:
        outcome = payload.get("outcome", "")
        details = f"Rejected entry - {guest_name} ({outcome})" if matched else "Invalid code attempted"

    return AccessLogEntry(
        entry_id=AccessLogEntry.new_id(),
        occurred_at=event.occurred_at,
        method=(payload.get("code_type") or "pin").upper(),
        result=AccessResult.SUCCESS if accepted else AccessResult.FAILED,
        outcome=outcome,
        actor_id=event.actor_id,
        details=details,
        credential_id=event.record_id if matched else None,
        guest_name=guest_name,
        owner_id=payload.get("owner_id"),
    )
