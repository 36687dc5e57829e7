"""
GATE Event Bus — Domain Event
===============================
Frozen record of a state change, emitted AFTER the store write
succeeded. Events carry ids, never secrets: a credential's code is
not part of any payload.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict


@dataclass(frozen=True)
class DomainEvent:
    """
    Fields:
        event_type:  engine.domain.action.vN (e.g. 'guest.credential.issued.v1').
        record_id:   Id of the credential or delivery that changed.
        actor_id:    Principal that caused the change.
        occurred_at: Clock time of the change.
        payload:     Event-specific details.
        event_id:    Unique id of this event.
    """

    event_type: str
    record_id: str
    actor_id: str
    occurred_at: datetime
    payload: Dict[str, Any] = field(default_factory=dict)
    event_id: uuid.UUID = field(default_factory=uuid.uuid4)

    def __post_init__(self):
        if not self.event_type or len(self.event_type.split(".")) < 3:
            raise ValueError("event_type must follow engine.domain.action format.")
        if not self.record_id:
            raise ValueError("record_id must be non-empty.")
        if not self.actor_id:
            raise ValueError("actor_id must be non-empty.")
        if not isinstance(self.occurred_at, datetime):
            raise ValueError("occurred_at must be a datetime.")

    def to_dict(self) -> dict:
        return {
            "event_id": str(self.event_id),
            "event_type": self.event_type,
            "record_id": self.record_id,
            "actor_id": self.actor_id,
            "occurred_at": self.occurred_at.isoformat(),
            "payload": dict(self.payload),
        }
