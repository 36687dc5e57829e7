"""
GATE Access Log Engine — Entry Model
======================================
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class AccessResult(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class AccessLogEntry:
    """One gate entry attempt, accepted or rejected."""

    entry_id: str
    occurred_at: datetime
    method: str
    result: AccessResult
    outcome: str
    actor_id: str
    details: str
    credential_id: Optional[str] = None
    guest_name: Optional[str] = None
    owner_id: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "result", AccessResult(self.result))

    @staticmethod
    def new_id() -> str:
        return str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entry_id":      self.entry_id,
            "occurred_at":   self.occurred_at.isoformat(),
            "method":        self.method,
            "result":        self.result.value,
            "outcome":       self.outcome,
            "credential_id": self.credential_id,
            "guest_name":    self.guest_name,
            "owner_id":      self.owner_id,
            "actor_id":      self.actor_id,
            "details":       self.details,
        }
