"""
GATE Guest Access Engine — Credential Model
=============================================
Immutable credential snapshots. A state change produces a NEW
snapshot; the store swaps it in atomically against `version`.

Persisted statuses: ACTIVE, USED, REVOKED.
EXPIRED is derived from the clock and never persisted.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import NamedTuple, Optional

from core.time import TimeWindow


class CodeType(str, Enum):
    PIN = "PIN"
    QR = "QR"


class CredentialStatus(str, Enum):
    ACTIVE = "active"
    USED = "used"
    EXPIRED = "expired"
    REVOKED = "revoked"


PERSISTED_STATUSES = frozenset({
    CredentialStatus.ACTIVE,
    CredentialStatus.USED,
    CredentialStatus.REVOKED,
})

TERMINAL_STATUSES = frozenset({
    CredentialStatus.USED,
    CredentialStatus.EXPIRED,
    CredentialStatus.REVOKED,
})


class ConsumptionOutcome(str, Enum):
    ACCEPTED = "accepted"
    REJECTED_EXPIRED = "rejected-expired"
    REJECTED_EXHAUSTED = "rejected-exhausted"
    REJECTED_REVOKED = "rejected-revoked"
    REJECTED_NOT_FOUND = "rejected-not-found"
    REJECTED_NOT_YET_VALID = "rejected-not-yet-valid"

    @property
    def accepted(self) -> bool:
        return self is ConsumptionOutcome.ACCEPTED


@dataclass(frozen=True)
class GuestCredential:
    """
    Fields:
        credential_id: Unique id.
        owner_id:      Resident who issued it.
        guest_name:    Who the credential is for.
        code_type:     PIN | QR.
        code:          Opaque code (6 digits for PIN, token for QR).
        valid_from:    Start of validity (inclusive).
        valid_until:   End of validity (inclusive).
        max_usage:     Allowed consumptions.
        usage_count:   Consumptions so far.
        status:        Persisted status (ACTIVE | USED | REVOKED).
        created_at:    Issue time.
        purpose:       Optional free text.
        revoked_at:    Set on revocation.
        revoked_by:    Principal that revoked.
        last_used_at:  Time of the latest accepted consumption.
        version:       Store-managed optimistic-concurrency version.
    """

    credential_id: str
    owner_id: str
    guest_name: str
    code_type: CodeType
    code: str
    valid_from: datetime
    valid_until: datetime
    max_usage: int
    created_at: datetime
    usage_count: int = 0
    status: CredentialStatus = CredentialStatus.ACTIVE
    purpose: Optional[str] = None
    revoked_at: Optional[datetime] = None
    revoked_by: Optional[str] = None
    last_used_at: Optional[datetime] = None
    version: int = 0

    def __post_init__(self):
        if not self.credential_id:
            raise ValueError("credential_id must be non-empty.")
        if not self.owner_id:
            raise ValueError("owner_id must be non-empty.")
        if not isinstance(self.code_type, CodeType):
            object.__setattr__(self, "code_type", CodeType(self.code_type))
        if not isinstance(self.status, CredentialStatus):
            object.__setattr__(self, "status", CredentialStatus(self.status))
        if self.status not in PERSISTED_STATUSES:
            raise ValueError(f"status '{self.status.value}' cannot be persisted.")
        if not self.code:
            raise ValueError("code must be non-empty.")
        if self.valid_until <= self.valid_from:
            raise ValueError("valid_until must be after valid_from.")
        if self.max_usage < 1:
            raise ValueError("max_usage must be >= 1.")
        if not 0 <= self.usage_count <= self.max_usage:
            raise ValueError("usage_count must be within [0, max_usage].")
        if self.status == CredentialStatus.USED and self.usage_count != self.max_usage:
            raise ValueError("status 'used' requires usage_count == max_usage.")

    @classmethod
    def new_id(cls) -> str:
        return str(uuid.uuid4())

    @property
    def validity(self) -> TimeWindow:
        return TimeWindow(self.valid_from, self.valid_until)

    def consumed(self, at: datetime) -> "GuestCredential":
        """Snapshot with one more use applied."""
        usage = self.usage_count + 1
        return replace(
            self,
            usage_count=usage,
            last_used_at=at,
            status=(
                CredentialStatus.USED if usage == self.max_usage
                else self.status
            ),
        )

    def revoked(self, at: datetime, by: str) -> "GuestCredential":
        return replace(
            self,
            status=CredentialStatus.REVOKED,
            revoked_at=at,
            revoked_by=by,
        )


class ConsumptionResult(NamedTuple):
    """(credential, outcome). credential is None only for not-found."""

    credential: Optional[GuestCredential]
    outcome: ConsumptionOutcome
