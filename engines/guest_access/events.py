"""
GATE Guest Access Engine — Event Types and Payload Builders
=============================================================
Engine: guest_access
Scope:  Credential lifecycle — issued, consumed, consumption
        rejected, revoked.

Payloads never include the credential code.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from core.events.models import DomainEvent
from engines.guest_access.models import ConsumptionOutcome, GuestCredential

CREDENTIAL_ISSUED_V1               = "guest.credential.issued.v1"
CREDENTIAL_CONSUMED_V1             = "guest.credential.consumed.v1"
CREDENTIAL_CONSUMPTION_REJECTED_V1 = "guest.credential.consumption_rejected.v1"
CREDENTIAL_REVOKED_V1              = "guest.credential.revoked.v1"

GUEST_ACCESS_EVENT_TYPES = (
    CREDENTIAL_ISSUED_V1,
    CREDENTIAL_CONSUMED_V1,
    CREDENTIAL_CONSUMPTION_REJECTED_V1,
    CREDENTIAL_REVOKED_V1,
)

UNMATCHED_RECORD_ID = "unmatched"


def build_credential_issued_event(
    credential: GuestCredential, actor_id: str, at: datetime
) -> DomainEvent:
    return DomainEvent(
        event_type=CREDENTIAL_ISSUED_V1,
        record_id=credential.credential_id,
        actor_id=actor_id,
        occurred_at=at,
        payload={
            "owner_id":    credential.owner_id,
            "guest_name":  credential.guest_name,
            "code_type":   credential.code_type.value,
            "valid_from":  credential.valid_from.isoformat(),
            "valid_until": credential.valid_until.isoformat(),
            "max_usage":   credential.max_usage,
            "purpose":     credential.purpose,
        },
    )


def build_credential_consumed_event(
    credential: GuestCredential, actor_id: str, at: datetime
) -> DomainEvent:
    return DomainEvent(
        event_type=CREDENTIAL_CONSUMED_V1,
        record_id=credential.credential_id,
        actor_id=actor_id,
        occurred_at=at,
        payload={
            "owner_id":    credential.owner_id,
            "guest_name":  credential.guest_name,
            "code_type":   credential.code_type.value,
            "usage_count": credential.usage_count,
            "max_usage":   credential.max_usage,
            "status":      credential.status.value,
        },
    )


def build_consumption_rejected_event(
    credential: Optional[GuestCredential],
    outcome: ConsumptionOutcome,
    actor_id: str,
    at: datetime,
    code_type: Optional[str] = None,
) -> DomainEvent:
    if credential is None:
        return DomainEvent(
            event_type=CREDENTIAL_CONSUMPTION_REJECTED_V1,
            record_id=UNMATCHED_RECORD_ID,
            actor_id=actor_id,
            occurred_at=at,
            payload={"outcome": outcome.value, "code_type": code_type},
        )
    return DomainEvent(
        event_type=CREDENTIAL_CONSUMPTION_REJECTED_V1,
        record_id=credential.credential_id,
        actor_id=actor_id,
        occurred_at=at,
        payload={
            "outcome":    outcome.value,
            "owner_id":   credential.owner_id,
            "guest_name": credential.guest_name,
            "code_type":  credential.code_type.value,
        },
    )


def build_credential_revoked_event(
    credential: GuestCredential, actor_id: str, at: datetime
) -> DomainEvent:
    return DomainEvent(
        event_type=CREDENTIAL_REVOKED_V1,
        record_id=credential.credential_id,
        actor_id=actor_id,
        occurred_at=at,
        payload={
            "owner_id":    credential.owner_id,
            "guest_name":  credential.guest_name,
            "usage_count": credential.usage_count,
        },
    )
