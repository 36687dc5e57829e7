"""
GATE Guest Access Engine — Credential Rules
=============================================
Pure functions of (credential, as_of). No store, no clock.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from engines.guest_access.models import (
    ConsumptionOutcome,
    CredentialStatus,
    GuestCredential,
)


def compute_status(credential: GuestCredential, as_of: datetime) -> CredentialStatus:
    """
    Status for display/read paths. Persisted revoked/used win;
    otherwise expired once as_of passes valid_until.
    """
    if credential.status in (CredentialStatus.REVOKED, CredentialStatus.USED):
        return credential.status
    if credential.validity.has_ended(as_of):
        return CredentialStatus.EXPIRED
    return CredentialStatus.ACTIVE


def holds_code(credential: Optional[GuestCredential], as_of: datetime) -> bool:
    """An active credential reserves its code against reuse."""
    return (
        credential is not None
        and compute_status(credential, as_of) == CredentialStatus.ACTIVE
    )


def evaluate_consumption(
    credential: Optional[GuestCredential], as_of: datetime
) -> ConsumptionOutcome:
    if credential is None:
        return ConsumptionOutcome.REJECTED_NOT_FOUND
    if credential.status == CredentialStatus.REVOKED:
        return ConsumptionOutcome.REJECTED_REVOKED
    if (
        credential.status == CredentialStatus.USED
        or credential.usage_count >= credential.max_usage
    ):
        return ConsumptionOutcome.REJECTED_EXHAUSTED
    if credential.validity.has_ended(as_of):
        return ConsumptionOutcome.REJECTED_EXPIRED
    if not credential.validity.has_started(as_of):
        return ConsumptionOutcome.REJECTED_NOT_YET_VALID
    return ConsumptionOutcome.ACCEPTED
