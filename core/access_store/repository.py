"""
GATE Access Store - Django Repositories
=======================================
ORM-backed implementations of CredentialStore and DeliveryStore.

Credential create serializes on a CodeReservation row per code, so
concurrent issuers of the same fresh code cannot both insert.

Compare-and-swap is a single conditional UPDATE:
    UPDATE ... SET ..., version = v + 1 WHERE pk = id AND version = v
A zero row count means another writer got there first.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Tuple

from django.db import IntegrityError, transaction

from engines.deliveries.models import Delivery
from engines.guest_access.models import GuestCredential
from engines.guest_access.policies import holds_code

logger = logging.getLogger("gate.access_store")


# ══════════════════════════════════════════════════════════════
# CREDENTIALS
# ══════════════════════════════════════════════════════════════

_CREDENTIAL_MUTABLE_FIELDS = (
    "usage_count",
    "status",
    "revoked_at",
    "revoked_by",
    "last_used_at",
)


class DjangoCredentialStore:
    def create(self, credential: GuestCredential, *, as_of: datetime) -> Optional[GuestCredential]:
        from core.access_store.models import CodeReservation, GuestCredentialRecord

        with transaction.atomic():
            # Lock the code itself, even when no credential row holds it yet.
            CodeReservation.objects.select_for_update().get_or_create(code=credential.code)
            holders = (
                GuestCredentialRecord.objects.select_for_update()
                .filter(code=credential.code)
                .order_by("-created_at", "-credential_id")
            )
            for row in holders:
                if holds_code(_to_credential(row), as_of):
                    logger.debug("Code already held by %s", row.credential_id)
                    return None
            try:
                with transaction.atomic():
                    row = GuestCredentialRecord.objects.create(
                        credential_id=credential.credential_id,
                        owner_id=credential.owner_id,
                        guest_name=credential.guest_name,
                        code_type=credential.code_type.value,
                        code=credential.code,
                        valid_from=credential.valid_from,
                        valid_until=credential.valid_until,
                        max_usage=credential.max_usage,
                        usage_count=credential.usage_count,
                        status=credential.status.value,
                        purpose=credential.purpose,
                        created_at=credential.created_at,
                        revoked_at=credential.revoked_at,
                        revoked_by=credential.revoked_by,
                        last_used_at=credential.last_used_at,
                        version=1,
                    )
            except IntegrityError as exc:
                raise ValueError(
                    f"credential_id '{credential.credential_id}' already exists."
                ) from exc
        return _to_credential(row)

    def get(self, credential_id: str) -> Optional[GuestCredential]:
        from core.access_store.models import GuestCredentialRecord

        row = GuestCredentialRecord.objects.filter(pk=credential_id).first()
        return _to_credential(row) if row is not None else None

    def find_by_code(self, code: str) -> Optional[GuestCredential]:
        from core.access_store.models import GuestCredentialRecord

        row = (
            GuestCredentialRecord.objects.filter(code=code)
            .order_by("-created_at", "-credential_id")
            .first()
        )
        return _to_credential(row) if row is not None else None

    def compare_and_swap(
        self, expected_version: int, replacement: GuestCredential
    ) -> Optional[GuestCredential]:
        from core.access_store.models import GuestCredentialRecord

        changes = {
            field: getattr(replacement, field) for field in _CREDENTIAL_MUTABLE_FIELDS
        }
        changes["status"] = replacement.status.value
        updated = GuestCredentialRecord.objects.filter(
            pk=replacement.credential_id,
            version=expected_version,
        ).update(version=expected_version + 1, **changes)
        if updated != 1:
            logger.debug(
                "Stale version %d for credential %s", expected_version, replacement.credential_id
            )
            return None
        return replace(replacement, version=expected_version + 1)

    def list_all(self) -> Tuple[GuestCredential, ...]:
        from core.access_store.models import GuestCredentialRecord

        rows = GuestCredentialRecord.objects.order_by("-created_at", "-credential_id")
        return tuple(_to_credential(row) for row in rows)

    def list_by_owner(self, owner_id: str) -> Tuple[GuestCredential, ...]:
        from core.access_store.models import GuestCredentialRecord

        rows = GuestCredentialRecord.objects.filter(owner_id=owner_id).order_by(
            "-created_at", "-credential_id"
        )
        return tuple(_to_credential(row) for row in rows)


def _to_credential(row) -> GuestCredential:
    return GuestCredential(
        credential_id=row.credential_id,
        owner_id=row.owner_id,
        guest_name=row.guest_name,
        code_type=row.code_type,
        code=row.code,
        valid_from=row.valid_from,
        valid_until=row.valid_until,
        max_usage=row.max_usage,
        created_at=row.created_at,
        usage_count=row.usage_count,
        status=row.status,
        purpose=row.purpose,
        revoked_at=row.revoked_at,
        revoked_by=row.revoked_by,
        last_used_at=row.last_used_at,
        version=row.version,
    )


# ══════════════════════════════════════════════════════════════
# DELIVERIES
# ══════════════════════════════════════════════════════════════

_DELIVERY_MUTABLE_FIELDS = (
    "delivered_at",
    "resolved_at",
    "resolved_by",
)


class DjangoDeliveryStore:
    def create(self, delivery: Delivery) -> Delivery:
        from core.access_store.models import DeliveryRecord

        try:
            with transaction.atomic():
                row = DeliveryRecord.objects.create(
                    delivery_id=delivery.delivery_id,
                    resident_id=delivery.resident_id,
                    unit_number=delivery.unit_number,
                    delivery_company=delivery.delivery_company,
                    tracking_number=delivery.tracking_number,
                    expected_date=delivery.expected_date,
                    notes=delivery.notes,
                    status=delivery.status.value,
                    authorized_at=delivery.authorized_at,
                    authorized_by=delivery.authorized_by,
                    delivered_at=delivery.delivered_at,
                    resolved_at=delivery.resolved_at,
                    resolved_by=delivery.resolved_by,
                    version=1,
                )
        except IntegrityError as exc:
            raise ValueError(f"delivery_id '{delivery.delivery_id}' already exists.") from exc
        return _to_delivery(row)

    def get(self, delivery_id: str) -> Optional[Delivery]:
        from core.access_store.models import DeliveryRecord

        row = DeliveryRecord.objects.filter(pk=delivery_id).first()
        return _to_delivery(row) if row is not None else None

    def compare_and_swap(self, expected_version: int, replacement: Delivery) -> Optional[Delivery]:
        from core.access_store.models import DeliveryRecord

        changes = {field: getattr(replacement, field) for field in _DELIVERY_MUTABLE_FIELDS}
        changes["status"] = replacement.status.value
        updated = DeliveryRecord.objects.filter(
            pk=replacement.delivery_id,
            version=expected_version,
        ).update(version=expected_version + 1, **changes)
        if updated != 1:
            logger.debug(
                "Stale version %d for delivery %s", expected_version, replacement.delivery_id
            )
            return None
        return replace(replacement, version=expected_version + 1)

    def list_all(self) -> Tuple[Delivery, ...]:
        from core.access_store.models import DeliveryRecord

        rows = DeliveryRecord.objects.order_by("-authorized_at", "-delivery_id")
        return tuple(_to_delivery(row) for row in rows)


def _to_delivery(row) -> Delivery:
    return Delivery(
        delivery_id=row.delivery_id,
        resident_id=row.resident_id,
        unit_number=row.unit_number,
        delivery_company=row.delivery_company,
        expected_date=row.expected_date,
        authorized_at=row.authorized_at,
        authorized_by=row.authorized_by,
        status=row.status,
        tracking_number=row.tracking_number,
        notes=row.notes,
        delivered_at=row.delivered_at,
        resolved_at=row.resolved_at,
        resolved_by=row.resolved_by,
        version=row.version,
    )
