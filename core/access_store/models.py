"""
GATE Access Store - Persistent Records
======================================
Row shapes for credentials and deliveries. Every row carries a
`version` column used as the compare-and-swap guard.
"""

from __future__ import annotations

from django.db import models


class CodeTypeChoice(models.TextChoices):
    PIN = "PIN", "PIN"
    QR = "QR", "QR"


class CredentialStatusChoice(models.TextChoices):
    ACTIVE = "active", "Active"
    USED = "used", "Used"
    REVOKED = "revoked", "Revoked"


class DeliveryStatusChoice(models.TextChoices):
    AUTHORIZED = "authorized", "Authorized"
    DELIVERED = "delivered", "Delivered"
    FAILED = "failed", "Failed"
    CANCELLED = "cancelled", "Cancelled"


class GuestCredentialRecord(models.Model):
    credential_id = models.CharField(max_length=64, primary_key=True)
    owner_id = models.CharField(max_length=255, db_index=True)
    guest_name = models.CharField(max_length=255)
    code_type = models.CharField(max_length=8, choices=CodeTypeChoice.choices)
    code = models.CharField(max_length=128, db_index=True)
    valid_from = models.DateTimeField()
    valid_until = models.DateTimeField()
    max_usage = models.PositiveIntegerField()
    usage_count = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=16,
        choices=CredentialStatusChoice.choices,
        default=CredentialStatusChoice.ACTIVE,
    )
    purpose = models.TextField(null=True, blank=True)
    created_at = models.DateTimeField()
    revoked_at = models.DateTimeField(null=True, blank=True)
    revoked_by = models.CharField(max_length=255, null=True, blank=True)
    last_used_at = models.DateTimeField(null=True, blank=True)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "gate_guest_credentials"
        ordering = ["-created_at", "-credential_id"]
        indexes = [
            models.Index(fields=["code", "created_at"], name="idx_credential_code_created"),
        ]

    def __str__(self) -> str:
        return f"{self.credential_id} ({self.status})"


class DeliveryRecord(models.Model):
    delivery_id = models.CharField(max_length=64, primary_key=True)
    resident_id = models.CharField(max_length=255, db_index=True)
    unit_number = models.CharField(max_length=32, db_index=True)
    delivery_company = models.CharField(max_length=255)
    tracking_number = models.CharField(max_length=255, null=True, blank=True)
    expected_date = models.DateTimeField()
    notes = models.TextField(null=True, blank=True)
    status = models.CharField(
        max_length=16,
        choices=DeliveryStatusChoice.choices,
        default=DeliveryStatusChoice.AUTHORIZED,
    )
    authorized_at = models.DateTimeField()
    authorized_by = models.CharField(max_length=255)
    delivered_at = models.DateTimeField(null=True, blank=True)
    resolved_at = models.DateTimeField(null=True, blank=True)
    resolved_by = models.CharField(max_length=255, null=True, blank=True)
    version = models.PositiveIntegerField(default=1)

    class Meta:
        db_table = "gate_deliveries"
        ordering = ["-authorized_at", "-delivery_id"]

    def __str__(self) -> str:
        return f"{self.delivery_id} ({self.status})"


class CodeReservation(models.Model):
    """
    One row per code ever issued. Credential creation locks this row
    before checking for an active holder, so two writers drawing the
    same fresh code serialize here instead of both inserting.
    """

    code = models.CharField(max_length=128, primary_key=True)

    class Meta:
        db_table = "gate_code_reservations"

    def __str__(self) -> str:
        return self.code
