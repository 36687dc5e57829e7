"""
GATE Deliveries Engine — Request Commands
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.errors import ValidationError
from core.time import require_aware
from engines.deliveries.models import RESOLUTION_OUTCOMES, DeliveryStatus


def _optional_text(value, field: str) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string.", field=field)
    return value.strip() or None


@dataclass(frozen=True)
class AuthorizeDeliveryRequest:
    resident_id:     str
    company:         str
    expected_date:   datetime
    unit_number:     Optional[str] = None
    tracking_number: Optional[str] = None
    notes:           Optional[str] = None

    def __post_init__(self):
        if not self.resident_id or not isinstance(self.resident_id, str):
            raise ValidationError("resident_id must be non-empty.", field="resident_id")
        if not isinstance(self.company, str) or not self.company.strip():
            raise ValidationError("company must be non-empty.", field="company")
        object.__setattr__(self, "company", self.company.strip())
        require_aware(self.expected_date, "expected_date")
        object.__setattr__(self, "unit_number", _optional_text(self.unit_number, "unit_number"))
        object.__setattr__(
            self, "tracking_number", _optional_text(self.tracking_number, "tracking_number")
        )
        object.__setattr__(self, "notes", _optional_text(self.notes, "notes"))


@dataclass(frozen=True)
class ResolveDeliveryRequest:
    delivery_id: str
    outcome:     DeliveryStatus

    def __post_init__(self):
        if not self.delivery_id or not isinstance(self.delivery_id, str):
            raise ValidationError("delivery_id must be non-empty.", field="delivery_id")
        try:
            outcome = DeliveryStatus(self.outcome)
        except ValueError:
            outcome = None
        if outcome not in RESOLUTION_OUTCOMES:
            raise ValidationError(
                "outcome must be 'delivered' or 'failed'.", field="outcome"
            )
        object.__setattr__(self, "outcome", outcome)


@dataclass(frozen=True)
class CancelDeliveryRequest:
    delivery_id: str

    def __post_init__(self):
        if not self.delivery_id or not isinstance(self.delivery_id, str):
            raise ValidationError("delivery_id must be non-empty.", field="delivery_id")
