"""
GATE Guest Access Engine — Request Commands
=============================================
Input contracts validated on construction. A request that builds is
well-formed; rules that need the clock or the store are checked by
the service.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from core.errors import ValidationError
from core.time import require_aware
from engines.guest_access.models import CodeType


@dataclass(frozen=True)
class IssueCredentialRequest:
    owner_id:    str
    guest_name:  str
    valid_until: datetime
    code_type:   CodeType = CodeType.PIN
    valid_from:  Optional[datetime] = None
    max_usage:   int = 1
    purpose:     Optional[str] = None

    def __post_init__(self):
        if not self.owner_id or not isinstance(self.owner_id, str):
            raise ValidationError("owner_id must be non-empty.", field="owner_id")
        if not isinstance(self.guest_name, str) or not self.guest_name.strip():
            raise ValidationError("guest_name must be non-empty.", field="guest_name")
        object.__setattr__(self, "guest_name", self.guest_name.strip())

        try:
            object.__setattr__(self, "code_type", CodeType(self.code_type))
        except ValueError:
            raise ValidationError(
                f"code_type must be one of {sorted(c.value for c in CodeType)}.",
                field="code_type",
            ) from None

        require_aware(self.valid_until, "valid_until")
        if self.valid_from is not None:
            require_aware(self.valid_from, "valid_from")
            if self.valid_until <= self.valid_from:
                raise ValidationError(
                    "valid_until must be after valid_from.", field="valid_until"
                )

        if (
            not isinstance(self.max_usage, int)
            or isinstance(self.max_usage, bool)
            or self.max_usage < 1
        ):
            raise ValidationError("max_usage must be an integer >= 1.", field="max_usage")

        if self.purpose is not None:
            if not isinstance(self.purpose, str):
                raise ValidationError("purpose must be a string.", field="purpose")
            object.__setattr__(self, "purpose", self.purpose.strip() or None)


@dataclass(frozen=True)
class ConsumeCredentialRequest:
    code:  str
    as_of: Optional[datetime] = None

    def __post_init__(self):
        if not isinstance(self.code, str) or not self.code.strip():
            raise ValidationError("code must be non-empty.", field="code")
        object.__setattr__(self, "code", self.code.strip())
        if self.as_of is not None:
            require_aware(self.as_of, "as_of")


@dataclass(frozen=True)
class RevokeCredentialRequest:
    credential_id: str

    def __post_init__(self):
        if not self.credential_id or not isinstance(self.credential_id, str):
            raise ValidationError(
                "credential_id must be non-empty.", field="credential_id"
            )
