"""
GATE Identity — Principal
===========================
An authenticated actor with a role, handed to the engine by the
API layer. Immutable per request.

Session/token mechanics are NOT handled here. The engine trusts the
principal it is given and checks every action against the Policy
Engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    RESIDENT = "resident"
    ADMIN = "admin"
    SECURITY = "security"
    SUPER_ADMIN = "super_admin"

    @property
    def display_name(self) -> str:
        return ROLE_DISPLAY_NAMES[self]


ROLE_DISPLAY_NAMES = {
    Role.RESIDENT: "Resident",
    Role.ADMIN: "Community Admin",
    Role.SECURITY: "Security",
    Role.SUPER_ADMIN: "Super Admin",
}

PRIVILEGED_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


@dataclass(frozen=True)
class Principal:
    """
    Fields:
        principal_id: Stable user identifier.
        role:         One of Role.
        unit_number:  Residents only — the unit the resident lives in.
    """

    principal_id: str
    role: Role
    unit_number: Optional[str] = None

    def __post_init__(self):
        if not self.principal_id or not isinstance(self.principal_id, str):
            raise ValueError("principal_id must be a non-empty string.")

        if not isinstance(self.role, Role):
            try:
                object.__setattr__(self, "role", Role(self.role))
            except ValueError:
                raise ValueError(
                    f"role '{self.role}' not valid. "
                    f"Must be one of: {sorted(r.value for r in Role)}"
                ) from None

        if self.role == Role.RESIDENT:
            if not self.unit_number or not isinstance(self.unit_number, str):
                raise ValueError("unit_number is required for residents.")
        elif self.unit_number is not None:
            raise ValueError("unit_number applies to residents only.")

    @property
    def is_privileged(self) -> bool:
        return self.role in PRIVILEGED_ROLES

    def to_dict(self) -> dict:
        return {
            "principal_id": self.principal_id,
            "role": self.role.value,
            "unit_number": self.unit_number,
        }
