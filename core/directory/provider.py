"""
GATE Directory — Resident Lookup Port
=======================================
Resident and user profiles live in an external directory service.
The engine reads it for display enrichment only. Authorization
decisions NEVER consult the directory.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Protocol, Tuple


@dataclass(frozen=True)
class ResidentProfile:
    resident_id: str
    name: str
    unit_number: str
    block: str = ""
    phone: str = ""

    def __post_init__(self):
        if not self.resident_id:
            raise ValueError("resident_id must be non-empty.")
        if not self.name:
            raise ValueError("name must be non-empty.")
        if not self.unit_number:
            raise ValueError("unit_number must be non-empty.")

    def to_dict(self) -> dict:
        return {
            "resident_id": self.resident_id,
            "name": self.name,
            "unit_number": self.unit_number,
            "block": self.block,
            "phone": self.phone,
        }


class DirectoryProvider(Protocol):
    def lookup_resident(self, resident_id: str) -> Optional[ResidentProfile]:
        ...

    def list_residents(self) -> Tuple[ResidentProfile, ...]:
        ...


class InMemoryDirectory:
    """Deterministic directory used for bootstrap/tests."""

    def __init__(self, residents: Iterable[ResidentProfile] = ()):
        self._residents: dict[str, ResidentProfile] = {}
        for profile in residents:
            if profile.resident_id in self._residents:
                raise ValueError(f"Duplicate resident_id '{profile.resident_id}'.")
            self._residents[profile.resident_id] = profile

    def lookup_resident(self, resident_id: str) -> Optional[ResidentProfile]:
        return self._residents.get(resident_id)

    def list_residents(self) -> Tuple[ResidentProfile, ...]:
        return tuple(
            sorted(self._residents.values(), key=lambda p: (p.unit_number, p.name))
        )
