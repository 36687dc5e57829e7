"""
GATE Directory — Resident Read Path
=====================================
Role-gated view over the external directory (resident:read).
"""

from __future__ import annotations

import logging
from typing import Optional, Tuple

from core.directory.provider import DirectoryProvider, ResidentProfile
from core.errors import Forbidden, NotFound
from core.policy import Action, PolicyEngine, Resource

logger = logging.getLogger("gate.directory")


class ResidentDirectoryService:
    def __init__(self, *, directory: DirectoryProvider, policy: PolicyEngine):
        self._directory = directory
        self._policy = policy

    def _require_read(self, principal) -> None:
        if not self._policy.authorize(principal, Resource.RESIDENT, Action.READ):
            raise Forbidden("Not allowed to read the resident directory.")

    def list_residents(self, principal) -> Tuple[ResidentProfile, ...]:
        self._require_read(principal)
        return self._directory.list_residents()

    def get_resident(self, principal, resident_id: str) -> ResidentProfile:
        self._require_read(principal)
        profile = self._directory.lookup_resident(resident_id)
        if profile is None:
            raise NotFound("resident", resident_id)
        return profile


def display_enrichment(directory: Optional[DirectoryProvider], resident_id: str) -> dict:
    """
    Name/unit for display. Lookup failures degrade to an empty
    enrichment; display must not fail an operation.
    """
    if directory is None:
        return {}
    try:
        profile = directory.lookup_resident(resident_id)
    except Exception:
        logger.warning("Directory lookup failed for %s", resident_id, exc_info=True)
        return {}
    if profile is None:
        return {}
    return {"resident_name": profile.name, "resident_unit": profile.unit_number}
