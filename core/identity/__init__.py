"""
GATE Identity — Public API
============================
"""

from core.identity.principal import (
    PRIVILEGED_ROLES,
    ROLE_DISPLAY_NAMES,
    Principal,
    Role,
)

__all__ = [
    "Principal",
    "Role",
    "ROLE_DISPLAY_NAMES",
    "PRIVILEGED_ROLES",
]
