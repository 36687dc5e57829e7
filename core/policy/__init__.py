"""
GATE Policy Engine — Public API
=================================
Role-based permission matrix with ownership scoping.
"""

from core.policy.engine import AccessContext, PolicyEngine, authorize
from core.policy.grants import DEFAULT_GRANTS, Action, Resource, Scope

__all__ = [
    "AccessContext",
    "PolicyEngine",
    "authorize",
    "DEFAULT_GRANTS",
    "Action",
    "Resource",
    "Scope",
]
