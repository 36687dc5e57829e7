"""
GATE Policy Engine — Authorization Decisions
==============================================
Pure, stateless, deterministic.

    authorize(principal, resource, action, context) -> bool

The engine does NOT:
- Raise for a denial (denial is False; callers raise Forbidden)
- Persist anything
- Read the clock
- Consult the resident directory

Ownership facts come from the AccessContext the caller builds from
the record being acted upon. Attribute rules layered on the grant
table:
- A principal may never delete its own user account.
- Only super_admin may create or update an account holding the
  super_admin role.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from core.identity.principal import Principal, Role
from core.policy.grants import (
    DEFAULT_GRANTS,
    Action,
    GrantTable,
    Resource,
    Scope,
)

logger = logging.getLogger("gate.policy")


@dataclass(frozen=True)
class AccessContext:
    """
    Ownership facts about the target record.

    Fields:
        owner_id:       Resident who owns the record (credential owner,
                        delivery resident).
        unit_number:    Unit the record belongs to.
        target_user_id: Account being created/updated/deleted.
        target_role:    Role the target account holds or will hold.
    """

    owner_id: Optional[str] = None
    unit_number: Optional[str] = None
    target_user_id: Optional[str] = None
    target_role: Optional[str] = None


class PolicyEngine:
    """
    Grant-table lookup wrapped in a class for dependency injection.

    Usage:
        policy = PolicyEngine()
        if not policy.authorize(principal, Resource.DELIVERY, Action.RESOLVE):
            raise Forbidden(...)
    """

    def __init__(self, grants: GrantTable = DEFAULT_GRANTS):
        self._grants = grants

    def scope_for(self, principal, resource, action) -> Optional[str]:
        """
        Return the granted Scope for the triple, or None if the role
        holds no grant at all. Used by list paths to filter records.
        """
        if not isinstance(principal, Principal):
            return None
        try:
            resource = Resource(resource)
            action = Action(action)
        except ValueError:
            return None
        return self._grants.get(principal.role, {}).get(resource, {}).get(action)

    def authorize(
        self,
        principal,
        resource,
        action,
        context: Optional[AccessContext] = None,
    ) -> bool:
        scope = self.scope_for(principal, resource, action)
        allowed = scope is not None and self._check(
            principal, Resource(resource), Action(action), scope, context
        )
        if not allowed:
            logger.debug(
                "Denied %s:%s for %s",
                getattr(resource, "value", resource),
                getattr(action, "value", action),
                principal.principal_id if isinstance(principal, Principal) else "anonymous",
            )
        return allowed

    @staticmethod
    def _check(
        principal: Principal,
        resource: Resource,
        action: Action,
        scope: str,
        context: Optional[AccessContext],
    ) -> bool:
        if resource == Resource.USER and context is not None:
            if action == Action.DELETE and context.target_user_id == principal.principal_id:
                return False
            if (
                action in (Action.CREATE, Action.UPDATE)
                and context.target_role == Role.SUPER_ADMIN.value
                and principal.role != Role.SUPER_ADMIN
            ):
                return False

        if scope == Scope.ANY:
            return True

        if context is None:
            return False

        if context.owner_id is not None and context.owner_id == principal.principal_id:
            return True

        if scope == Scope.OWN_UNIT:
            return (
                context.unit_number is not None
                and context.unit_number == principal.unit_number
            )

        return False


_default_engine = PolicyEngine()


def authorize(
    principal,
    resource,
    action,
    context: Optional[AccessContext] = None,
) -> bool:
    """Convenience: evaluate against the default grant table."""
    return _default_engine.authorize(principal, resource, action, context)
