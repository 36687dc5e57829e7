"""
GATE Access Log Engine — Read Service
=======================================
access_log:read is held by security and super_admin only.
"""
from __future__ import annotations

from typing import List, Optional

from core.errors import Forbidden, ValidationError
from core.policy import Action, PolicyEngine, Resource
from engines.access_log.models import AccessLogEntry, AccessResult
from engines.access_log.projection import AccessLogProjection


class AccessLogService:
    def __init__(self, *, projection: AccessLogProjection, policy: PolicyEngine):
        self._projection = projection
        self._policy = policy

    def list_entries(
        self,
        actor,
        result=None,
        limit: Optional[int] = None,
    ) -> List[AccessLogEntry]:
        if not self._policy.authorize(actor, Resource.ACCESS_LOG, Action.READ):
            raise Forbidden("Not allowed to read the access log.")
        if result is not None:
            try:
                result = AccessResult(result)
            except ValueError:
                raise ValidationError(f"Unknown access result: {result!r}.", field="result")
        if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 0):
            raise ValidationError("limit must be a non-negative integer.", field="limit")
        return self._projection.entries(result=result, limit=limit)
