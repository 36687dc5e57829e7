"""
GATE Deliveries Engine — Delivery Workflow Manager
====================================================
authorized ──► delivered | failed   (resolve: security, super_admin)
           └─► cancelled            (cancel: owning resident, admin, super_admin)

No transition leaves a terminal state. Overdue is a derived flag.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

from core.concurrency import Decision, apply_optimistic
from core.config import EngineConfig
from core.directory import DirectoryProvider, display_enrichment
from core.errors import AlreadyTerminal, Forbidden, InvalidTransition, NotFound, ValidationError
from core.events import EventEmitter
from core.identity import Principal, Role
from core.policy import AccessContext, Action, PolicyEngine, Resource, Scope
from core.time import Clock
from engines.deliveries.commands import (
    AuthorizeDeliveryRequest,
    CancelDeliveryRequest,
    ResolveDeliveryRequest,
)
from engines.deliveries.events import (
    build_delivery_authorized_event,
    build_delivery_cancelled_event,
    build_delivery_resolved_event,
)
from engines.deliveries.models import Delivery, DeliveryStatus
from engines.deliveries.policies import can_transition, is_overdue, sort_key
from engines.deliveries.store import DeliveryStore

logger = logging.getLogger("gate.deliveries")


class DeliveryWorkflowManager:
    def __init__(
        self,
        *,
        store: DeliveryStore,
        policy: PolicyEngine,
        clock: Clock,
        emitter: EventEmitter,
        config: Optional[EngineConfig] = None,
        directory: Optional[DirectoryProvider] = None,
    ):
        self._store = store
        self._policy = policy
        self._clock = clock
        self._emitter = emitter
        self._config = config or EngineConfig()
        self._directory = directory

    # ── authorize ─────────────────────────────────────────────

    def authorize(
        self,
        actor,
        *,
        company: str,
        expected_date: datetime,
        resident_id: Optional[str] = None,
        unit_number: Optional[str] = None,
        tracking_number: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Delivery:
        """
        Pre-authorize a delivery. resident_id defaults to the actor.
        expected_date may be in the past (same-day logging).
        """
        if resident_id is None:
            if not isinstance(actor, Principal):
                raise Forbidden("Authentication required.")
            resident_id = actor.principal_id
        request = AuthorizeDeliveryRequest(
            resident_id=resident_id,
            company=company,
            expected_date=expected_date,
            unit_number=unit_number,
            tracking_number=tracking_number,
            notes=notes,
        )
        return self.authorize_request(actor, request)

    def authorize_request(self, actor, request: AuthorizeDeliveryRequest) -> Delivery:
        if not self._policy.authorize(
            actor,
            Resource.DELIVERY,
            Action.CREATE,
            AccessContext(owner_id=request.resident_id),
        ):
            raise Forbidden("Not allowed to authorize deliveries for this resident.")

        unit_number = self._resolve_unit(actor, request)
        now = self._clock.now_utc()
        stored = self._store.create(Delivery(
            delivery_id=Delivery.new_id(),
            resident_id=request.resident_id,
            unit_number=unit_number,
            delivery_company=request.company,
            expected_date=request.expected_date,
            authorized_at=now,
            authorized_by=actor.principal_id,
            tracking_number=request.tracking_number,
            notes=request.notes,
        ))

        logger.info(
            "Authorized delivery %s from %s for unit %s by %s",
            stored.delivery_id, stored.delivery_company, stored.unit_number, actor.principal_id,
        )
        self._emitter.emit(build_delivery_authorized_event(stored, actor.principal_id, now))
        return stored

    def _resolve_unit(self, actor: Principal, request: AuthorizeDeliveryRequest) -> str:
        # A resident's own claimed unit always wins over the request.
        if actor.role == Role.RESIDENT:
            return actor.unit_number
        if request.unit_number:
            return request.unit_number
        profile = self._directory.lookup_resident(request.resident_id) if self._directory else None
        if profile is None:
            raise ValidationError(
                "unit_number is required when the resident is not in the directory.",
                field="unit_number",
            )
        return profile.unit_number

    # ── resolve / cancel ──────────────────────────────────────

    def resolve(self, actor, delivery_id: str, outcome) -> Delivery:
        """Mark an authorized delivery delivered or failed."""
        request = ResolveDeliveryRequest(delivery_id=delivery_id, outcome=outcome)

        if not self._policy.authorize(actor, Resource.DELIVERY, Action.RESOLVE):
            raise Forbidden("Not allowed to resolve deliveries.")

        now = self._clock.now_utc()

        def decide(current: Optional[Delivery]) -> Decision:
            if current is None:
                raise NotFound("delivery", request.delivery_id)
            if not can_transition(current, request.outcome):
                raise InvalidTransition(
                    current.delivery_id, current.status.value, request.outcome.value
                )
            return Decision(current.resolved(request.outcome, now, actor.principal_id))

        resolved = self._transition(request.delivery_id, decide)
        logger.info(
            "Resolved delivery %s as %s by %s",
            resolved.delivery_id, resolved.status.value, actor.principal_id,
        )
        self._emitter.emit(build_delivery_resolved_event(resolved, actor.principal_id, now))
        return resolved

    def cancel(self, actor, delivery_id: str) -> Delivery:
        """
        Cancel an authorized delivery. A delivery that is already
        cancelled reports AlreadyTerminal; delivered/failed report
        InvalidTransition.
        """
        request = CancelDeliveryRequest(delivery_id=delivery_id)
        self._require_grant(actor, Action.CANCEL, "cancel deliveries")

        existing = self._store.get(request.delivery_id)
        if existing is None:
            raise NotFound("delivery", request.delivery_id)
        if not self._policy.authorize(
            actor,
            Resource.DELIVERY,
            Action.CANCEL,
            AccessContext(owner_id=existing.resident_id),
        ):
            raise Forbidden("Not allowed to cancel this delivery.")

        now = self._clock.now_utc()

        def decide(current: Optional[Delivery]) -> Decision:
            if current is None:
                raise NotFound("delivery", request.delivery_id)
            if current.status == DeliveryStatus.CANCELLED:
                raise AlreadyTerminal(current.delivery_id, current.status.value)
            if not can_transition(current, DeliveryStatus.CANCELLED):
                raise InvalidTransition(
                    current.delivery_id, current.status.value, DeliveryStatus.CANCELLED.value
                )
            return Decision(current.resolved(DeliveryStatus.CANCELLED, now, actor.principal_id))

        cancelled = self._transition(request.delivery_id, decide)
        logger.info("Cancelled delivery %s by %s", cancelled.delivery_id, actor.principal_id)
        self._emitter.emit(build_delivery_cancelled_event(cancelled, actor.principal_id, now))
        return cancelled

    def _transition(self, delivery_id: str, decide) -> Delivery:
        record, _ = apply_optimistic(
            record_id=delivery_id,
            load=lambda: self._store.get(delivery_id),
            decide=decide,
            swap=lambda current, replacement: self._store.compare_and_swap(
                current.version, replacement
            ),
            attempts=self._config.cas_retry_attempts,
        )
        return record

    # ── read paths ────────────────────────────────────────────

    def _require_grant(self, actor, action: Action, what: str) -> None:
        """Refuse callers with no grant at all before touching the store."""
        if self._policy.scope_for(actor, Resource.DELIVERY, action) is None:
            raise Forbidden(f"Not allowed to {what}.")

    def is_overdue(self, delivery: Delivery, as_of: Optional[datetime] = None) -> bool:
        return is_overdue(delivery, as_of or self._clock.now_utc())

    def get_delivery(self, actor, delivery_id: str) -> Delivery:
        self._require_grant(actor, Action.READ, "read deliveries")
        delivery = self._store.get(delivery_id)
        if delivery is None:
            raise NotFound("delivery", delivery_id)
        if not self._policy.authorize(
            actor,
            Resource.DELIVERY,
            Action.READ,
            AccessContext(owner_id=delivery.resident_id, unit_number=delivery.unit_number),
        ):
            raise Forbidden("Not allowed to read this delivery.")
        return delivery

    def list_deliveries(self, actor) -> List[Delivery]:
        """Ordered by sort_key; residents see their own unit only."""
        scope = self._policy.scope_for(actor, Resource.DELIVERY, Action.READ)
        if scope is None:
            raise Forbidden("Not allowed to read deliveries.")
        deliveries = list(self._store.list_all())
        if scope != Scope.ANY:
            deliveries = [
                d for d in deliveries
                if self._policy.authorize(
                    actor,
                    Resource.DELIVERY,
                    Action.READ,
                    AccessContext(owner_id=d.resident_id, unit_number=d.unit_number),
                )
            ]
        return sorted(deliveries, key=lambda d: (sort_key(d), d.delivery_id))

    def delivery_view(self, delivery: Delivery, as_of: Optional[datetime] = None) -> Dict:
        as_of = as_of or self._clock.now_utc()
        view = {
            "delivery_id":      delivery.delivery_id,
            "resident_id":      delivery.resident_id,
            "unit_number":      delivery.unit_number,
            "delivery_company": delivery.delivery_company,
            "tracking_number":  delivery.tracking_number,
            "expected_date":    delivery.expected_date.isoformat(),
            "notes":            delivery.notes,
            "status":           delivery.status.value,
            "overdue":          is_overdue(delivery, as_of),
            "authorized_at":    delivery.authorized_at.isoformat(),
            "delivered_at":     delivery.delivered_at.isoformat() if delivery.delivered_at else None,
            "resolved_by":      delivery.resolved_by,
            "sort_key":         [sort_key(delivery)[0], delivery.expected_date.isoformat()],
        }
        view.update(display_enrichment(self._directory, delivery.resident_id))
        return view

    def summarize_deliveries(self, actor, as_of: Optional[datetime] = None) -> Dict[str, int]:
        as_of = as_of or self._clock.now_utc()
        deliveries = self.list_deliveries(actor)
        counts = Counter(d.status.value for d in deliveries)
        summary = {status.value: counts.get(status.value, 0) for status in DeliveryStatus}
        summary["overdue"] = sum(1 for d in deliveries if is_overdue(d, as_of))
        summary["total"] = len(deliveries)
        return summary
