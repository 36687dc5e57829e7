"""
GATE Guest Access Engine — Credential Lifecycle Manager
=========================================================
Issue → consume* → (used | expired | revoked)

Every mutation goes through the store's atomic primitives:
- issue:   create, regenerating PINs that collide with an active code
- consume: optimistic read-check-write; concurrent consumers of a
           single-use credential cannot both be accepted
- revoke:  optimistic read-check-write; terminal records report
           AlreadyTerminal

Events are emitted after the store write and never fail the operation.
"""
from __future__ import annotations

import logging
from collections import Counter
from datetime import datetime
from typing import Dict, List, Optional

from core.concurrency import Decision, apply_optimistic
from core.config import EngineConfig
from core.directory import DirectoryProvider, display_enrichment
from core.errors import AlreadyTerminal, CapacityExceeded, Forbidden, NotFound, ValidationError
from core.events import EventEmitter
from core.identity import Principal
from core.policy import AccessContext, Action, PolicyEngine, Resource, Scope
from core.time import Clock
from engines.guest_access.codes import CodeGenerator, mask_code
from engines.guest_access.commands import (
    ConsumeCredentialRequest,
    IssueCredentialRequest,
    RevokeCredentialRequest,
)
from engines.guest_access.events import (
    build_consumption_rejected_event,
    build_credential_consumed_event,
    build_credential_issued_event,
    build_credential_revoked_event,
)
from engines.guest_access.models import (
    TERMINAL_STATUSES,
    CodeType,
    ConsumptionOutcome,
    ConsumptionResult,
    CredentialStatus,
    GuestCredential,
)
from engines.guest_access.policies import compute_status, evaluate_consumption
from engines.guest_access.store import CredentialStore

logger = logging.getLogger("gate.guest_access")


class CredentialLifecycleManager:
    def __init__(
        self,
        *,
        store: CredentialStore,
        policy: PolicyEngine,
        clock: Clock,
        emitter: EventEmitter,
        config: Optional[EngineConfig] = None,
        codes: Optional[CodeGenerator] = None,
        directory: Optional[DirectoryProvider] = None,
    ):
        self._store = store
        self._policy = policy
        self._clock = clock
        self._emitter = emitter
        self._config = config or EngineConfig()
        self._codes = codes or CodeGenerator(
            pin_length=self._config.pin_length,
            qr_token_bytes=self._config.qr_token_bytes,
        )
        self._directory = directory

    # ── issue ─────────────────────────────────────────────────

    def issue(
        self,
        actor,
        *,
        guest_name: str,
        valid_until: datetime,
        owner_id: Optional[str] = None,
        code_type=CodeType.PIN,
        valid_from: Optional[datetime] = None,
        max_usage: int = 1,
        purpose: Optional[str] = None,
    ) -> GuestCredential:
        """
        Create a credential. owner_id defaults to the actor.
        Returns the stored credential including its plaintext code.
        """
        if owner_id is None:
            if not isinstance(actor, Principal):
                raise Forbidden("Authentication required.")
            owner_id = actor.principal_id
        request = IssueCredentialRequest(
            owner_id=owner_id,
            guest_name=guest_name,
            code_type=code_type,
            valid_from=valid_from,
            valid_until=valid_until,
            max_usage=max_usage,
            purpose=purpose,
        )
        return self.issue_request(actor, request)

    def issue_request(self, actor, request: IssueCredentialRequest) -> GuestCredential:
        if not self._policy.authorize(
            actor,
            Resource.GUEST_CREDENTIAL,
            Action.CREATE,
            AccessContext(owner_id=request.owner_id),
        ):
            raise Forbidden("Not allowed to issue guest credentials for this owner.")

        now = self._clock.now_utc()
        valid_from = request.valid_from or now
        if request.valid_until <= valid_from:
            raise ValidationError("valid_until must be after valid_from.", field="valid_until")
        if request.valid_until <= now:
            raise ValidationError("valid_until must be in the future.", field="valid_until")
        if request.max_usage > self._config.max_usage_limit:
            raise ValidationError(
                f"max_usage must be <= {self._config.max_usage_limit}.",
                field="max_usage",
            )

        credential_id = GuestCredential.new_id()
        for _ in range(self._config.pin_collision_retries):
            candidate = GuestCredential(
                credential_id=credential_id,
                owner_id=request.owner_id,
                guest_name=request.guest_name,
                code_type=request.code_type,
                code=self._codes.generate(request.code_type),
                valid_from=valid_from,
                valid_until=request.valid_until,
                max_usage=request.max_usage,
                created_at=now,
                purpose=request.purpose,
            )
            stored = self._store.create(candidate, as_of=now)
            if stored is not None:
                break
            logger.debug("Code collision while issuing %s; regenerating", credential_id)
        else:
            logger.warning(
                "Code space exhausted after %d attempts for owner %s",
                self._config.pin_collision_retries, request.owner_id,
            )
            raise CapacityExceeded(
                self._config.pin_collision_retries, code_type=request.code_type.value
            )

        logger.info(
            "Issued %s credential %s (code %s) for owner %s by %s",
            stored.code_type.value, stored.credential_id, mask_code(stored.code),
            stored.owner_id, actor.principal_id,
        )
        self._emitter.emit(build_credential_issued_event(stored, actor.principal_id, now))
        return stored

    # ── consume ───────────────────────────────────────────────

    def consume(self, actor, code: str, as_of: Optional[datetime] = None) -> ConsumptionResult:
        """
        Validate and redeem one use of `code`.

        Expected failures are outcomes, not errors:
        (None, REJECTED_NOT_FOUND), (credential, REJECTED_EXPIRED), ...
        """
        request = ConsumeCredentialRequest(code=code, as_of=as_of)

        if not self._policy.authorize(actor, Resource.GUEST_CREDENTIAL, Action.CONSUME):
            raise Forbidden("Not allowed to validate guest credentials.")

        as_of = request.as_of or self._clock.now_utc()
        found = self._store.find_by_code(request.code)

        if found is None:
            result = ConsumptionResult(None, ConsumptionOutcome.REJECTED_NOT_FOUND)
        else:
            def decide(current: Optional[GuestCredential]) -> Decision:
                outcome = evaluate_consumption(current, as_of)
                if outcome is not ConsumptionOutcome.ACCEPTED:
                    return Decision(None, outcome)
                return Decision(current.consumed(as_of), outcome)

            record, outcome = apply_optimistic(
                record_id=found.credential_id,
                load=lambda: self._store.get(found.credential_id),
                decide=decide,
                swap=lambda current, replacement: self._store.compare_and_swap(
                    current.version, replacement
                ),
                attempts=self._config.cas_retry_attempts,
            )
            result = ConsumptionResult(record, outcome)

        self._announce_consumption(result, actor, as_of, request.code)
        return result

    def _announce_consumption(
        self, result: ConsumptionResult, actor, as_of: datetime, code: str
    ) -> None:
        credential, outcome = result
        if outcome is ConsumptionOutcome.ACCEPTED:
            logger.info(
                "Accepted credential %s (%d/%d) by %s",
                credential.credential_id, credential.usage_count,
                credential.max_usage, actor.principal_id,
            )
            event = build_credential_consumed_event(credential, actor.principal_id, as_of)
        else:
            logger.info(
                "Rejected code %s: %s (by %s)",
                mask_code(code), outcome.value, actor.principal_id,
            )
            event = build_consumption_rejected_event(
                credential, outcome, actor.principal_id, as_of,
                code_type=_guess_code_type(code),
            )
        self._emitter.emit(event)

    # ── revoke ────────────────────────────────────────────────

    def revoke(self, actor, credential_id: str) -> GuestCredential:
        request = RevokeCredentialRequest(credential_id=credential_id)
        self._require_grant(actor, Action.REVOKE, "revoke guest credentials")

        existing = self._store.get(request.credential_id)
        if existing is None:
            raise NotFound("guest_credential", request.credential_id)

        if not self._policy.authorize(
            actor,
            Resource.GUEST_CREDENTIAL,
            Action.REVOKE,
            AccessContext(owner_id=existing.owner_id),
        ):
            raise Forbidden("Not allowed to revoke this credential.")

        now = self._clock.now_utc()

        def decide(current: Optional[GuestCredential]) -> Decision:
            if current is None:
                raise NotFound("guest_credential", request.credential_id)
            status = compute_status(current, now)
            if status in TERMINAL_STATUSES:
                raise AlreadyTerminal(current.credential_id, status.value)
            return Decision(current.revoked(now, actor.principal_id))

        revoked, _ = apply_optimistic(
            record_id=request.credential_id,
            load=lambda: self._store.get(request.credential_id),
            decide=decide,
            swap=lambda current, replacement: self._store.compare_and_swap(
                current.version, replacement
            ),
            attempts=self._config.cas_retry_attempts,
        )

        logger.info("Revoked credential %s by %s", revoked.credential_id, actor.principal_id)
        self._emitter.emit(build_credential_revoked_event(revoked, actor.principal_id, now))
        return revoked

    # ── read paths ────────────────────────────────────────────

    def _require_grant(self, actor, action: Action, what: str) -> None:
        """Refuse callers with no grant at all before touching the store."""
        if self._policy.scope_for(actor, Resource.GUEST_CREDENTIAL, action) is None:
            raise Forbidden(f"Not allowed to {what}.")

    def compute_status(
        self, credential: GuestCredential, as_of: Optional[datetime] = None
    ) -> CredentialStatus:
        return compute_status(credential, as_of or self._clock.now_utc())

    def get_credential(self, actor, credential_id: str) -> GuestCredential:
        self._require_grant(actor, Action.READ, "read guest credentials")
        credential = self._store.get(credential_id)
        if credential is None:
            raise NotFound("guest_credential", credential_id)
        if not self._policy.authorize(
            actor,
            Resource.GUEST_CREDENTIAL,
            Action.READ,
            AccessContext(owner_id=credential.owner_id),
        ):
            raise Forbidden("Not allowed to read this credential.")
        return credential

    def list_credentials(self, actor) -> List[GuestCredential]:
        """Newest first. Residents see their own credentials only."""
        scope = self._policy.scope_for(actor, Resource.GUEST_CREDENTIAL, Action.READ)
        if scope is None:
            raise Forbidden("Not allowed to read guest credentials.")
        if scope == Scope.ANY:
            return list(self._store.list_all())
        return list(self._store.list_by_owner(actor.principal_id))

    def credential_view(
        self, credential: GuestCredential, actor, as_of: Optional[datetime] = None
    ) -> Dict:
        """
        Read-path rendering. The plaintext code is shown to the owner
        and to admin/super_admin only.
        """
        as_of = as_of or self._clock.now_utc()
        reveal = actor.principal_id == credential.owner_id or actor.is_privileged
        view = {
            "credential_id": credential.credential_id,
            "owner_id":      credential.owner_id,
            "guest_name":    credential.guest_name,
            "code_type":     credential.code_type.value,
            "code":          credential.code if reveal else mask_code(credential.code),
            "valid_from":    credential.valid_from.isoformat(),
            "valid_until":   credential.valid_until.isoformat(),
            "max_usage":     credential.max_usage,
            "usage_count":   credential.usage_count,
            "status":        compute_status(credential, as_of).value,
            "purpose":       credential.purpose,
            "created_at":    credential.created_at.isoformat(),
            "revoked_at":    credential.revoked_at.isoformat() if credential.revoked_at else None,
            "last_used_at":  credential.last_used_at.isoformat() if credential.last_used_at else None,
        }
        view.update(display_enrichment(self._directory, credential.owner_id))
        return view

    def summarize_credentials(self, actor, as_of: Optional[datetime] = None) -> Dict[str, int]:
        as_of = as_of or self._clock.now_utc()
        counts = Counter(
            compute_status(c, as_of).value for c in self.list_credentials(actor)
        )
        summary = {status.value: counts.get(status.value, 0) for status in CredentialStatus}
        summary["total"] = sum(counts.values())
        return summary


def _guess_code_type(code: str) -> str:
    return CodeType.PIN.value if code.isdigit() else CodeType.QR.value
