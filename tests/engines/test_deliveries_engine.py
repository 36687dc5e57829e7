"""
Tests for engines.deliveries — authorize, resolve, cancel, overdue.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.directory import InMemoryDirectory, ResidentProfile
from core.errors import AlreadyTerminal, Forbidden, InvalidTransition, NotFound, ValidationError
from core.events import EventEmitter, InMemoryNotificationSink
from core.identity import Principal, Role
from core.policy import PolicyEngine
from core.time import FixedClock
from engines.deliveries.events import (
    DELIVERY_AUTHORIZED_V1,
    DELIVERY_CANCELLED_V1,
    DELIVERY_RESOLVED_V1,
)
from engines.deliveries.models import DeliveryStatus
from engines.deliveries.policies import DELIVERY_WORKFLOW, sort_key
from engines.deliveries.services import DeliveryWorkflowManager
from engines.deliveries.store import InMemoryDeliveryStore

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
YESTERDAY = T0 - timedelta(days=1)
TOMORROW = T0 + timedelta(days=1)

RESIDENT = Principal("res-1", Role.RESIDENT, unit_number="A-101")
NEIGHBOUR = Principal("res-2", Role.RESIDENT, unit_number="A-101")
OTHER_UNIT = Principal("res-3", Role.RESIDENT, unit_number="B-202")
ADMIN = Principal("adm-1", Role.ADMIN)
SECURITY = Principal("sec-1", Role.SECURITY)
SUPER = Principal("sup-1", Role.SUPER_ADMIN)

DIRECTORY = InMemoryDirectory([
    ResidentProfile("res-1", "Ana Lima", "A-101"),
    ResidentProfile("res-3", "Caio Reis", "B-202"),
])


def _manager(clock=None, sink=None, directory=DIRECTORY):
    return DeliveryWorkflowManager(
        store=InMemoryDeliveryStore(),
        policy=PolicyEngine(),
        clock=clock or FixedClock(T0),
        emitter=EventEmitter(sink=sink or InMemoryNotificationSink()),
        directory=directory,
    )


# ══════════════════════════════════════════════════════════════
# AUTHORIZE
# ══════════════════════════════════════════════════════════════

class TestAuthorize:
    def test_resident_authorizes_own(self):
        sink = InMemoryNotificationSink()
        delivery = _manager(sink=sink).authorize(
            RESIDENT, company=" FastShip ", expected_date=TOMORROW, tracking_number="TRK-1"
        )
        assert delivery.resident_id == "res-1"
        assert delivery.unit_number == "A-101"
        assert delivery.delivery_company == "FastShip"
        assert delivery.status == DeliveryStatus.AUTHORIZED
        assert delivery.authorized_at == T0
        assert delivery.delivered_at is None
        (event,) = sink.of_type(DELIVERY_AUTHORIZED_V1)
        assert event.record_id == delivery.delivery_id

    def test_past_expected_date_allowed(self):
        delivery = _manager().authorize(RESIDENT, company="FastShip", expected_date=YESTERDAY)
        assert delivery.expected_date == YESTERDAY

    def test_empty_company_rejected(self):
        with pytest.raises(ValidationError) as info:
            _manager().authorize(RESIDENT, company="   ", expected_date=TOMORROW)
        assert info.value.field == "company"

    def test_naive_expected_date_rejected(self):
        with pytest.raises(ValidationError) as info:
            _manager().authorize(RESIDENT, company="FastShip", expected_date=datetime(2026, 3, 2))
        assert info.value.field == "expected_date"

    def test_resident_cannot_authorize_for_others(self):
        with pytest.raises(Forbidden):
            _manager().authorize(
                RESIDENT, resident_id="res-3", company="FastShip", expected_date=TOMORROW
            )

    def test_security_cannot_authorize(self):
        with pytest.raises(Forbidden):
            _manager().authorize(
                SECURITY, resident_id="res-1", company="FastShip", expected_date=TOMORROW
            )

    def test_admin_unit_from_directory(self):
        delivery = _manager().authorize(
            ADMIN, resident_id="res-3", company="FastShip", expected_date=TOMORROW
        )
        assert delivery.unit_number == "B-202"
        assert delivery.authorized_by == "adm-1"

    def test_admin_explicit_unit_wins(self):
        delivery = _manager().authorize(
            ADMIN, resident_id="res-3", unit_number="C-1", company="FastShip",
            expected_date=TOMORROW,
        )
        assert delivery.unit_number == "C-1"

    def test_admin_unknown_resident_needs_unit(self):
        with pytest.raises(ValidationError) as info:
            _manager().authorize(
                ADMIN, resident_id="res-9", company="FastShip", expected_date=TOMORROW
            )
        assert info.value.field == "unit_number"

    def test_resident_claimed_unit_is_used(self):
        delivery = _manager().authorize(
            RESIDENT, unit_number="Z-9", company="FastShip", expected_date=TOMORROW
        )
        assert delivery.unit_number == "A-101"


# ══════════════════════════════════════════════════════════════
# RESOLVE / CANCEL
# ══════════════════════════════════════════════════════════════

class TestResolve:
    def test_overdue_scenario(self):
        manager = _manager()
        delivery = manager.authorize(
            ADMIN, resident_id="res-1", company="FastShip", expected_date=YESTERDAY
        )
        assert manager.is_overdue(delivery) is True

        resolved = manager.resolve(SECURITY, delivery.delivery_id, "delivered")

        assert resolved.status == DeliveryStatus.DELIVERED
        assert resolved.delivered_at == T0
        assert resolved.resolved_by == "sec-1"
        assert manager.is_overdue(resolved) is False
        assert DELIVERY_WORKFLOW.is_terminal(resolved.status.value)

    def test_failed_has_no_delivered_at(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        failed = manager.resolve(SUPER, delivery.delivery_id, DeliveryStatus.FAILED)
        assert failed.status == DeliveryStatus.FAILED
        assert failed.delivered_at is None

    @pytest.mark.parametrize("outcome", ["cancelled", "authorized", "lost"])
    def test_invalid_outcome(self, outcome):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        with pytest.raises(ValidationError) as info:
            manager.resolve(SECURITY, delivery.delivery_id, outcome)
        assert info.value.field == "outcome"

    @pytest.mark.parametrize("actor", [RESIDENT, ADMIN])
    def test_only_security_and_super_admin_resolve(self, actor):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        with pytest.raises(Forbidden):
            manager.resolve(actor, delivery.delivery_id, "delivered")

    @pytest.mark.parametrize("first", ["delivered", "failed"])
    @pytest.mark.parametrize("second", ["delivered", "failed"])
    def test_terminal_states_refuse_resolution(self, first, second):
        sink = InMemoryNotificationSink()
        manager = _manager(sink=sink)
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        settled = manager.resolve(SECURITY, delivery.delivery_id, first)

        with pytest.raises(InvalidTransition) as info:
            manager.resolve(SECURITY, delivery.delivery_id, second)

        assert info.value.from_state == first
        assert manager.get_delivery(ADMIN, delivery.delivery_id) == settled
        assert len(sink.of_type(DELIVERY_RESOLVED_V1)) == 1

    def test_cancelled_refuses_resolution(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        manager.cancel(RESIDENT, delivery.delivery_id)
        with pytest.raises(InvalidTransition):
            manager.resolve(SECURITY, delivery.delivery_id, "delivered")

    def test_unknown_delivery(self):
        with pytest.raises(NotFound):
            _manager().resolve(SECURITY, "missing", "delivered")


class TestCancel:
    def test_owner_cancels(self):
        sink = InMemoryNotificationSink()
        manager = _manager(sink=sink)
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)

        cancelled = manager.cancel(RESIDENT, delivery.delivery_id)

        assert cancelled.status == DeliveryStatus.CANCELLED
        assert cancelled.delivered_at is None
        assert cancelled.resolved_by == "res-1"
        assert len(sink.of_type(DELIVERY_CANCELLED_V1)) == 1

    def test_admin_cancels_any(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        assert manager.cancel(ADMIN, delivery.delivery_id).status == DeliveryStatus.CANCELLED

    @pytest.mark.parametrize("actor", [NEIGHBOUR, SECURITY])
    def test_others_cannot_cancel(self, actor):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        with pytest.raises(Forbidden):
            manager.cancel(actor, delivery.delivery_id)

    def test_cancel_twice_reports_already_terminal(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        manager.cancel(RESIDENT, delivery.delivery_id)
        with pytest.raises(AlreadyTerminal):
            manager.cancel(RESIDENT, delivery.delivery_id)

    def test_cancel_after_delivery_is_invalid(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        delivered = manager.resolve(SECURITY, delivery.delivery_id, "delivered")
        with pytest.raises(InvalidTransition):
            manager.cancel(RESIDENT, delivery.delivery_id)
        assert manager.get_delivery(RESIDENT, delivery.delivery_id) == delivered

    def test_unknown_delivery(self):
        with pytest.raises(NotFound):
            _manager().cancel(ADMIN, "missing")

    def test_anonymous_is_forbidden_whether_or_not_id_exists(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        for delivery_id in ("missing", delivery.delivery_id):
            with pytest.raises(Forbidden):
                manager.cancel(None, delivery_id)
        assert manager.get_delivery(RESIDENT, delivery.delivery_id).status == DeliveryStatus.AUTHORIZED

    def test_ungranted_role_is_forbidden_before_lookup(self):
        with pytest.raises(Forbidden):
            _manager().cancel(SECURITY, "missing")


# ══════════════════════════════════════════════════════════════
# OVERDUE / ORDERING / READ PATHS
# ══════════════════════════════════════════════════════════════

class TestOverdue:
    def test_boundary_is_strict(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=T0)
        assert manager.is_overdue(delivery, T0) is False
        assert manager.is_overdue(delivery, T0 + timedelta(microseconds=1)) is True

    def test_follows_the_clock(self):
        clock = FixedClock(T0)
        manager = _manager(clock=clock)
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        assert not manager.is_overdue(delivery)
        clock.advance(timedelta(days=2))
        assert manager.is_overdue(delivery)

    def test_cancelled_is_never_overdue(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=YESTERDAY)
        cancelled = manager.cancel(RESIDENT, delivery.delivery_id)
        assert manager.is_overdue(cancelled, T0 + timedelta(days=30)) is False


class TestListing:
    def _populate(self, manager):
        late = manager.authorize(RESIDENT, company="Late", expected_date=TOMORROW)
        early = manager.authorize(RESIDENT, company="Early", expected_date=YESTERDAY)
        done = manager.authorize(RESIDENT, company="Done", expected_date=YESTERDAY)
        manager.resolve(SECURITY, done.delivery_id, "delivered")
        gone = manager.authorize(RESIDENT, company="Gone", expected_date=YESTERDAY)
        manager.cancel(RESIDENT, gone.delivery_id)
        other = manager.authorize(OTHER_UNIT, company="Other", expected_date=TOMORROW)
        return late, early, done, gone, other

    def test_priority_then_expected_date(self):
        manager = _manager()
        self._populate(manager)

        listed = [d.delivery_company for d in manager.list_deliveries(ADMIN)]

        assert listed[0] == "Early"
        assert set(listed[1:3]) == {"Late", "Other"}
        assert listed[3] == "Done"
        assert listed[4] == "Gone"

    def test_sort_key_tuple(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        assert sort_key(delivery) == (0, TOMORROW)
        assert manager.delivery_view(delivery)["sort_key"] == [0, TOMORROW.isoformat()]

    def test_resident_sees_own_unit(self):
        manager = _manager()
        self._populate(manager)
        neighbour_view = manager.list_deliveries(NEIGHBOUR)
        assert {d.unit_number for d in neighbour_view} == {"A-101"}
        assert len(neighbour_view) == 4
        assert [d.delivery_company for d in manager.list_deliveries(OTHER_UNIT)] == ["Other"]

    def test_get_delivery_scoped_to_unit(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        assert manager.get_delivery(NEIGHBOUR, delivery.delivery_id) == delivery
        with pytest.raises(Forbidden):
            manager.get_delivery(OTHER_UNIT, delivery.delivery_id)

    def test_anonymous_listing_forbidden(self):
        with pytest.raises(Forbidden):
            _manager().list_deliveries(None)

    def test_get_delivery_anonymous_forbidden(self):
        manager = _manager()
        delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
        for delivery_id in ("missing", delivery.delivery_id):
            with pytest.raises(Forbidden):
                manager.get_delivery(None, delivery_id)

    def test_view_and_summary(self):
        manager = _manager()
        self._populate(manager)
        early = next(d for d in manager.list_deliveries(ADMIN) if d.delivery_company == "Early")

        view = manager.delivery_view(early)
        assert view["overdue"] is True
        assert view["resident_name"] == "Ana Lima"

        summary = manager.summarize_deliveries(ADMIN)
        assert summary == {
            "authorized": 3,
            "delivered": 1,
            "failed": 0,
            "cancelled": 1,
            "overdue": 1,
            "total": 5,
        }


# ══════════════════════════════════════════════════════════════
# CONCURRENCY
# ══════════════════════════════════════════════════════════════

def test_racing_resolve_and_cancel_settle_once():
    import threading
    from concurrent.futures import ThreadPoolExecutor

    manager = _manager()
    delivery = manager.authorize(RESIDENT, company="FastShip", expected_date=TOMORROW)
    barrier = threading.Barrier(8)

    def attempt(i):
        barrier.wait()
        try:
            if i % 2:
                return manager.resolve(SECURITY, delivery.delivery_id, "delivered")
            return manager.cancel(RESIDENT, delivery.delivery_id)
        except (InvalidTransition, AlreadyTerminal) as exc:
            return exc

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(attempt, range(8)))

    winners = [r for r in results if not isinstance(r, Exception)]
    assert len(winners) == 1
    final = manager.get_delivery(ADMIN, delivery.delivery_id)
    assert final == winners[0]
    assert final.version == 2
