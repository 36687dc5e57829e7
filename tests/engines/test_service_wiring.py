"""
Tests for engines.wiring — assembled services share one emitter.
"""

from datetime import datetime, timedelta, timezone

import pytest

from core.config import EngineConfig
from core.directory import InMemoryDirectory, ResidentProfile
from core.events import InMemoryNotificationSink
from core.identity import Principal, Role
from core.time import FixedClock
from engines.wiring import PERSISTENCE_DJANGO, build_services

T0 = datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc)
RESIDENT = Principal("res-1", Role.RESIDENT, unit_number="A-101")
SECURITY = Principal("sec-1", Role.SECURITY)


def test_in_memory_services_end_to_end():
    sink = InMemoryNotificationSink()
    services = build_services(
        config=EngineConfig(async_notifications=False),
        clock=FixedClock(T0),
        sink=sink,
        directory=InMemoryDirectory([ResidentProfile("res-1", "Ana Lima", "A-101")]),
    )

    cred = services.credentials.issue(
        RESIDENT, guest_name="Ana", valid_until=T0 + timedelta(hours=1)
    )
    services.credentials.consume(SECURITY, cred.code)
    delivery = services.deliveries.authorize(RESIDENT, company="FastShip", expected_date=T0)

    assert [e.outcome for e in services.access_log.list_entries(SECURITY)] == ["accepted"]
    assert services.residents.get_resident(SECURITY, "res-1").name == "Ana Lima"
    assert services.deliveries.get_delivery(RESIDENT, delivery.delivery_id) == delivery
    assert [e.event_type for e in sink.events] == [
        "guest.credential.issued.v1",
        "guest.credential.consumed.v1",
        "delivery.parcel.authorized.v1",
    ]
    assert services.executor is None


def test_async_notifications_use_executor():
    sink = InMemoryNotificationSink()
    services = build_services(
        config=EngineConfig(async_notifications=True),
        clock=FixedClock(T0),
        sink=sink,
    )
    try:
        services.credentials.issue(RESIDENT, guest_name="Ana", valid_until=T0 + timedelta(hours=1))
    finally:
        services.shutdown(wait=True)
    assert len(sink.events) == 1


def test_unknown_persistence_rejected():
    with pytest.raises(ValueError):
        build_services(persistence="redis", config=EngineConfig(async_notifications=False))


@pytest.mark.django_db(transaction=True)
def test_django_persistence():
    services = build_services(
        persistence=PERSISTENCE_DJANGO,
        config=EngineConfig(async_notifications=False),
        clock=FixedClock(T0),
    )
    cred = services.credentials.issue(
        RESIDENT, guest_name="Ana", valid_until=T0 + timedelta(hours=1)
    )
    assert services.credentials.get_credential(RESIDENT, cred.credential_id) == cred
