"""
GATE Wiring — Service Assembly
================================
Builds one consistent set of services around a shared clock, policy
engine and event emitter.

    services = build_services()                       # in-memory
    services = build_services(persistence="django")   # ORM stores

The access-log projection is subscribed to the emitter here, so every
consumption attempt lands in the log whichever store is used.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from core.config import EngineConfig, load_engine_config
from core.directory import DirectoryProvider, InMemoryDirectory, ResidentDirectoryService
from core.events import EventEmitter, NotificationSink, NullNotificationSink
from core.policy import PolicyEngine
from core.time import Clock, get_default_clock
from engines.access_log.projection import AccessLogProjection
from engines.access_log.services import AccessLogService
from engines.deliveries.services import DeliveryWorkflowManager
from engines.deliveries.store import InMemoryDeliveryStore
from engines.guest_access.services import CredentialLifecycleManager
from engines.guest_access.store import InMemoryCredentialStore

logger = logging.getLogger("gate.wiring")

PERSISTENCE_MEMORY = "memory"
PERSISTENCE_DJANGO = "django"


@dataclass(frozen=True)
class GateServices:
    credentials: CredentialLifecycleManager
    deliveries: DeliveryWorkflowManager
    access_log: AccessLogService
    residents: ResidentDirectoryService
    emitter: EventEmitter
    executor: Optional[Executor] = None

    def shutdown(self, wait: bool = True) -> None:
        """Stop the notification executor, if one was created."""
        if self.executor is not None:
            self.executor.shutdown(wait=wait)


def build_services(
    *,
    persistence: str = PERSISTENCE_MEMORY,
    config: Optional[EngineConfig] = None,
    clock: Optional[Clock] = None,
    sink: Optional[NotificationSink] = None,
    directory: Optional[DirectoryProvider] = None,
    policy: Optional[PolicyEngine] = None,
) -> GateServices:
    config = config or load_engine_config()
    clock = clock or get_default_clock()
    policy = policy or PolicyEngine()
    directory = directory or InMemoryDirectory()

    executor = (
        ThreadPoolExecutor(max_workers=2, thread_name_prefix="gate-notify")
        if config.async_notifications
        else None
    )
    emitter = EventEmitter(sink=sink or NullNotificationSink(), executor=executor)

    projection = AccessLogProjection(capacity=config.access_log_capacity)
    projection.subscribe(emitter.registry)

    if persistence == PERSISTENCE_MEMORY:
        credential_store = InMemoryCredentialStore()
        delivery_store = InMemoryDeliveryStore()
    elif persistence == PERSISTENCE_DJANGO:
        from core.access_store.repository import DjangoCredentialStore, DjangoDeliveryStore

        credential_store = DjangoCredentialStore()
        delivery_store = DjangoDeliveryStore()
    else:
        raise ValueError(f"Unknown persistence backend: {persistence!r}")

    logger.info(
        "Assembled gate services (persistence=%s, async_notifications=%s)",
        persistence, config.async_notifications,
    )
    return GateServices(
        credentials=CredentialLifecycleManager(
            store=credential_store,
            policy=policy,
            clock=clock,
            emitter=emitter,
            config=config,
            directory=directory,
        ),
        deliveries=DeliveryWorkflowManager(
            store=delivery_store,
            policy=policy,
            clock=clock,
            emitter=emitter,
            config=config,
            directory=directory,
        ),
        access_log=AccessLogService(projection=projection, policy=policy),
        residents=ResidentDirectoryService(directory=directory, policy=policy),
        emitter=emitter,
        executor=executor,
    )
