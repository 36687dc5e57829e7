"""
GATE Policy — Permission Grant Table
======================================
The single declarative role → resource → action table.
Every read and write path in the engine asks the Policy Engine,
and the Policy Engine answers only from this table.

Scopes:
    ANY       — any record of the resource.
    OWN       — only records whose owner is the principal.
    OWN_UNIT  — own records, or records of the principal's unit.

A (role, resource, action) triple absent from the table is denied.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType
from typing import Mapping

from core.identity.principal import Role


class Resource(str, Enum):
    GUEST_CREDENTIAL = "guest_credential"
    DELIVERY = "delivery"
    RESIDENT = "resident"
    USER = "user"
    ACCESS_LOG = "access_log"
    NOTIFICATION = "notification"


class Action(str, Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    REVOKE = "revoke"
    CANCEL = "cancel"
    DELETE = "delete"
    RESOLVE = "resolve"
    CONSUME = "consume"


class Scope:
    ANY = "ANY"
    OWN = "OWN"
    OWN_UNIT = "OWN_UNIT"

    ALL = frozenset({"ANY", "OWN", "OWN_UNIT"})


GrantTable = Mapping[Role, Mapping[Resource, Mapping[Action, str]]]


def _freeze(table: dict) -> GrantTable:
    return MappingProxyType({
        role: MappingProxyType({
            resource: MappingProxyType(dict(actions))
            for resource, actions in resources.items()
        })
        for role, resources in table.items()
    })


_OWN_NOTIFICATIONS = {
    Action.READ: Scope.OWN,
    Action.UPDATE: Scope.OWN,
    Action.DELETE: Scope.OWN,
}

DEFAULT_GRANTS: GrantTable = _freeze({
    Role.RESIDENT: {
        Resource.GUEST_CREDENTIAL: {
            Action.CREATE: Scope.OWN,
            Action.READ: Scope.OWN,
            Action.REVOKE: Scope.OWN,
        },
        Resource.DELIVERY: {
            Action.CREATE: Scope.OWN,
            Action.CANCEL: Scope.OWN,
            Action.READ: Scope.OWN_UNIT,
        },
        Resource.NOTIFICATION: _OWN_NOTIFICATIONS,
    },
    Role.ADMIN: {
        Resource.GUEST_CREDENTIAL: {
            Action.CREATE: Scope.ANY,
            Action.READ: Scope.ANY,
            Action.REVOKE: Scope.ANY,
        },
        Resource.DELIVERY: {
            Action.CREATE: Scope.ANY,
            Action.CANCEL: Scope.ANY,
            Action.READ: Scope.ANY,
        },
        Resource.RESIDENT: {
            Action.READ: Scope.ANY,
        },
        Resource.USER: {
            Action.CREATE: Scope.ANY,
            Action.READ: Scope.ANY,
            Action.UPDATE: Scope.ANY,
            Action.DELETE: Scope.ANY,
        },
        Resource.NOTIFICATION: _OWN_NOTIFICATIONS,
    },
    Role.SECURITY: {
        Resource.GUEST_CREDENTIAL: {
            Action.READ: Scope.ANY,
            Action.CONSUME: Scope.ANY,
        },
        Resource.DELIVERY: {
            Action.RESOLVE: Scope.ANY,
            Action.READ: Scope.ANY,
        },
        Resource.RESIDENT: {
            Action.READ: Scope.ANY,
        },
        Resource.ACCESS_LOG: {
            Action.READ: Scope.ANY,
        },
        Resource.NOTIFICATION: _OWN_NOTIFICATIONS,
    },
    Role.SUPER_ADMIN: {
        Resource.GUEST_CREDENTIAL: {
            Action.CREATE: Scope.ANY,
            Action.READ: Scope.ANY,
            Action.REVOKE: Scope.ANY,
            Action.CONSUME: Scope.ANY,
        },
        Resource.DELIVERY: {
            Action.CREATE: Scope.ANY,
            Action.CANCEL: Scope.ANY,
            Action.RESOLVE: Scope.ANY,
            Action.READ: Scope.ANY,
        },
        Resource.RESIDENT: {
            Action.READ: Scope.ANY,
        },
        Resource.USER: {
            Action.CREATE: Scope.ANY,
            Action.READ: Scope.ANY,
            Action.UPDATE: Scope.ANY,
            Action.DELETE: Scope.ANY,
        },
        Resource.ACCESS_LOG: {
            Action.READ: Scope.ANY,
        },
        Resource.NOTIFICATION: _OWN_NOTIFICATIONS,
    },
})
