"""
GATE Guest Access Engine — Credential Store
=============================================
The ONLY component that mutates credential records.

Atomic primitives:
    create(credential, as_of)       — insert unless an ACTIVE credential
                                      already holds the same code
    compare_and_swap(version, new)  — write iff the stored version still
                                      equals `version`; bumps version

Records are never deleted.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Dict, Optional, Protocol, Tuple

from core.concurrency import KeyedLocks
from engines.guest_access.models import GuestCredential
from engines.guest_access.policies import holds_code


class CredentialStore(Protocol):
    def create(self, credential: GuestCredential, *, as_of: datetime) -> Optional[GuestCredential]:
        """Stored record, or None if the code is held by an active credential."""
        ...

    def get(self, credential_id: str) -> Optional[GuestCredential]:
        ...

    def find_by_code(self, code: str) -> Optional[GuestCredential]:
        """Most recently issued credential carrying `code`."""
        ...

    def compare_and_swap(
        self, expected_version: int, replacement: GuestCredential
    ) -> Optional[GuestCredential]:
        """Stored record, or None if the version moved on."""
        ...

    def list_all(self) -> Tuple[GuestCredential, ...]:
        ...

    def list_by_owner(self, owner_id: str) -> Tuple[GuestCredential, ...]:
        ...


class InMemoryCredentialStore:
    """
    Thread-safe in-memory store.

    Locking is per credential (for swaps) and per code (for creates);
    operations on unrelated records never wait on each other.
    """

    def __init__(self):
        self._records: Dict[str, GuestCredential] = {}
        self._code_index: Dict[str, str] = {}   # code → latest credential_id
        self._record_locks = KeyedLocks()
        self._code_locks = KeyedLocks()

    def create(self, credential: GuestCredential, *, as_of: datetime) -> Optional[GuestCredential]:
        with self._code_locks.hold(credential.code):
            holder_id = self._code_index.get(credential.code)
            if holder_id is not None and holds_code(self._records.get(holder_id), as_of):
                return None
            if credential.credential_id in self._records:
                raise ValueError(
                    f"credential_id '{credential.credential_id}' already exists."
                )
            stored = replace(credential, version=1)
            self._records[stored.credential_id] = stored
            self._code_index[stored.code] = stored.credential_id
            return stored

    def get(self, credential_id: str) -> Optional[GuestCredential]:
        return self._records.get(credential_id)

    def find_by_code(self, code: str) -> Optional[GuestCredential]:
        credential_id = self._code_index.get(code)
        return self._records.get(credential_id) if credential_id else None

    def compare_and_swap(
        self, expected_version: int, replacement: GuestCredential
    ) -> Optional[GuestCredential]:
        with self._record_locks.hold(replacement.credential_id):
            current = self._records.get(replacement.credential_id)
            if current is None or current.version != expected_version:
                return None
            stored = replace(replacement, version=current.version + 1)
            self._records[stored.credential_id] = stored
            return stored

    def list_all(self) -> Tuple[GuestCredential, ...]:
        return tuple(sorted(
            list(self._records.values()),
            key=lambda c: (c.created_at, c.credential_id),
            reverse=True,
        ))

    def list_by_owner(self, owner_id: str) -> Tuple[GuestCredential, ...]:
        return tuple(c for c in self.list_all() if c.owner_id == owner_id)

    @property
    def count(self) -> int:
        return len(self._records)
