"""
In-memory implementation of UnitOfWork.

Reference implementation of the store ports: every unit of work holds a
re-entrant lock for its whole lifetime, so transactions are serialized and
rollback restores the snapshot taken on entry.
"""

from __future__ import annotations

import threading
from typing import Any

from alertify_auth.services._shared.ports import (
    InMemoryAuditLog,
    InMemoryCredentialStore,
    InMemoryRevocationStore,
)
from alertify_auth.uow.base import UnitOfWork


class InMemoryStorage:
    """Process-local tables shared by all in-memory units of work."""

    def __init__(self) -> None:
        self.users = InMemoryCredentialStore()
        self.revocations = InMemoryRevocationStore()
        self.audit_logs = InMemoryAuditLog()
        self.lock = threading.RLock()

    def snapshot(self) -> tuple[Any, Any, Any]:
        return (
            self.users.snapshot(),
            self.revocations.snapshot(),
            self.audit_logs.snapshot(),
        )

    def restore(self, state: tuple[Any, Any, Any]) -> None:
        users, revocations, audit = state
        self.users.restore(users)
        self.revocations.restore(revocations)
        self.audit_logs.restore(audit)


class InMemoryUnitOfWork(UnitOfWork):
    """Serialized, snapshot-based unit of work over :class:`InMemoryStorage`."""

    def __init__(self, storage: InMemoryStorage, *, read_only: bool = False) -> None:
        self.storage = storage
        self.read_only = read_only
        self.users = storage.users
        self.revocations = storage.revocations
        self.audit_logs = storage.audit_logs
        self._snapshot: tuple[Any, Any, Any] | None = None

    def __enter__(self) -> InMemoryUnitOfWork:
        self.storage.lock.acquire()
        self._snapshot = self.storage.snapshot()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None and not self.read_only:
                self.commit()
            else:
                self.rollback()
        finally:
            self._snapshot = None
            self.storage.lock.release()

    def commit(self) -> None:
        if self.read_only:
            raise RuntimeError("Read-only UnitOfWork does not allow commit().")
        self._snapshot = self.storage.snapshot()

    def rollback(self) -> None:
        if self._snapshot is not None:
            self.storage.restore(self._snapshot)


class InMemoryUnitOfWorkFactory:
    """:class:`~alertify_auth.uow.base.UnitOfWorkFactory` over a shared storage."""

    def __init__(self, storage: InMemoryStorage | None = None) -> None:
        self.storage = storage or InMemoryStorage()

    def __call__(self, *, read_only: bool = False) -> InMemoryUnitOfWork:
        return InMemoryUnitOfWork(self.storage, read_only=read_only)
