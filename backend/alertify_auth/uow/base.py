"""
Transaction boundary contracts shared by the SQL and in-memory stores.

A unit of work binds the credential store, the revocation store and the
audit log to one transaction. Writer units commit on a clean exit and roll
back on error; read-only units always roll back and refuse ``commit``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol

from alertify_auth.services._shared.ports import AuditLog, CredentialStore, RevocationStore


class UnitOfWork(ABC):
    users: CredentialStore
    revocations: RevocationStore
    audit_logs: AuditLog
    read_only: bool

    @abstractmethod
    def __enter__(self) -> UnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> None: ...

    @abstractmethod
    def commit(self) -> None: ...

    @abstractmethod
    def rollback(self) -> None: ...


class UnitOfWorkFactory(Protocol):
    """Produce a fresh unit of work per transaction."""

    def __call__(self, *, read_only: bool = False) -> UnitOfWork: ...
