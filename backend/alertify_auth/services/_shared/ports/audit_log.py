from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Protocol


class AuditAction(StrEnum):
    """Actions written to the audit trail."""

    USER_REGISTERED = "USER_REGISTERED"
    LOGIN_SUCCEEDED = "LOGIN_SUCCEEDED"


@dataclass(frozen=True, slots=True)
class AuditEntry:
    user_id: int
    action: AuditAction
    created_at: datetime


class AuditLog(Protocol):
    """Append-only audit trail, written inside the caller's transaction."""

    def record(self, *, user_id: int, action: AuditAction, at: datetime) -> None: ...


class InMemoryAuditLog(AuditLog):
    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []

    def snapshot(self) -> list[AuditEntry]:
        return list(self.entries)

    def restore(self, state: list[AuditEntry]) -> None:
        self.entries = list(state)

    def record(self, *, user_id: int, action: AuditAction, at: datetime) -> None:
        self.entries.append(AuditEntry(user_id=user_id, action=action, created_at=at))
