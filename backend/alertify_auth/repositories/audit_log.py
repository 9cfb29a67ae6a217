from __future__ import annotations

from datetime import datetime

from alertify_auth.models.audit_log import AuditLogEntry
from alertify_auth.repositories.base import BaseRepository
from alertify_auth.services._shared.ports import AuditAction, AuditLog


class AuditLogRepository(BaseRepository[AuditLogEntry], AuditLog):
    model = AuditLogEntry

    def record(self, *, user_id: int, action: AuditAction, at: datetime) -> None:
        self.add(AuditLogEntry(user_id=user_id, action=str(action), created_at=at))
        self.flush()
