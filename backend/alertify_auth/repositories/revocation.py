"""Access-token blacklist repository."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, select

from alertify_auth.models.revocation import JwtBlacklistEntry
from alertify_auth.repositories.base import UPSERT_INSERTS, BaseRepository, translate_timeouts
from alertify_auth.services._shared.ports import RevocationRecord, RevocationStore


class RevocationRepository(BaseRepository[JwtBlacklistEntry], RevocationStore):
    """Persistence-only repository for :class:`JwtBlacklistEntry`."""

    model = JwtBlacklistEntry

    def insert(self, *, jti: str, user_id: int | None, expires_at: datetime) -> bool:
        """
        Insert a blacklist row unless one with the same ``jti`` exists.

        Uses ``ON CONFLICT DO NOTHING`` where the dialect supports it so a
        concurrent duplicate never aborts the surrounding transaction.

        :returns: ``True`` if a row was created.
        """
        values = {"jti": jti, "user_id": user_id, "expires_at": expires_at}
        dialect_insert = UPSERT_INSERTS.get(self.dialect_name)
        if dialect_insert is not None:
            stmt = (
                dialect_insert(JwtBlacklistEntry)
                .values(**values)
                .on_conflict_do_nothing(index_elements=["jti"])
            )
            return self.session.execute(stmt).rowcount == 1

        if self.find(jti) is not None:
            return False
        self.add(JwtBlacklistEntry(**values))
        self.flush()
        return True

    def find(self, jti: str) -> RevocationRecord | None:
        row = (
            self.session.execute(select(JwtBlacklistEntry).where(JwtBlacklistEntry.jti == jti))
            .scalars()
            .first()
        )
        if row is None:
            return None
        return RevocationRecord(jti=row.jti, user_id=row.user_id, expires_at=row.expires_at)

    def delete_expired(self, before: datetime) -> int:
        stmt = (
            delete(JwtBlacklistEntry)
            .where(JwtBlacklistEntry.expires_at < before)
            .execution_options(synchronize_session=False)
        )
        with translate_timeouts():
            return int(self.session.execute(stmt).rowcount or 0)
