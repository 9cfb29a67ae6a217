from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class RevocationRecord:
    """
    Blacklist entry for an access token.

    :ivar jti: Access token identifier (unique key).
    :ivar user_id: Token subject, when the token carried one.
    :ivar expires_at: Original expiry of the access token (UTC).
    """

    jti: str
    user_id: int | None
    expires_at: datetime


class RevocationStore(Protocol):
    """
    Abstraction for the access-token blacklist.

    Inserts are idempotent: a ``jti`` appears at most once.
    """

    def insert(self, *, jti: str, user_id: int | None, expires_at: datetime) -> bool:
        """:returns: ``True`` if a record was created, ``False`` if it already existed."""

    def find(self, jti: str) -> RevocationRecord | None: ...

    def delete_expired(self, before: datetime) -> int:
        """Delete records with ``expires_at < before``. :returns: rows deleted."""


class InMemoryRevocationStore(RevocationStore):
    """Dict-backed blacklist keyed by ``jti``."""

    def __init__(self) -> None:
        self._records: dict[str, RevocationRecord] = {}

    def snapshot(self) -> dict[str, RevocationRecord]:
        return dict(self._records)

    def restore(self, state: dict[str, RevocationRecord]) -> None:
        self._records = dict(state)

    def insert(self, *, jti: str, user_id: int | None, expires_at: datetime) -> bool:
        if jti in self._records:
            return False
        self._records[jti] = RevocationRecord(jti=jti, user_id=user_id, expires_at=expires_at)
        return True

    def find(self, jti: str) -> RevocationRecord | None:
        return self._records.get(jti)

    def delete_expired(self, before: datetime) -> int:
        expired = [jti for jti, rec in self._records.items() if rec.expires_at < before]
        for jti in expired:
            del self._records[jti]
        return len(expired)

    def __len__(self) -> int:
        return len(self._records)
