from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Protocol

from alertify_auth.services._shared.errors import email_taken, username_taken


@dataclass(frozen=True, slots=True)
class UserRecord:
    """
    Read-model for a user credential row.

    :ivar id: Immutable user identifier.
    :ivar email: Login email, case-sensitive as stored.
    :ivar username: Public handle.
    :ivar password_hash: Adaptive hash of the password.
    :ivar status: Free-text account status (normalized at read time by policy).
    :ivar roles: Role names; empty unless loaded "with roles".
    :ivar refresh_token_hash: SHA-256 hex digest of the live refresh token.
    :ivar refresh_token_expires_at: Absolute expiry of the live refresh token (UTC).
    """

    id: int
    email: str
    username: str
    password_hash: str
    status: str
    roles: tuple[str, ...] = ()
    refresh_token_hash: str | None = None
    refresh_token_expires_at: datetime | None = None


class CredentialStore(Protocol):
    """
    Persistence port for user credentials.

    Implementations are bound to a unit of work; writes become visible when the
    unit of work commits.
    """

    def find_by_email(self, email: str) -> UserRecord | None: ...

    def find_by_username(self, username: str) -> UserRecord | None: ...

    def find_by_id_with_roles(self, user_id: int) -> UserRecord | None: ...

    def find_by_email_with_roles(self, email: str) -> UserRecord | None: ...

    def create_user(
        self,
        *,
        email: str,
        username: str,
        password_hash: str,
        status: str,
        roles: Iterable[str],
    ) -> UserRecord:
        """
        Insert a user with the given roles.

        :raises AuthError: Conflict when email or username is already taken,
            including when the violation is only detected at write time.
        """

    def update_refresh_credential(
        self,
        user_id: int,
        *,
        digest: str,
        expires_at: datetime,
        expected_digest: str | None = None,
    ) -> bool:
        """
        Replace the user's refresh digest and expiry.

        When ``expected_digest`` is given the write is a compare-and-swap: it
        only applies if the stored digest still equals ``expected_digest``.

        :returns: ``True`` if a row was updated.
        """

    def clear_refresh_credential(self, user_id: int) -> int:
        """
        Null out the refresh digest and expiry.

        :returns: Number of rows touched (``0`` for an unknown user).
        """


class InMemoryCredentialStore(CredentialStore):
    """
    Dict-backed credential store.

    Not thread-safe on its own; :class:`~alertify_auth.uow.memory_uow.InMemoryUnitOfWork`
    serializes access and provides rollback through :meth:`snapshot`/:meth:`restore`.
    """

    def __init__(self) -> None:
        self._users: dict[int, UserRecord] = {}
        self._seq = 0

    # ------------------------- helpers -------------------------

    def _first(self, **match: Any) -> UserRecord | None:
        for user in self._users.values():
            if all(getattr(user, k) == v for k, v in match.items()):
                return user
        return None

    @staticmethod
    def _without_roles(user: UserRecord | None) -> UserRecord | None:
        return replace(user, roles=()) if user is not None else None

    def snapshot(self) -> tuple[dict[int, UserRecord], int]:
        return dict(self._users), self._seq

    def restore(self, state: tuple[dict[int, UserRecord], int]) -> None:
        self._users, self._seq = dict(state[0]), state[1]

    def put(self, user: UserRecord) -> None:
        """Overwrite a row as-is (seeding and test setup)."""
        self._users[user.id] = user
        self._seq = max(self._seq, user.id)

    # -------------------------- API ----------------------------

    def find_by_email(self, email: str) -> UserRecord | None:
        return self._without_roles(self._first(email=email))

    def find_by_username(self, username: str) -> UserRecord | None:
        return self._without_roles(self._first(username=username))

    def find_by_id_with_roles(self, user_id: int) -> UserRecord | None:
        return self._users.get(user_id)

    def find_by_email_with_roles(self, email: str) -> UserRecord | None:
        return self._first(email=email)

    def create_user(
        self,
        *,
        email: str,
        username: str,
        password_hash: str,
        status: str,
        roles: Iterable[str],
    ) -> UserRecord:
        if self._first(email=email) is not None:
            raise email_taken()
        if self._first(username=username) is not None:
            raise username_taken()
        self._seq += 1
        user = UserRecord(
            id=self._seq,
            email=email,
            username=username,
            password_hash=password_hash,
            status=status,
            roles=tuple(dict.fromkeys(roles)),
        )
        self._users[user.id] = user
        return user

    def update_refresh_credential(
        self,
        user_id: int,
        *,
        digest: str,
        expires_at: datetime,
        expected_digest: str | None = None,
    ) -> bool:
        user = self._users.get(user_id)
        if user is None:
            return False
        if expected_digest is not None and user.refresh_token_hash != expected_digest:
            return False
        self._users[user_id] = replace(
            user, refresh_token_hash=digest, refresh_token_expires_at=expires_at
        )
        return True

    def clear_refresh_credential(self, user_id: int) -> int:
        user = self._users.get(user_id)
        if user is None:
            return 0
        self._users[user_id] = replace(
            user, refresh_token_hash=None, refresh_token_expires_at=None
        )
        return 1
