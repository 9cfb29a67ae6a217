"""User repository: the SQLAlchemy :class:`CredentialStore`."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload

from alertify_auth.models.user import Role, User
from alertify_auth.repositories.base import UPSERT_INSERTS, BaseRepository, violates
from alertify_auth.services._shared.errors import email_taken, username_taken
from alertify_auth.services._shared.ports import CredentialStore, UserRecord


class UserRepository(BaseRepository[User], CredentialStore):
    """Persistence-only repository for :class:`User`.

    It NEVER issues tokens or checks passwords; it only stores what the
    session engine decided.
    """

    model = User

    # ---------------------------- Mapping ----------------------------

    @staticmethod
    def _to_record(user: User, *, with_roles: bool) -> UserRecord:
        roles = tuple(sorted(role.name for role in user.roles)) if with_roles else ()
        return UserRecord(
            id=user.id,
            email=user.email,
            username=user.username,
            password_hash=user.password_hash,
            status=user.status,
            roles=roles,
            refresh_token_hash=user.refresh_token_hash,
            refresh_token_expires_at=user.refresh_token_expires_at,
        )

    def _one(self, *criteria, with_roles: bool) -> UserRecord | None:
        stmt = select(User).where(*criteria)
        if with_roles:
            stmt = stmt.options(selectinload(User.roles))
        user = self.session.execute(stmt).scalars().first()
        if user is None:
            return None
        return self._to_record(user, with_roles=with_roles)

    # ---------------------------- Lookup helpers ----------------------------

    def find_by_email(self, email: str) -> UserRecord | None:
        return self._one(User.email == email, with_roles=False)

    def find_by_username(self, username: str) -> UserRecord | None:
        return self._one(User.username == username, with_roles=False)

    def find_by_id_with_roles(self, user_id: int) -> UserRecord | None:
        return self._one(User.id == user_id, with_roles=True)

    def find_by_email_with_roles(self, email: str) -> UserRecord | None:
        return self._one(User.email == email, with_roles=True)

    # ---------------------------- Writes ----------------------------

    def _find_role(self, name: str) -> Role | None:
        return self.session.execute(select(Role).where(Role.name == name)).scalars().first()

    def _insert_role(self, name: str) -> None:
        """Insert a role row, tolerating a concurrent insert of the same name."""
        dialect_insert = UPSERT_INSERTS.get(self.dialect_name)
        if dialect_insert is not None:
            stmt = (
                dialect_insert(Role)
                .values(name=name)
                .on_conflict_do_nothing(index_elements=["name"])
            )
            self.session.execute(stmt)
            return
        try:
            with self.session.begin_nested():
                self.session.add(Role(name=name))
        except IntegrityError as exc:
            if not violates(exc, "uq_roles_name", column="roles.name"):
                raise

    def _get_or_create_role(self, name: str) -> Role:
        role = self._find_role(name)
        if role is not None:
            return role
        self._insert_role(name)
        return self.session.execute(select(Role).where(Role.name == name)).scalar_one()

    def create_user(
        self,
        *,
        email: str,
        username: str,
        password_hash: str,
        status: str,
        roles: Iterable[str],
    ) -> UserRecord:
        """Insert a user and its role links, translating uniqueness races to conflicts.

        :raises AuthError: ``AUTH_EMAIL_TAKEN`` / ``AUTH_USERNAME_TAKEN``.
        """
        user = User(
            email=email,
            username=username,
            password_hash=password_hash,
            status=status,
            roles=[self._get_or_create_role(name) for name in dict.fromkeys(roles)],
        )
        self.add(user)
        try:
            self.flush()
        except IntegrityError as exc:
            if violates(exc, "uq_users_email", column="users.email"):
                raise email_taken() from exc
            if violates(exc, "uq_users_username", column="users.username"):
                raise username_taken() from exc
            raise
        return self._to_record(user, with_roles=True)

    def update_refresh_credential(
        self,
        user_id: int,
        *,
        digest: str,
        expires_at: datetime,
        expected_digest: str | None = None,
    ) -> bool:
        stmt = update(User).where(User.id == user_id)
        if expected_digest is not None:
            # Compare-and-swap: only the first rotation of a given token wins.
            stmt = stmt.where(User.refresh_token_hash == expected_digest)
        stmt = stmt.values(refresh_token_hash=digest, refresh_token_expires_at=expires_at)
        result = self.session.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount == 1

    def clear_refresh_credential(self, user_id: int) -> int:
        stmt = (
            update(User)
            .where(User.id == user_id)
            .values(refresh_token_hash=None, refresh_token_expires_at=None)
            .execution_options(synchronize_session=False)
        )
        return int(self.session.execute(stmt).rowcount or 0)
