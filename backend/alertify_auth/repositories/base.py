"""Repository base and persistence helpers for SQLAlchemy 2.x.

Repositories are persistence-only:
- They never implement use cases or domain policies.
- They never call commit/rollback; the Unit of Work owns the transaction.
- They return plain read-models, never ORM instances, so the service layer
  stays storage-agnostic.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Generic, TypeVar

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import Session

from alertify_auth.services._shared.errors import StoreTimeoutError

E = TypeVar("E")  # SQLAlchemy mapped entity type

_TIMEOUT_MARKERS = ("timeout", "timed out", "etimeout", "lock wait", "database is locked")

# Dialects whose INSERT supports ON CONFLICT DO NOTHING.
UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def violates(exc: IntegrityError, constraint_name: str, *, column: str | None = None) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL reports the constraint name; SQLite only reports
    ``table.column``, hence the optional ``column`` fallback.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        Name of the database constraint (e.g. ``'uq_users_email'``).
    column : str | None
        Qualified column (e.g. ``'users.email'``) matched when the dialect
        omits constraint names.

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else str(exc).lower()
    if constraint_name.lower() in message:
        return True
    return column is not None and column.lower() in message


def is_timeout(exc: BaseException) -> bool:
    """Return ``True`` for pool checkout timeouts and driver-level timeouts."""
    if isinstance(exc, PoolTimeoutError):
        return True
    if isinstance(exc, OperationalError):
        message = str(exc.orig if exc.orig is not None else exc).lower()
        return any(marker in message for marker in _TIMEOUT_MARKERS)
    return False


@contextmanager
def translate_timeouts() -> Iterator[None]:
    """Re-raise store timeouts as :class:`StoreTimeoutError`."""
    try:
        yield
    except (PoolTimeoutError, OperationalError) as exc:
        if is_timeout(exc):
            raise StoreTimeoutError(str(exc)) from exc
        raise


class BaseRepository(Generic[E]):
    """Hold the unit-of-work session and expose a few shared helpers."""

    model: type[E]

    def __init__(self, session: Session) -> None:
        self.session = session

    def add(self, entity: E) -> E:
        self.session.add(entity)
        return entity

    def flush(self) -> None:
        self.session.flush()

    @property
    def dialect_name(self) -> str:
        bind: Any = self.session.get_bind()
        return str(bind.dialect.name)
