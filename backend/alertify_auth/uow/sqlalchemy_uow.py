"""
SQLAlchemy implementation of UnitOfWork.

Each unit of work opens its own session from an explicitly constructed
:class:`~alertify_auth.core.database.Database` and closes it on exit.
"""

from __future__ import annotations

from sqlalchemy import event
from sqlalchemy.orm import ORMExecuteState, Session

from alertify_auth.core.database import Database
from alertify_auth.repositories import AuditLogRepository, RevocationRepository, UserRepository
from alertify_auth.repositories.base import translate_timeouts
from alertify_auth.uow.base import UnitOfWork


class SQLAlchemyRepositoryContainer:
    """Provide repository instances that share a SQLAlchemy session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=self.session)
        self.revocations = RevocationRepository(session=self.session)
        self.audit_logs = AuditLogRepository(session=self.session)


def _block_flush(session, flush_context, instances):
    if session.new or session.dirty or session.deleted:
        raise RuntimeError(
            "Read-only UnitOfWork: ORM flush blocked (new/dirty/deleted objects present)."
        )


def _block_dml(orm_execute_state: ORMExecuteState) -> None:
    if orm_execute_state.is_insert or orm_execute_state.is_update or orm_execute_state.is_delete:
        raise RuntimeError("Read-only UnitOfWork: DML statement blocked.")


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    SQLAlchemy-backed UoW owning one session per transaction.

    The same session is shared across all repositories for a consistent
    transaction. A ``read_only`` unit installs write guards on its session,
    always rolls back on exit and refuses :meth:`commit`.

    Parameters
    ----------
    database:
        Open database handle providing sessions.
    read_only:
        Mark the unit as a read-only scope.
    """

    def __init__(self, database: Database, *, read_only: bool = False) -> None:
        super().__init__(session=database.session())
        self.read_only = read_only
        if read_only:
            event.listen(self.session, "before_flush", _block_flush)
            event.listen(self.session, "do_orm_execute", _block_dml)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        # No-op: the session is lazily started on the first statement.
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None and not self.read_only:
                try:
                    self.commit()
                except Exception:
                    self.rollback()
                    raise
            else:
                self.rollback()
        finally:
            self.session.close()

    def commit(self) -> None:
        if self.read_only:
            raise RuntimeError("Read-only UnitOfWork does not allow commit().")
        # Lock and statement timeouts can also surface at COMMIT.
        with translate_timeouts():
            self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class SQLAlchemyUnitOfWorkFactory:
    """:class:`~alertify_auth.uow.base.UnitOfWorkFactory` bound to a :class:`Database`."""

    def __init__(self, database: Database) -> None:
        self.database = database

    def __call__(self, *, read_only: bool = False) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork(self.database, read_only=read_only)
