"""Explicitly constructed database handle (engine + session factory).

A :class:`Database` is built by the application factory (or a test fixture),
opened once, handed to the units of work that need it, and closed on
shutdown. There is no module-level engine or session.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from alertify_auth.models.base import Base

log = logging.getLogger(__name__)


def _is_sqlite_memory(url: str) -> bool:
    return url in {"sqlite://", "sqlite:///:memory:"} or url.startswith("sqlite:///:memory:?")


class Database:
    """
    Lifecycle owner for the SQLAlchemy engine.

    Parameters
    ----------
    url : str
        SQLAlchemy connection URL.
    echo : bool, optional
        Log emitted SQL statements.
    pool_timeout : float | None, optional
        Seconds to wait for a pooled connection before giving up
        (ignored for SQLite, which does not use a queue pool).
    """

    def __init__(self, url: str, *, echo: bool = False, pool_timeout: float | None = None) -> None:
        self.url = url
        self.echo = echo
        self.pool_timeout = pool_timeout
        self._engine: Engine | None = None
        self._sessions: sessionmaker[Session] | None = None

    # ----------------------------- lifecycle -----------------------------

    def open(self) -> Database:
        """Create the engine and session factory. Idempotent."""
        if self._engine is not None:
            return self

        kwargs: dict[str, Any] = {"echo": self.echo, "future": True}
        if self.url.startswith("sqlite"):
            kwargs["connect_args"] = {"check_same_thread": False}
            if _is_sqlite_memory(self.url):
                # One shared connection, otherwise every session sees an empty database.
                kwargs["poolclass"] = StaticPool
        elif self.pool_timeout is not None:
            kwargs["pool_timeout"] = self.pool_timeout
            kwargs["pool_pre_ping"] = True

        self._engine = create_engine(self.url, **kwargs)
        self._sessions = sessionmaker(bind=self._engine, autoflush=False, expire_on_commit=False)
        log.info("Database engine opened (dialect=%s)", self._engine.dialect.name)
        return self

    def close(self) -> None:
        """Dispose pooled connections. Safe to call twice."""
        if self._engine is None:
            return
        self._engine.dispose()
        self._engine = None
        self._sessions = None
        log.info("Database engine closed")

    def __enter__(self) -> Database:
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # ----------------------------- accessors -----------------------------

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise RuntimeError("Database is not open. Call open() first.")
        return self._engine

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def session(self) -> Session:
        """Return a new session bound to the engine."""
        if self._sessions is None:
            raise RuntimeError("Database is not open. Call open() first.")
        return self._sessions()

    # ------------------------------ schema -------------------------------

    def create_all(self) -> None:
        # Ensure models are imported so metadata is complete
        from alertify_auth import models as _models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        Base.metadata.drop_all(self.engine)
