"""
Factory Boy base wiring.

The ``session`` fixture registers the SQLAlchemy session factories write to.
Rows are committed because the code under test opens its own sessions
through the unit of work and must see them.
"""

from __future__ import annotations

import factory
from sqlalchemy.orm import Session


class SQLAlchemySession:
    """Holder for the session shared by every factory in a test."""

    _current: Session | None = None

    @classmethod
    def set(cls, session: Session | None) -> None:
        cls._current = session

    @classmethod
    def get(cls) -> Session:
        if cls._current is None:
            raise RuntimeError("No factory session: request the 'session' fixture first.")
        return cls._current


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "commit"
