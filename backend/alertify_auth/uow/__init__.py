"""Unit of Work abstractions and concrete implementations.

This package re-exports the SQLAlchemy-backed and in-memory units of work,
alongside the abstract contracts that the service layer depends on.
"""

from .base import UnitOfWork, UnitOfWorkFactory
from .memory_uow import InMemoryStorage, InMemoryUnitOfWork, InMemoryUnitOfWorkFactory
from .sqlalchemy_uow import SQLAlchemyUnitOfWork, SQLAlchemyUnitOfWorkFactory

__all__ = [
    "InMemoryStorage",
    "InMemoryUnitOfWork",
    "InMemoryUnitOfWorkFactory",
    "SQLAlchemyUnitOfWork",
    "SQLAlchemyUnitOfWorkFactory",
    "UnitOfWork",
    "UnitOfWorkFactory",
]
