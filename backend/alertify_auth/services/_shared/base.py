# alertify_auth/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable
from typing import TypeVar

from alertify_auth.services._shared.ports import Clock, SystemClock
from alertify_auth.uow.base import UnitOfWork, UnitOfWorkFactory

T = TypeVar("T")


class BaseService:
    """
    Shared plumbing for services that work through units of work.

    Services never open sessions or connections themselves; the injected
    factory decides whether transactions run against SQLAlchemy or the
    in-memory stores. Time is read from the injected clock only.

    :param uow_factory: Producer of read-only / read-write units of work.
    :param clock: Time source; the system clock when omitted.
    """

    def __init__(self, *, uow_factory: UnitOfWorkFactory, clock: Clock | None = None) -> None:
        self.uow_factory = uow_factory
        self.clock = clock or SystemClock()

    def rw_uow(self) -> UnitOfWork:
        return self.uow_factory(read_only=False)

    def ro_uow(self) -> UnitOfWork:
        """Unit of work for lookups; it never commits."""
        return self.uow_factory(read_only=True)

    def run_transaction(self, fn: Callable[[UnitOfWork], T]) -> T:
        """
        Run ``fn`` in a read-write unit of work and return its result.

        Commits when ``fn`` returns; rolls back and re-raises when it fails.
        """
        with self.rw_uow() as uow:
            return fn(uow)
