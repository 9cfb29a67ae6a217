"""Background sweep of expired access-token blacklist entries."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable

from alertify_auth.services._shared.base import BaseService
from alertify_auth.services._shared.errors import StoreTimeoutError
from alertify_auth.services._shared.ports import Clock
from alertify_auth.uow.base import UnitOfWorkFactory

log = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 3600.0
DEFAULT_RETRY_BACKOFF_SECONDS = 3.0
MAX_ATTEMPTS = 2


class RevocationCleanupScheduler(BaseService):
    """
    Periodic job deleting revocation records whose ``expires_at`` has passed.

    The loop runs in a daemon thread and waits on an :class:`threading.Event`
    between ticks, so :meth:`stop` returns promptly. A tick that hits a store
    timeout is retried once after a fixed backoff; any other failure is logged
    and the job waits for the next tick.

    :param uow_factory: Producer of units of work.
    :param interval: Seconds between sweeps.
    :param retry_backoff: Seconds to wait before the retry on timeout.
    :param clock: Time source for the expiry cutoff.
    :param sleep: Blocking sleep used for the backoff (injectable for tests).
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        interval: float = DEFAULT_INTERVAL_SECONDS,
        retry_backoff: float = DEFAULT_RETRY_BACKOFF_SECONDS,
        clock: Clock | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        super().__init__(uow_factory=uow_factory, clock=clock)
        self.interval = interval
        self.retry_backoff = retry_backoff
        self._sleep = sleep
        self._thread: threading.Thread | None = None
        self._stop_event = threading.Event()

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the background loop. Calling it twice is a no-op."""
        if self.running:
            return
        self._stop_event = threading.Event()
        self._thread = threading.Thread(
            target=self._run_loop, name="blacklist-cleanup", daemon=True
        )
        self._thread.start()
        log.info("Blacklist cleanup scheduler started (interval=%ss)", self.interval)

    def stop(self, timeout: float | None = 5.0) -> None:
        """Signal the loop to exit and wait for the thread."""
        self._stop_event.set()
        if self._thread is None:
            return
        self._thread.join(timeout)
        self._thread = None
        log.info("Blacklist cleanup scheduler stopped")

    def sweep(self) -> int:
        """Delete expired records once, without retries. :returns: rows deleted."""
        cutoff = self.clock.now()
        return self.run_transaction(lambda uow: uow.revocations.delete_expired(cutoff))

    def run_once(self) -> int:
        """
        Run one scheduler cycle (used by the background loop, the CLI and tests).

        :returns: Number of records deleted; ``0`` when the cycle failed.
        """
        for attempt in range(1, MAX_ATTEMPTS + 1):
            try:
                deleted = self.sweep()
            except StoreTimeoutError:
                if attempt == MAX_ATTEMPTS:
                    log.error("Blacklist cleanup timed out after %s attempts", attempt)
                    return 0
                log.warning(
                    "Blacklist cleanup timed out; retrying in %ss", self.retry_backoff
                )
                self._sleep(self.retry_backoff)
            except Exception:
                log.exception("Blacklist cleanup failed")
                return 0
            else:
                if deleted:
                    log.info("Blacklist cleanup removed %s expired records", deleted)
                return deleted
        return 0

    def _run_loop(self) -> None:
        while not self._stop_event.wait(self.interval):
            self.run_once()
