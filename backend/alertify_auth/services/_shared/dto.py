# comments in English; reST docstrings strict
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SideEffectOutcome:
    """
    Result of a non-critical side effect (bookkeeping after the main outcome).

    Services return this instead of raising: the caller logs a failed outcome
    and carries on. It is never converted into a user-visible error.

    :param operation: Short name of the side effect (for logs).
    :type operation: str
    :param error: Exception that aborted the side effect, if any.
    :type error: Exception | None
    """

    operation: str
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None
