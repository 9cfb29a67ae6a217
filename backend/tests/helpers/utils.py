"""Assertion helpers without a pytest built-in equivalent."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager


@contextmanager
def not_raises(exc_type: type[BaseException]) -> Iterator[None]:
    """Fail the test, keeping the cause, if the block raises ``exc_type``."""
    try:
        yield
    except exc_type as exc:
        raise AssertionError(f"Unexpected {type(exc).__name__}: {exc}") from exc
