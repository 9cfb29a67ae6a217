"""Deterministic clock for engine and scheduler tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta


class MutableClock:
    """Clock whose ``now()`` only moves when a test says so."""

    def __init__(self, start: datetime | None = None) -> None:
        self.current = start or datetime(2025, 1, 1, 12, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self.current

    def advance(self, delta: timedelta) -> datetime:
        self.current = self.current + delta
        return self.current

    def set(self, value: datetime) -> None:
        self.current = value
