from __future__ import annotations

from typing import Protocol


class PasswordHasher(Protocol):
    """Port for the adaptive password hash primitive."""

    def hash(self, raw: str) -> str: ...

    def verify(self, raw: str, hashed: str) -> bool: ...
