from __future__ import annotations

from typing import Protocol
from uuid import uuid4


class IdGenerator(Protocol):
    """Generator of collision-resistant identifiers (used for ``jti``)."""

    def new_id(self) -> str: ...


class UUIDGenerator(IdGenerator):
    """Random UUID4 identifiers in canonical string form."""

    def new_id(self) -> str:
        return str(uuid4())
