from __future__ import annotations

from dataclasses import dataclass

from werkzeug.security import check_password_hash, generate_password_hash

from alertify_auth.services._shared.ports import PasswordHasher


@dataclass(frozen=True, slots=True)
class WerkzeugPasswordHasher(PasswordHasher):
    """
    Adaptive password hashing through :mod:`werkzeug.security`.

    :param method: Werkzeug method string, e.g. ``"scrypt"`` or
        ``"pbkdf2:sha256:600000"``.
    """

    method: str = "scrypt"

    def hash(self, raw: str) -> str:
        return generate_password_hash(raw, method=self.method)

    def verify(self, raw: str, hashed: str) -> bool:
        if not hashed:
            return False
        # ``check_password_hash`` is not typed and returns ``Any``; coerce to bool for mypy.
        return bool(check_password_hash(hashed, raw))
