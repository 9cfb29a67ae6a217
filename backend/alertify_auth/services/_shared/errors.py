"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and never import Flask or HTTP
helpers. They are the stable contract between stores, the session engine and
the delivery layer.

:class:`AuthError` is a single tagged type: callers branch on
:attr:`AuthError.kind` (an exhaustive :class:`ErrorKind`) with ``match``
instead of testing membership against a hierarchy of subclasses. The
translation to HTTP responses (RFC 7807) lives in
``alertify_auth/core/errors.py``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class ErrorKind(StrEnum):
    """Discriminant of :class:`AuthError`."""

    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    INTERNAL = "internal"


class ErrorCode(StrEnum):
    """Machine-readable codes clients map to screens/messages."""

    EMAIL_TAKEN = "AUTH_EMAIL_TAKEN"
    USERNAME_TAKEN = "AUTH_USERNAME_TAKEN"
    INVALID_CREDENTIALS = "AUTH_INVALID_CREDENTIALS"
    ACCOUNT_BLOCKED = "AUTH_ACCOUNT_BLOCKED"
    ACCOUNT_INACTIVE = "AUTH_ACCOUNT_INACTIVE"
    REFRESH_INVALID = "AUTH_REFRESH_INVALID"
    TOKEN_REVOKED = "AUTH_TOKEN_REVOKED"
    INVALID_TOKEN = "AUTH_INVALID_TOKEN"
    UNEXPECTED_ERROR = "AUTH_UNEXPECTED_ERROR"


@dataclass(slots=True, eq=False)
class AuthError(Exception):
    """
    Business error raised by the session engine (and by stores for conflicts).

    :param kind: Error family; drives the HTTP status projection.
    :type kind: ErrorKind
    :param code: Stable machine-readable code.
    :type code: ErrorCode
    :param message: Client-safe message. Never carries store or stack detail.
    :type message: str
    """

    kind: ErrorKind
    code: ErrorCode
    message: str

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    # ------------------------------------------------------------------ #
    # Constructors
    # ------------------------------------------------------------------ #

    @classmethod
    def conflict(cls, code: ErrorCode, message: str) -> AuthError:
        return cls(ErrorKind.CONFLICT, code, message)

    @classmethod
    def unauthorized(cls, code: ErrorCode, message: str) -> AuthError:
        return cls(ErrorKind.UNAUTHORIZED, code, message)

    @classmethod
    def forbidden(cls, code: ErrorCode, message: str) -> AuthError:
        return cls(ErrorKind.FORBIDDEN, code, message)

    @classmethod
    def internal(cls, message: str = "Unexpected error. Please try again.") -> AuthError:
        return cls(ErrorKind.INTERNAL, ErrorCode.UNEXPECTED_ERROR, message)


def email_taken() -> AuthError:
    """Conflict raised when the email already belongs to another user."""
    return AuthError.conflict(ErrorCode.EMAIL_TAKEN, "Email is already registered")


def username_taken() -> AuthError:
    """Conflict raised when the username already belongs to another user."""
    return AuthError.conflict(ErrorCode.USERNAME_TAKEN, "Username is not available")


class StoreTimeoutError(Exception):
    """
    Transient store failure (pool checkout or statement timeout).

    Raised by store adapters so that background jobs can retry without
    knowing the driver's exception types.
    """
