# alertify_auth/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass

# ------------------------------- Requests ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Registration request.

    :param email: User email, stored as given.
    :type email: str
    :param username: Public handle (4-20 alphanumeric chars).
    :type username: str
    :param password: Raw password (hashed before storage).
    :type password: str
    """

    email: str
    username: str
    password: str


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Credentials presented at login.

    :param email: User email.
    :type email: str
    :param password: Raw password, checked against the stored hash.
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    """
    Refresh token presented for rotation.

    :param refresh_token: Encoded refresh JWT; spent on success.
    :type refresh_token: str
    """

    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    """
    Session to close.

    :param refresh_token: Encoded refresh JWT (required).
    :type refresh_token: str
    :param access_token: Encoded access JWT to blacklist, if the client sent one.
    :type access_token: str | None
    """

    refresh_token: str
    access_token: str | None = None


# ------------------------------- Responses --------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterOut:
    user_id: int


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """Public projection of a user; never carries hashes or status."""

    id: int
    email: str
    username: str
    roles: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Freshly rotated credentials.

    :param access_token: Encoded access JWT (short-lived).
    :type access_token: str
    :param refresh_token: Encoded refresh JWT.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    access_token: str
    refresh_token: str
    user: UserPublicOut


@dataclass(frozen=True, slots=True)
class LogoutOut:
    message: str
