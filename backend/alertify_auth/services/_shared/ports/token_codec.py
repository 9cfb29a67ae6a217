from __future__ import annotations

import hashlib
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Protocol

REFRESH_TOKEN_TYPE = "refresh"

DEFAULT_ACCESS_TTL = timedelta(minutes=15)
DEFAULT_REFRESH_TTL = timedelta(days=7)

_TTL_PATTERN = re.compile(r"^(\d+)([smhd])$")
_TTL_UNITS = {
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}


# --------------------------------------------------------------------------- #
# Errors
# --------------------------------------------------------------------------- #


class TokenVerificationError(Exception):
    """Base for every reason a bearer token is rejected by the codec."""


class TokenSignatureInvalid(TokenVerificationError):
    """Bad signature, wrong key, or a malformed token."""


class TokenExpired(TokenVerificationError):
    """Signature is fine but ``exp`` is not in the future."""


class TokenTypeMismatch(TokenVerificationError):
    """A token of another kind was presented (e.g. access instead of refresh)."""


# --------------------------------------------------------------------------- #
# Value objects
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class AccessSubject:
    """Identity embedded into an access token."""

    id: int
    email: str
    roles: Sequence[str] = ()


@dataclass(frozen=True, slots=True)
class IssuedToken:
    """
    Freshly minted token.

    :ivar token: Encoded bearer string handed to the client.
    :ivar jti: Unique token identifier embedded in the token.
    :ivar expires_at: Absolute expiry (UTC) matching the ``exp`` claim.
    """

    token: str
    jti: str
    expires_at: datetime


@dataclass(frozen=True, slots=True)
class TokenClaims:
    """Verified claims. Optional fields are ``None`` when the token omits them."""

    subject: str | None
    jti: str | None
    expires_at: datetime | None
    token_type: str | None = None
    payload: Mapping[str, Any] = field(default_factory=dict)


# --------------------------------------------------------------------------- #
# Port
# --------------------------------------------------------------------------- #


class TokenCodec(Protocol):
    """Port for signing and verifying access/refresh tokens."""

    access_ttl: timedelta
    refresh_ttl: timedelta

    def issue_access(self, subject: AccessSubject) -> IssuedToken: ...

    def issue_refresh(self, user_id: int) -> IssuedToken: ...

    def verify_access(self, token: str) -> TokenClaims:
        """:raises TokenVerificationError: On any signature/expiry failure."""

    def verify_refresh(self, token: str) -> TokenClaims:
        """:raises TokenVerificationError: Also when ``type`` is not ``refresh``."""


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #


def parse_ttl(value: str | None, default: timedelta) -> timedelta:
    """
    Parse ``<integer><unit>`` with unit in ``s``, ``m``, ``h``, ``d``.

    Unrecognized input yields ``default`` instead of raising, so a typo in the
    environment never prevents startup.

    :param value: Raw TTL such as ``"15m"`` or ``"7d"``.
    :param default: Fallback lifetime.
    :returns: Parsed lifetime.
    :rtype: timedelta
    """
    match = _TTL_PATTERN.match((value or "").strip())
    if match is None:
        return default
    return int(match.group(1)) * _TTL_UNITS[match.group(2)]


def refresh_digest(raw_token: str) -> str:
    """Return the lowercase hex SHA-256 of a raw refresh token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()
