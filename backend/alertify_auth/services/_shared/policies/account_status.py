"""Account status gate shared by login and refresh."""

from __future__ import annotations

from enum import Enum, auto

from alertify_auth.services._shared.errors import AuthError, ErrorCode

# Legacy rows store Spanish labels; both spellings are accepted.
_ACTIVE = frozenset({"active", "activo"})
_INACTIVE = frozenset({"inactive", "inactivo"})
_BLOCKED = frozenset({"blocked", "bloqueado"})


class AccountState(Enum):
    ACTIVE = auto()
    INACTIVE = auto()
    BLOCKED = auto()
    UNKNOWN = auto()


def normalize_status(raw: str | None) -> str:
    """Trim and lowercase a free-text status value."""
    return (raw or "").strip().lower()


def classify_status(raw: str | None) -> AccountState:
    status = normalize_status(raw)
    if status in _BLOCKED:
        return AccountState.BLOCKED
    if status in _INACTIVE:
        return AccountState.INACTIVE
    if status in _ACTIVE:
        return AccountState.ACTIVE
    return AccountState.UNKNOWN


def ensure_account_enabled(raw_status: str | None) -> None:
    """
    Reject anything but an active account.

    Unknown values fail closed as inactive.

    :raises AuthError: ``AUTH_ACCOUNT_BLOCKED`` or ``AUTH_ACCOUNT_INACTIVE``.
    """
    match classify_status(raw_status):
        case AccountState.ACTIVE:
            return
        case AccountState.BLOCKED:
            raise AuthError.forbidden(ErrorCode.ACCOUNT_BLOCKED, "The account is blocked.")
        case AccountState.INACTIVE:
            raise AuthError.forbidden(ErrorCode.ACCOUNT_INACTIVE, "The account is inactive.")
        case AccountState.UNKNOWN:
            raise AuthError.forbidden(ErrorCode.ACCOUNT_INACTIVE, "The account is not enabled.")
