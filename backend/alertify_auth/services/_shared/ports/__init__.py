"""
alertify_auth.services._shared.ports
====================================

Collection of *ports* (hexagonal interfaces) that the session engine depends on.

Modules
-------
- :mod:`credential_store`:
    :class:`~.CredentialStore` and the :class:`~.UserRecord` read-model.
- :mod:`revocation_store`:
    :class:`~.RevocationStore`: access-token blacklist keyed by ``jti``.
- :mod:`audit_log`:
    :class:`~.AuditLog`: audit trail written inside the caller's transaction.
- :mod:`token_codec`:
    :class:`~.TokenCodec`: signing/verification of access and refresh tokens.
- :mod:`clock`, :mod:`id_generator`, :mod:`password_hasher`:
    small injectable primitives (time, ``jti`` generation, password hashing).

Concrete adapters live under ``alertify_auth.infra`` and
``alertify_auth.repositories``; the in-memory reference implementations are
kept next to their port.
"""

from __future__ import annotations

from .audit_log import AuditAction, AuditEntry, AuditLog, InMemoryAuditLog
from .clock import Clock, SystemClock
from .credential_store import CredentialStore, InMemoryCredentialStore, UserRecord
from .id_generator import IdGenerator, UUIDGenerator
from .password_hasher import PasswordHasher
from .revocation_store import InMemoryRevocationStore, RevocationRecord, RevocationStore
from .token_codec import (
    AccessSubject,
    IssuedToken,
    TokenClaims,
    TokenCodec,
    TokenExpired,
    TokenSignatureInvalid,
    TokenTypeMismatch,
    TokenVerificationError,
    parse_ttl,
    refresh_digest,
)

__all__ = [
    "AccessSubject",
    "AuditAction",
    "AuditEntry",
    "AuditLog",
    "Clock",
    "CredentialStore",
    "IdGenerator",
    "InMemoryAuditLog",
    "InMemoryCredentialStore",
    "InMemoryRevocationStore",
    "IssuedToken",
    "PasswordHasher",
    "RevocationRecord",
    "RevocationStore",
    "SystemClock",
    "TokenClaims",
    "TokenCodec",
    "TokenExpired",
    "TokenSignatureInvalid",
    "TokenTypeMismatch",
    "TokenVerificationError",
    "UUIDGenerator",
    "UserRecord",
    "parse_ttl",
    "refresh_digest",
]
