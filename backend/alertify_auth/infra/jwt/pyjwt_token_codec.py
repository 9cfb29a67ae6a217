# alertify_auth/infra/jwt/pyjwt_token_codec.py
from __future__ import annotations

from collections.abc import Mapping
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt

from alertify_auth.services._shared.ports import (
    AccessSubject,
    Clock,
    IdGenerator,
    IssuedToken,
    SystemClock,
    TokenClaims,
    TokenCodec,
    TokenExpired,
    TokenSignatureInvalid,
    TokenTypeMismatch,
    UUIDGenerator,
)
from alertify_auth.services._shared.ports.token_codec import (
    DEFAULT_ACCESS_TTL,
    DEFAULT_REFRESH_TTL,
    REFRESH_TOKEN_TYPE,
)

_DECODE_OPTIONS = {
    "require": ["exp"],
    # Expiry is checked against the injected clock, not the wall clock.
    "verify_exp": False,
    "verify_iat": False,
    "verify_nbf": False,
}


class JWTTokenCodec(TokenCodec):
    """
    HMAC-signed JWT codec built on PyJWT.

    Access and refresh tokens are signed with distinct secrets, so a token of
    one kind never verifies as the other even before the ``type`` check.

    :param access_secret: Key for access tokens (shared with the bearer gate).
    :param refresh_secret: Key for refresh tokens.
    :param access_ttl: Access token lifetime.
    :param refresh_ttl: Refresh token lifetime.
    :param algorithm: JWS algorithm (``HS256`` by default).
    :param clock: Time source for ``iat``/``exp`` and expiry checks.
    :param ids: ``jti`` generator.
    """

    def __init__(
        self,
        *,
        access_secret: str,
        refresh_secret: str,
        access_ttl: timedelta = DEFAULT_ACCESS_TTL,
        refresh_ttl: timedelta = DEFAULT_REFRESH_TTL,
        algorithm: str = "HS256",
        clock: Clock | None = None,
        ids: IdGenerator | None = None,
    ) -> None:
        self._access_secret = access_secret
        self._refresh_secret = refresh_secret
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.algorithm = algorithm
        self.clock = clock or SystemClock()
        self.ids = ids or UUIDGenerator()

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def _issue(self, claims: Mapping[str, Any], *, secret: str, ttl: timedelta) -> IssuedToken:
        now = self.clock.now()
        exp = int((now + ttl).timestamp())
        jti = self.ids.new_id()
        payload = {**claims, "jti": jti, "iat": int(now.timestamp()), "exp": exp}
        token = jwt.encode(payload, secret, algorithm=self.algorithm)
        return IssuedToken(token=token, jti=jti, expires_at=datetime.fromtimestamp(exp, tz=UTC))

    def issue_access(self, subject: AccessSubject) -> IssuedToken:
        claims = {"sub": str(subject.id), "email": subject.email, "roles": list(subject.roles)}
        return self._issue(claims, secret=self._access_secret, ttl=self.access_ttl)

    def issue_refresh(self, user_id: int) -> IssuedToken:
        claims = {"sub": str(user_id), "type": REFRESH_TOKEN_TYPE}
        return self._issue(claims, secret=self._refresh_secret, ttl=self.refresh_ttl)

    # ------------------------------------------------------------------ #
    # Verify
    # ------------------------------------------------------------------ #

    def _verify(self, token: str, *, secret: str) -> TokenClaims:
        try:
            payload: dict[str, Any] = jwt.decode(
                token, secret, algorithms=[self.algorithm], options=_DECODE_OPTIONS
            )
        except jwt.PyJWTError as exc:
            raise TokenSignatureInvalid(str(exc)) from exc

        try:
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=UTC)
        except (TypeError, ValueError, OverflowError) as exc:
            raise TokenSignatureInvalid("Malformed 'exp' claim") from exc
        if expires_at <= self.clock.now():
            raise TokenExpired("Token has expired")

        subject = payload.get("sub")
        jti = payload.get("jti")
        token_type = payload.get("type")
        return TokenClaims(
            subject=str(subject) if subject is not None else None,
            jti=str(jti) if jti else None,
            expires_at=expires_at,
            token_type=str(token_type) if token_type is not None else None,
            payload=payload,
        )

    def verify_access(self, token: str) -> TokenClaims:
        return self._verify(token, secret=self._access_secret)

    def verify_refresh(self, token: str) -> TokenClaims:
        claims = self._verify(token, secret=self._refresh_secret)
        if claims.token_type != REFRESH_TOKEN_TYPE:
            raise TokenTypeMismatch("Refresh token required")
        return claims
