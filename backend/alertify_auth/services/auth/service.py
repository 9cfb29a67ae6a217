# alertify_auth/services/auth/service.py
from __future__ import annotations

import hmac
import logging
from collections.abc import Callable

from alertify_auth.services._shared.base import BaseService
from alertify_auth.services._shared.dto import SideEffectOutcome
from alertify_auth.services._shared.errors import (
    AuthError,
    ErrorCode,
    email_taken,
    username_taken,
)
from alertify_auth.services._shared.policies.account_status import ensure_account_enabled
from alertify_auth.services._shared.ports import (
    AccessSubject,
    AuditAction,
    Clock,
    IssuedToken,
    PasswordHasher,
    RevocationRecord,
    TokenCodec,
    TokenVerificationError,
    refresh_digest,
)
from alertify_auth.services.auth.dto import (
    LoginIn,
    LoginOut,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    RegisterIn,
    RegisterOut,
    TokenPairOut,
    UserPublicOut,
)
from alertify_auth.uow.base import UnitOfWork, UnitOfWorkFactory

log = logging.getLogger(__name__)

DEFAULT_ROLE = "citizen"
ACTIVE_STATUS = "active"

SESSION_EXPIRED_MESSAGE = "Session expired. Please sign in again."
SESSION_INVALID_MESSAGE = "Invalid session. Please sign in again."
LOGOUT_MESSAGE = "Session closed successfully"


def _refresh_invalid(message: str = SESSION_INVALID_MESSAGE) -> AuthError:
    return AuthError.unauthorized(ErrorCode.REFRESH_INVALID, message)


class AuthService(BaseService):
    """
    Session engine: registration, login, refresh rotation, logout and the
    access-token blacklist check.

    The service owns every session invariant. It reaches storage only through
    units of work (credential store, revocation store, audit log), signs and
    verifies tokens through a :class:`TokenCodec`, and reads time from the
    injected clock.

    Security
    --------
    - Only the SHA-256 digest of the live refresh token is stored; a presented
      refresh token is valid only while its digest equals the stored one and
      the stored expiry is in the future.
    - Rotation overwrites the stored digest with a compare-and-swap, so a
      superseded or replayed refresh token is rejected.
    - Logout clears the refresh credential and blacklists the access token
      ``jti`` in a single transaction.
    """

    def __init__(
        self,
        *,
        uow_factory: UnitOfWorkFactory,
        codec: TokenCodec,
        hasher: PasswordHasher,
        clock: Clock | None = None,
        default_role: str = DEFAULT_ROLE,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param uow_factory: Producer of read-only / read-write units of work.
        :param codec: Adapter for issuing/verifying JWTs.
        :param hasher: Adaptive password hash primitive.
        :param clock: Time source shared with the codec.
        :param default_role: Role granted on registration.
        """
        super().__init__(uow_factory=uow_factory, clock=clock)
        self.codec = codec
        self.hasher = hasher
        self.default_role = default_role

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> RegisterOut:
        """
        Create an active user with the default role.

        :param dto: Registration input.
        :returns: Identifier of the new user.
        :raises AuthError: ``AUTH_EMAIL_TAKEN``, ``AUTH_USERNAME_TAKEN`` or
            ``AUTH_UNEXPECTED_ERROR``.
        """
        with self.ro_uow() as uow:
            if uow.users.find_by_email(dto.email) is not None:
                raise email_taken()
            if uow.users.find_by_username(dto.username) is not None:
                raise username_taken()

        password_hash = self.hasher.hash(dto.password)
        now = self.clock.now()

        def _create(uow: UnitOfWork) -> int:
            user = uow.users.create_user(
                email=dto.email,
                username=dto.username,
                password_hash=password_hash,
                status=ACTIVE_STATUS,
                roles=(self.default_role,),
            )
            uow.audit_logs.record(user_id=user.id, action=AuditAction.USER_REGISTERED, at=now)
            return user.id

        try:
            user_id = self.run_transaction(_create)
        except AuthError:
            # Uniqueness races detected at write time keep their conflict code.
            raise
        except Exception:
            log.exception("Registration transaction failed (username=%s)", dto.username)
            raise AuthError.internal() from None

        log.info("User registered (user_id=%s)", user_id)
        return RegisterOut(user_id=user_id)

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        Unknown email and wrong password are indistinguishable to the caller.

        :param dto: Login input.
        :returns: Access/refresh tokens and the public user projection.
        :raises AuthError: ``AUTH_INVALID_CREDENTIALS``, ``AUTH_ACCOUNT_BLOCKED``
            or ``AUTH_ACCOUNT_INACTIVE``.
        """
        with self.ro_uow() as uow:
            user = uow.users.find_by_email_with_roles(dto.email)

        if user is None or not self.hasher.verify(dto.password, user.password_hash):
            raise AuthError.unauthorized(ErrorCode.INVALID_CREDENTIALS, "Invalid credentials")
        ensure_account_enabled(user.status)

        access = self.codec.issue_access(
            AccessSubject(id=user.id, email=user.email, roles=user.roles)
        )
        refresh = self.codec.issue_refresh(user.id)

        outcome = self._record_login(user.id, refresh)
        if not outcome.ok:
            log.warning(
                "Login bookkeeping failed (user_id=%s); refresh token will not be accepted",
                user.id,
                exc_info=outcome.error,
            )

        return LoginOut(
            access_token=access.token,
            refresh_token=refresh.token,
            user=UserPublicOut(
                id=user.id,
                email=user.email,
                username=user.username,
                roles=tuple(user.roles),
            ),
        )

    def _record_login(self, user_id: int, refresh: IssuedToken) -> SideEffectOutcome:
        """Persist the refresh credential and the audit entry; never raises."""
        now = self.clock.now()

        def _persist(uow: UnitOfWork) -> None:
            uow.users.update_refresh_credential(
                user_id,
                digest=refresh_digest(refresh.token),
                expires_at=refresh.expires_at,
            )
            uow.audit_logs.record(user_id=user_id, action=AuditAction.LOGIN_SUCCEEDED, at=now)

        return self._side_effect("login_bookkeeping", _persist)

    # ------------------------------------------------------------------ #
    # Refresh with single-use rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        :param dto: Refresh input.
        :returns: New access/refresh pair; the presented refresh token is spent.
        :raises AuthError: ``AUTH_REFRESH_INVALID``, ``AUTH_ACCOUNT_BLOCKED``,
            ``AUTH_ACCOUNT_INACTIVE`` or ``AUTH_UNEXPECTED_ERROR``.
        """
        try:
            claims = self.codec.verify_refresh(dto.refresh_token)
        except TokenVerificationError:
            raise _refresh_invalid(SESSION_EXPIRED_MESSAGE) from None

        user_id = self._coerce_user_id(claims.subject)
        if user_id is None:
            raise _refresh_invalid(SESSION_EXPIRED_MESSAGE)

        with self.ro_uow() as uow:
            user = uow.users.find_by_id_with_roles(user_id)
        if user is None:
            raise _refresh_invalid()
        ensure_account_enabled(user.status)

        presented = refresh_digest(dto.refresh_token)
        stored = user.refresh_token_hash
        stored_expiry = user.refresh_token_expires_at
        if (
            stored is None
            or stored_expiry is None
            or not hmac.compare_digest(stored, presented)
            or stored_expiry <= self.clock.now()
        ):
            raise _refresh_invalid()

        access = self.codec.issue_access(
            AccessSubject(id=user.id, email=user.email, roles=user.roles)
        )
        rotated = self.codec.issue_refresh(user.id)

        def _rotate(uow: UnitOfWork) -> bool:
            return uow.users.update_refresh_credential(
                user.id,
                digest=refresh_digest(rotated.token),
                expires_at=rotated.expires_at,
                expected_digest=presented,
            )

        try:
            swapped = self.run_transaction(_rotate)
        except Exception:
            log.exception("Refresh rotation failed (user_id=%s)", user.id)
            raise AuthError.internal() from None

        if not swapped:
            # A concurrent rotation already consumed this token.
            raise _refresh_invalid()

        return TokenPairOut(access_token=access.token, refresh_token=rotated.token)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> LogoutOut:
        """
        Close the session bound to a refresh token and revoke the access token.

        Only an invalid refresh token fails the call; storage failures are
        logged and the success message is returned anyway.

        :param dto: Logout input.
        :returns: Confirmation message.
        :raises AuthError: ``AUTH_REFRESH_INVALID``.
        """
        try:
            claims = self.codec.verify_refresh(dto.refresh_token)
        except TokenVerificationError:
            raise _refresh_invalid(SESSION_EXPIRED_MESSAGE) from None

        user_id = self._coerce_user_id(claims.subject)
        revocation = self._revocation_for(dto.access_token)

        def _close(uow: UnitOfWork) -> None:
            if user_id is not None:
                uow.users.clear_refresh_credential(user_id)
            if revocation is not None:
                # False means the jti is already blacklisted.
                uow.revocations.insert(
                    jti=revocation.jti,
                    user_id=revocation.user_id,
                    expires_at=revocation.expires_at,
                )

        outcome = self._side_effect("logout", _close)
        if not outcome.ok:
            log.error("Logout bookkeeping failed (user_id=%s)", user_id, exc_info=outcome.error)

        return LogoutOut(message=LOGOUT_MESSAGE)

    def _revocation_for(self, access_token: str | None) -> RevocationRecord | None:
        """Build the blacklist entry for a verifiable access token, else ``None``."""
        if not access_token:
            return None
        try:
            claims = self.codec.verify_access(access_token)
        except TokenVerificationError as exc:
            log.debug("Ignoring unverifiable access token on logout: %s", exc)
            return None
        if claims.jti is None or claims.expires_at is None:
            return None
        return RevocationRecord(
            jti=claims.jti,
            user_id=self._coerce_user_id(claims.subject),
            expires_at=claims.expires_at,
        )

    def _side_effect(
        self, operation: str, fn: Callable[[UnitOfWork], object]
    ) -> SideEffectOutcome:
        """Run a non-critical transaction and report its outcome instead of raising."""
        try:
            self.run_transaction(fn)
        except Exception as exc:
            return SideEffectOutcome(operation=operation, error=exc)
        return SideEffectOutcome(operation=operation)

    # ------------------------------------------------------------------ #
    # Blacklist check
    # ------------------------------------------------------------------ #

    def is_blacklisted(self, jti: str) -> bool:
        """
        Tell whether an access token ``jti`` has been revoked.

        Records past their expiry count as absent; they are left for the
        cleanup job.

        :param jti: Access token identifier.
        :returns: ``True`` while an unexpired revocation record exists.
        """
        with self.ro_uow() as uow:
            record = uow.revocations.find(jti)
        if record is None:
            return False
        return record.expires_at > self.clock.now()

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    @staticmethod
    def _coerce_user_id(subject: int | str | None) -> int | None:
        """Interpret a JWT subject as an integer user id, ``None`` when it is not one."""
        if isinstance(subject, int):
            return subject
        if isinstance(subject, str) and subject.isdigit():
            return int(subject)
        return None
