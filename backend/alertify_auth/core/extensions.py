"""Flask extension instances and the bearer-token gate callbacks."""

from __future__ import annotations

from http import HTTPStatus
from typing import Any

from flask import Flask
from flask_jwt_extended import JWTManager

from alertify_auth.core.errors import problem_response
from alertify_auth.services._shared.errors import ErrorCode

jwt = JWTManager()

INVALID_TOKEN_MESSAGE = "Invalid or missing access token."
REVOKED_TOKEN_MESSAGE = "Session closed. Please sign in again."


def _invalid_token(*_: Any):
    return problem_response(
        status=HTTPStatus.UNAUTHORIZED,
        code=ErrorCode.INVALID_TOKEN.value,
        message=INVALID_TOKEN_MESSAGE,
    )


@jwt.token_in_blocklist_loader
def _is_revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
    from alertify_auth.api.deps import get_auth_service

    jti = jwt_payload.get("jti")
    if not jti:
        # Rejected by the verification loader below.
        return False
    return get_auth_service().is_blacklisted(jti)


@jwt.token_verification_loader
def _has_required_claims(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]) -> bool:
    return bool(jwt_payload.get("jti")) and "exp" in jwt_payload


@jwt.revoked_token_loader
def _revoked(jwt_header: dict[str, Any], jwt_payload: dict[str, Any]):
    return problem_response(
        status=HTTPStatus.UNAUTHORIZED,
        code=ErrorCode.TOKEN_REVOKED.value,
        message=REVOKED_TOKEN_MESSAGE,
    )


jwt.unauthorized_loader(_invalid_token)
jwt.invalid_token_loader(_invalid_token)
jwt.expired_token_loader(_invalid_token)
jwt.token_verification_failed_loader(_invalid_token)


def init_app(app: Flask) -> None:
    """Bind the JWT manager; the gate verifies with the access secret."""
    app.config.setdefault("JWT_SECRET_KEY", app.config["JWT_ACCESS_SECRET"])
    app.config.setdefault("JWT_TOKEN_LOCATION", ["headers"])
    jwt.init_app(app)
