"""Request-scoped helpers shared by the v1 blueprints."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request
from flask_jwt_extended import verify_jwt_in_request

from alertify_auth.services.auth.service import AuthService

F = TypeVar("F", bound=Callable[..., Any])

AUTH_SERVICE_KEY = "auth_service"

log = logging.getLogger(__name__)


def get_auth_service() -> AuthService:
    """Session engine built by :func:`alertify_auth.factory.create_app`."""
    return cast(AuthService, current_app.extensions[AUTH_SERVICE_KEY])


def bearer_token() -> str | None:
    """Raw token from ``Authorization: Bearer <token>``; ``None`` when absent."""
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


def require_auth(view: F) -> F:
    """
    Reject the request unless it carries a valid, non-revoked access token.

    Verification (signature, expiry, ``jti``/``exp`` presence, blacklist) is
    delegated to the Flask-JWT-Extended loaders in
    :mod:`alertify_auth.core.extensions`.
    """

    @wraps(view)
    def guarded(*args: Any, **kwargs: Any):
        verify_jwt_in_request()
        return view(*args, **kwargs)

    return cast(F, guarded)


def json_response(payload: Any, *, status: int = 200) -> Response:
    response = jsonify(payload)
    response.status_code = status
    return response


def timing(view: F) -> F:
    """Log the handler duration at debug level with endpoint and status."""

    @wraps(view)
    def timed(*args: Any, **kwargs: Any):
        started = time.perf_counter()
        status: int | None = None
        try:
            result = view(*args, **kwargs)
            status = getattr(result, "status_code", None)
            return result
        finally:
            log.debug(
                "Handled %s",
                request.endpoint,
                extra={
                    "endpoint": request.endpoint,
                    "status": status,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

    return cast(F, timed)
