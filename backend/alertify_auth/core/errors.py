"""
RFC 7807 problem responses for every error leaving the API.

Bodies are ``application/problem+json`` and always carry the stable
``code`` and the request correlation id. Store text and stack traces are
logged server-side only.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError
from werkzeug.exceptions import HTTPException

from alertify_auth.core.logger import ensure_request_id
from alertify_auth.services._shared.errors import AuthError, ErrorCode, ErrorKind

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"

VALIDATION_ERROR = "VALIDATION_ERROR"
RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
BAD_REQUEST = "BAD_REQUEST"

_HTTP_CODES: dict[int, str] = {
    HTTPStatus.BAD_REQUEST: BAD_REQUEST,
    HTTPStatus.UNAUTHORIZED: ErrorCode.INVALID_TOKEN.value,
    HTTPStatus.NOT_FOUND: RESOURCE_NOT_FOUND,
    HTTPStatus.METHOD_NOT_ALLOWED: METHOD_NOT_ALLOWED,
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "UNSUPPORTED_MEDIA_TYPE",
    HTTPStatus.INTERNAL_SERVER_ERROR: ErrorCode.UNEXPECTED_ERROR.value,
}


def status_for(kind: ErrorKind) -> HTTPStatus:
    """Project an :class:`ErrorKind` onto its HTTP status."""
    match kind:
        case ErrorKind.CONFLICT:
            return HTTPStatus.CONFLICT
        case ErrorKind.UNAUTHORIZED:
            return HTTPStatus.UNAUTHORIZED
        case ErrorKind.FORBIDDEN:
            return HTTPStatus.FORBIDDEN
        case ErrorKind.INTERNAL:
            return HTTPStatus.INTERNAL_SERVER_ERROR


def as_problem(
    *, status: int, code: str, message: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    """
    Build the problem document.

    :param status: HTTP status code.
    :param code: Stable machine-readable code.
    :param message: Client-safe summary, sent as ``detail``.
    :param details: Optional structured payload (e.g. field errors).
    :returns: Problem dictionary including ``request_id``.
    """
    problem: dict[str, Any] = {
        "type": "about:blank",
        "title": HTTPStatus(status).phrase,
        "status": int(status),
        "detail": message,
        "code": code,
        "instance": request.path if has_request_context() else None,
        "request_id": ensure_request_id(),
    }
    if details:
        problem["details"] = details
    return problem


def problem_response(
    *, status: int, code: str, message: str, details: dict[str, Any] | None = None
) -> tuple[Response, int]:
    """Render a problem document; 4xx log at warning level, 5xx at error."""
    problem = as_problem(status=status, code=code, message=message, details=details)
    log.log(
        logging.ERROR if status >= 500 else logging.WARNING,
        "Problem %s (status=%s): %s",
        code,
        int(status),
        message,
        extra={"status": int(status)},
    )
    response = jsonify(problem)
    response.mimetype = PROBLEM_MIMETYPE
    return response, int(status)


# --------------------------------------------------------------------------- #
# Handlers
# --------------------------------------------------------------------------- #


def _handle_auth_error(err: AuthError):
    return problem_response(status=status_for(err.kind), code=err.code.value, message=err.message)


def _handle_validation_error(err: ValidationError):
    return problem_response(
        status=HTTPStatus.UNPROCESSABLE_ENTITY,
        code=VALIDATION_ERROR,
        message="Validation failed",
        details={"errors": err.normalized_messages()},
    )


def _handle_http_exception(err: HTTPException):
    status = err.code or HTTPStatus.INTERNAL_SERVER_ERROR
    code = _HTTP_CODES.get(status, "HTTP_ERROR")
    if status == HTTPStatus.NOT_FOUND:
        message = f"Route '{request.path}' not found"
    else:
        message = (err.description or HTTPStatus(status).phrase).strip()
    return problem_response(status=status, code=code, message=message)


def _handle_unexpected(err: Exception):
    log.error("Unhandled exception", exc_info=err)
    return problem_response(
        status=HTTPStatus.INTERNAL_SERVER_ERROR,
        code=ErrorCode.UNEXPECTED_ERROR.value,
        message=AuthError.internal().message,
    )


def init_app(app: Flask) -> None:
    app.register_error_handler(AuthError, _handle_auth_error)
    app.register_error_handler(ValidationError, _handle_validation_error)
    app.register_error_handler(HTTPException, _handle_http_exception)
    app.register_error_handler(Exception, _handle_unexpected)
