"""Authentication endpoints using the session engine."""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, request
from flask_jwt_extended import get_jwt

from alertify_auth.api.deps import (
    bearer_token,
    get_auth_service,
    json_response,
    require_auth,
    timing,
)
from alertify_auth.schemas import (
    LoginResponseSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    WhoAmISchema,
)
from alertify_auth.services.auth.dto import LoginIn, LogoutIn, RefreshIn, RegisterIn

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
login_response_schema = LoginResponseSchema()
token_pair_schema = TokenPairSchema()
whoami_schema = WhoAmISchema()


def _payload() -> dict:
    return request.get_json(silent=True) or {}


@bp.post("/register")
@timing
def register():
    """Register a new user; tokens are obtained through ``/login``."""

    data = register_schema.load(_payload())
    result = get_auth_service().register(RegisterIn(**data))
    return json_response({"data": {"user_id": result.user_id}}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = login_schema.load(_payload())
    result = get_auth_service().login(LoginIn(**data))
    return json_response({"data": login_response_schema.dump(asdict(result))})


@bp.post("/refresh")
@timing
def refresh():
    """Rotate the refresh token; the presented one is spent."""

    data = refresh_schema.load(_payload())
    pair = get_auth_service().refresh(RefreshIn(refresh_token=data["refresh_token"]))
    return json_response({"data": token_pair_schema.dump(asdict(pair))})


@bp.post("/logout")
@timing
def logout():
    """Close the session and blacklist the bearer access token, when sent."""

    data = logout_schema.load(_payload())
    result = get_auth_service().logout(
        LogoutIn(refresh_token=data["refresh_token"], access_token=bearer_token())
    )
    return json_response({"data": {"message": result.message}})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the identity carried by the verified access token."""

    claims = get_jwt()
    identity = {
        "id": int(claims["sub"]),
        "email": claims.get("email", ""),
        "roles": list(claims.get("roles", [])),
    }
    return json_response({"data": whoami_schema.dump(identity)})
