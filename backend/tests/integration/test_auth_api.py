# tests/integration/test_auth_api.py
from __future__ import annotations

import pytest
from sqlalchemy import update

from alertify_auth.models.user import User

API = "/api/v1"
PASSWORD = "Passw0rd1"


def _register(client, email="ana@example.com", username="ana01", password=PASSWORD):
    return client.post(
        f"{API}/auth/register",
        json={"email": email, "username": username, "password": password},
    )


def _login(client, email="ana@example.com", password=PASSWORD):
    return client.post(f"{API}/auth/login", json={"email": email, "password": password})


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def session_tokens(client) -> dict:
    assert _register(client).status_code == 201
    resp = _login(client)
    assert resp.status_code == 200
    return resp.get_json()["data"]


def test_register_returns_created_user_id(client):
    resp = _register(client)

    assert resp.status_code == 201
    body = resp.get_json()
    assert isinstance(body["data"]["user_id"], int)


def test_register_duplicate_email_is_conflict(client):
    _register(client)
    resp = _register(client, username="other1")

    assert resp.status_code == 409
    assert resp.mimetype == "application/problem+json"
    problem = resp.get_json()
    assert problem["code"] == "AUTH_EMAIL_TAKEN"
    assert problem["status"] == 409
    assert problem["request_id"]


def test_register_duplicate_username_is_conflict(client):
    _register(client)
    resp = _register(client, email="other@example.com")

    assert resp.status_code == 409
    assert resp.get_json()["code"] == "AUTH_USERNAME_TAKEN"


@pytest.mark.parametrize(
    ("payload", "field"),
    [
        ({"email": "not-an-email", "username": "ana01", "password": PASSWORD}, "email"),
        ({"email": "a@example.com", "username": "ana", "password": PASSWORD}, "username"),
        ({"email": "a@example.com", "username": "ana_01", "password": PASSWORD}, "username"),
        ({"email": "a@example.com", "username": "ana01", "password": "password1"}, "password"),
        ({"email": "a@example.com", "username": "ana01", "password": "Passw0r"}, "password"),
        ({"username": "ana01", "password": PASSWORD}, "email"),
    ],
)
def test_register_validation_errors(client, payload, field):
    resp = client.post(f"{API}/auth/register", json=payload)

    assert resp.status_code == 422
    problem = resp.get_json()
    assert problem["code"] == "VALIDATION_ERROR"
    assert field in problem["details"]["errors"]


def test_login_returns_tokens_and_public_user(client, session_tokens):
    assert session_tokens["access_token"]
    assert session_tokens["refresh_token"]
    user = session_tokens["user"]
    assert user["email"] == "ana@example.com"
    assert user["username"] == "ana01"
    assert user["roles"] == ["citizen"]
    assert "password_hash" not in user


@pytest.mark.parametrize(
    ("email", "password"),
    [("ana@example.com", "Wr0ngPassword"), ("ghost@example.com", PASSWORD)],
)
def test_login_failures_are_indistinguishable(client, email, password):
    _register(client)
    resp = _login(client, email=email, password=password)

    assert resp.status_code == 401
    problem = resp.get_json()
    assert problem["code"] == "AUTH_INVALID_CREDENTIALS"
    assert problem["detail"] == "Invalid credentials"


def test_me_returns_identity_from_access_token(client, session_tokens):
    resp = client.get(f"{API}/auth/me", headers=_bearer(session_tokens["access_token"]))

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["id"] == session_tokens["user"]["id"]
    assert data["email"] == "ana@example.com"
    assert data["roles"] == ["citizen"]


def test_me_without_token_is_unauthorized(client):
    resp = client.get(f"{API}/auth/me")

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "AUTH_INVALID_TOKEN"


def test_me_rejects_refresh_token_as_bearer(client, session_tokens):
    resp = client.get(f"{API}/auth/me", headers=_bearer(session_tokens["refresh_token"]))

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "AUTH_INVALID_TOKEN"


def test_refresh_rotates_and_spends_previous_token(client, session_tokens):
    old_refresh = session_tokens["refresh_token"]

    first = client.post(f"{API}/auth/refresh", json={"refresh_token": old_refresh})
    assert first.status_code == 200
    pair = first.get_json()["data"]
    assert pair["access_token"]
    assert pair["refresh_token"] != old_refresh

    replay = client.post(f"{API}/auth/refresh", json={"refresh_token": old_refresh})
    assert replay.status_code == 401
    assert replay.get_json()["code"] == "AUTH_REFRESH_INVALID"

    again = client.post(f"{API}/auth/refresh", json={"refresh_token": pair["refresh_token"]})
    assert again.status_code == 200


def test_refresh_with_garbage_token(client):
    resp = client.post(f"{API}/auth/refresh", json={"refresh_token": "not-a-jwt"})

    assert resp.status_code == 401
    problem = resp.get_json()
    assert problem["code"] == "AUTH_REFRESH_INVALID"
    assert problem["detail"] == "Session expired. Please sign in again."


def test_refresh_requires_body_field(client):
    resp = client.post(f"{API}/auth/refresh", json={})

    assert resp.status_code == 422
    assert "refresh_token" in resp.get_json()["details"]["errors"]


def test_logout_revokes_access_token_and_refresh(client, session_tokens):
    access = session_tokens["access_token"]
    refresh = session_tokens["refresh_token"]

    resp = client.post(
        f"{API}/auth/logout", json={"refresh_token": refresh}, headers=_bearer(access)
    )
    assert resp.status_code == 200
    assert resp.get_json()["data"]["message"] == "Session closed successfully"

    me = client.get(f"{API}/auth/me", headers=_bearer(access))
    assert me.status_code == 401
    assert me.get_json()["code"] == "AUTH_TOKEN_REVOKED"

    rotated = client.post(f"{API}/auth/refresh", json={"refresh_token": refresh})
    assert rotated.status_code == 401
    assert rotated.get_json()["code"] == "AUTH_REFRESH_INVALID"


def test_logout_twice_still_succeeds(client, session_tokens):
    body = {"refresh_token": session_tokens["refresh_token"]}
    headers = _bearer(session_tokens["access_token"])

    assert client.post(f"{API}/auth/logout", json=body, headers=headers).status_code == 200
    assert client.post(f"{API}/auth/logout", json=body, headers=headers).status_code == 200


def test_logout_with_invalid_refresh_token(client):
    resp = client.post(f"{API}/auth/logout", json={"refresh_token": "not-a-jwt"})

    assert resp.status_code == 401
    assert resp.get_json()["code"] == "AUTH_REFRESH_INVALID"


def test_blocked_account_cannot_login(app, client):
    _register(client)
    database = app.extensions["auth_database"]
    with database.session() as sess:
        sess.execute(update(User).values(status="bloqueado"))
        sess.commit()

    resp = _login(client)
    assert resp.status_code == 403
    assert resp.get_json()["code"] == "AUTH_ACCOUNT_BLOCKED"


def test_unknown_route_is_problem_json(client):
    resp = client.get(f"{API}/nope")

    assert resp.status_code == 404
    problem = resp.get_json()
    assert problem["code"] == "RESOURCE_NOT_FOUND"
    assert problem["detail"] == f"Route '{API}/nope' not found"


def test_wrong_method_is_problem_json(client):
    resp = client.get(f"{API}/auth/login")

    assert resp.status_code == 405
    assert resp.get_json()["code"] == "METHOD_NOT_ALLOWED"


def test_health_reports_database(client):
    resp = client.get(f"{API}/health")

    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["status"] == "ok"
    assert data["db"] == "ok"


def test_error_responses_carry_request_id_header(client):
    resp = client.get(f"{API}/auth/me", headers={"X-Request-ID": "trace-7"})

    assert resp.headers["X-Request-ID"] == "trace-7"
    assert resp.get_json()["request_id"] == "trace-7"
