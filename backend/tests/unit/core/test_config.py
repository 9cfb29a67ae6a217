# tests/unit/core/test_config.py
from __future__ import annotations

import pytest

from alertify_auth.core.config import (
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    env_bool,
    env_float,
    get_config,
    secret_problems,
)
from alertify_auth.factory import create_app, shutdown_app


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("production", ProductionConfig),
        ("Testing", TestingConfig),
        ("development", DevelopmentConfig),
        ("staging", DevelopmentConfig),
    ],
)
def test_get_config_selects_by_app_env(monkeypatch, name, expected):
    monkeypatch.setenv("APP_ENV", name)
    assert get_config() is expected


def test_get_config_defaults_to_development(monkeypatch):
    monkeypatch.delenv("APP_ENV", raising=False)
    assert get_config() is DevelopmentConfig


@pytest.mark.parametrize(("raw", "expected"), [("1", True), ("Yes", True), ("off", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("SOME_FLAG", raw)
    assert env_bool("SOME_FLAG") is expected


def test_env_bool_and_float_defaults(monkeypatch):
    monkeypatch.delenv("SOME_FLAG", raising=False)
    monkeypatch.setenv("SOME_FLOAT", "not-a-number")
    assert env_bool("SOME_FLAG", default=True) is True
    assert env_float("SOME_FLOAT", 2.5) == 2.5
    monkeypatch.setenv("SOME_FLOAT", "0.25")
    assert env_float("SOME_FLOAT", 2.5) == 0.25


def test_secret_problems():
    assert secret_problems("access-key-1", "refresh-key-2") == []
    assert len(secret_problems("CHANGE_ME_ACCESS", "CHANGE_ME_REFRESH")) == 2
    assert secret_problems(None, "refresh-key-2") == [
        "JWT_ACCESS_SECRET is missing or a placeholder"
    ]
    assert secret_problems("same-key", "same-key") == [
        "JWT_ACCESS_SECRET and JWT_REFRESH_SECRET must differ"
    ]


def test_production_refuses_placeholder_secrets(database):
    class InsecureProduction(ProductionConfig):
        JWT_ACCESS_SECRET = "CHANGE_ME_ACCESS"
        JWT_REFRESH_SECRET = "CHANGE_ME_REFRESH"

    with pytest.raises(RuntimeError, match="Insecure JWT configuration"):
        create_app(InsecureProduction, database=database, instance_relative_config=False)


def test_production_refuses_shared_secret(database):
    class SharedSecretProduction(ProductionConfig):
        JWT_ACCESS_SECRET = "one-key-for-everything"
        JWT_REFRESH_SECRET = "one-key-for-everything"

    with pytest.raises(RuntimeError, match="must differ"):
        create_app(SharedSecretProduction, database=database, instance_relative_config=False)


def test_testing_config_wires_services(app):
    assert app.config["ENV_NAME"] == "testing"
    assert app.config["JWT_SECRET_KEY"] == app.config["JWT_ACCESS_SECRET"]
    assert app.extensions["auth_cleanup"].running is False
    assert app.extensions["auth_database"].is_open


def test_cleanup_thread_is_opt_in_outside_production(database):
    class LocalDevelopment(DevelopmentConfig):
        JWT_ACCESS_SECRET = "dev-access-secret-0123456789abcdef"
        JWT_REFRESH_SECRET = "dev-refresh-secret-0123456789abcdef"

    assert LocalDevelopment.BLACKLIST_CLEANUP_ENABLED is False
    app = create_app(LocalDevelopment, database=database, instance_relative_config=False)
    try:
        assert app.extensions["auth_cleanup"].running is False
    finally:
        shutdown_app(app)


def test_production_starts_and_stops_cleanup_thread(database):
    class SecureProduction(ProductionConfig):
        JWT_ACCESS_SECRET = "prod-access-secret-0123456789abcdef"
        JWT_REFRESH_SECRET = "prod-refresh-secret-0123456789abcdef"

    assert SecureProduction.BLACKLIST_CLEANUP_ENABLED is True
    app = create_app(SecureProduction, database=database, instance_relative_config=False)
    scheduler = app.extensions["auth_cleanup"]
    try:
        assert scheduler.running is True
    finally:
        shutdown_app(app)
    assert scheduler.running is False
