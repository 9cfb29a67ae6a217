# tests/integration/test_cli.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

from sqlalchemy import inspect

from tests.factories.revocation import JwtBlacklistEntryFactory


def test_init_db_creates_tables(app):
    database = app.extensions["auth_database"]
    database.drop_all()

    result = app.test_cli_runner().invoke(args=["auth", "init-db"])

    assert result.exit_code == 0
    assert "Tables created (sqlite)." in result.output
    tables = set(inspect(database.engine).get_table_names())
    assert {"users", "roles", "user_roles", "jwt_blacklist", "audit_logs"} <= tables


def test_cleanup_blacklist_deletes_expired_entries(app, session):
    now = datetime.now(UTC)
    JwtBlacklistEntryFactory(jti="expired-1", expires_at=now - timedelta(minutes=1))
    JwtBlacklistEntryFactory(jti="expired-2", expires_at=now - timedelta(days=1))
    JwtBlacklistEntryFactory(jti="live", expires_at=now + timedelta(minutes=10))

    result = app.test_cli_runner().invoke(args=["auth", "cleanup-blacklist"])

    assert result.exit_code == 0
    assert "Deleted 2 expired blacklist entries." in result.output
    assert app.extensions["auth_service"].is_blacklisted("live")
