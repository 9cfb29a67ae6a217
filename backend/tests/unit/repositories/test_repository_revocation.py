# tests/unit/repositories/test_repository_revocation.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from alertify_auth.repositories import RevocationRepository
from alertify_auth.repositories.base import is_timeout, translate_timeouts, violates
from alertify_auth.services._shared.errors import StoreTimeoutError
from tests.factories.revocation import JwtBlacklistEntryFactory
from tests.factories.user import UserFactory

NOW = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


@pytest.fixture()
def repo(session) -> RevocationRepository:
    return RevocationRepository(session=session)


def test_insert_and_find(session, repo):
    user = UserFactory()
    expires = NOW + timedelta(minutes=15)

    assert repo.insert(jti="jti-a", user_id=user.id, expires_at=expires) is True
    session.commit()

    record = repo.find("jti-a")
    assert record is not None
    assert record.user_id == user.id
    assert record.expires_at == expires
    assert repo.find("missing") is None


def test_insert_is_idempotent_per_jti(session, repo):
    expires = NOW + timedelta(minutes=15)

    assert repo.insert(jti="jti-a", user_id=None, expires_at=expires) is True
    assert repo.insert(jti="jti-a", user_id=None, expires_at=expires + timedelta(hours=1)) is False
    session.commit()

    assert repo.find("jti-a").expires_at == expires


def test_delete_expired_is_strictly_before_cutoff(session, repo):
    JwtBlacklistEntryFactory(jti="old", expires_at=NOW - timedelta(seconds=1))
    JwtBlacklistEntryFactory(jti="edge", expires_at=NOW)
    JwtBlacklistEntryFactory(jti="live", expires_at=NOW + timedelta(minutes=5))

    assert repo.delete_expired(NOW) == 1
    session.commit()

    assert repo.find("old") is None
    assert repo.find("edge") is not None
    assert repo.find("live") is not None


def test_delete_expired_on_empty_table(repo):
    assert repo.delete_expired(NOW) == 0


# ------------------------------ helpers ------------------------------ #
class _DriverError(Exception):
    pass


def test_violates_matches_constraint_name_or_column():
    pg = IntegrityError("INSERT", {}, _DriverError('violates unique constraint "uq_users_email"'))
    lite = IntegrityError("INSERT", {}, _DriverError("UNIQUE constraint failed: users.username"))

    assert violates(pg, "uq_users_email")
    assert not violates(pg, "uq_users_username", column="users.username")
    assert violates(lite, "uq_users_username", column="users.username")
    assert not violates(lite, "uq_users_email", column="users.email")


def test_is_timeout_classification():
    assert is_timeout(PoolTimeoutError("QueuePool limit reached"))
    assert is_timeout(OperationalError("DELETE", {}, _DriverError("statement timeout")))
    assert is_timeout(OperationalError("COMMIT", {}, _DriverError("database is locked")))
    assert not is_timeout(OperationalError("DELETE", {}, _DriverError("no such table")))
    assert not is_timeout(ValueError("timeout"))


def test_translate_timeouts_wraps_only_timeouts():
    with pytest.raises(StoreTimeoutError), translate_timeouts():
        raise PoolTimeoutError("QueuePool limit reached")

    with pytest.raises(OperationalError), translate_timeouts():
        raise OperationalError("DELETE", {}, _DriverError("disk I/O error"))
