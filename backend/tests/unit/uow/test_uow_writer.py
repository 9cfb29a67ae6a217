# tests/unit/uow/test_uow_writer.py
from __future__ import annotations

from datetime import UTC, datetime

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from alertify_auth.services._shared.errors import StoreTimeoutError
from alertify_auth.services._shared.ports import AuditAction
from alertify_auth.uow import SQLAlchemyUnitOfWork, SQLAlchemyUnitOfWorkFactory

AT = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


def _create(uow, email="ana@example.com", username="ana01"):
    return uow.users.create_user(
        email=email,
        username=username,
        password_hash="hash",
        status="active",
        roles=("citizen",),
    )


def test_commits_on_clean_exit(database):
    uow_factory = SQLAlchemyUnitOfWorkFactory(database)

    with uow_factory() as uow:
        user = _create(uow)
        uow.audit_logs.record(user_id=user.id, action=AuditAction.USER_REGISTERED, at=AT)

    with uow_factory(read_only=True) as uow:
        stored = uow.users.find_by_email_with_roles("ana@example.com")
    assert stored is not None
    assert stored.roles == ("citizen",)


def test_rolls_back_on_exception(database):
    uow_factory = SQLAlchemyUnitOfWorkFactory(database)

    with pytest.raises(RuntimeError), uow_factory() as uow:
        _create(uow)
        raise RuntimeError("boom")

    with uow_factory(read_only=True) as uow:
        assert uow.users.find_by_email("ana@example.com") is None


def test_repositories_share_the_unit_session(database):
    uow = SQLAlchemyUnitOfWork(database)
    try:
        assert uow.users.session is uow.session
        assert uow.revocations.session is uow.session
        assert uow.audit_logs.session is uow.session
    finally:
        uow.session.close()


def test_explicit_commit_inside_block(database):
    uow_factory = SQLAlchemyUnitOfWorkFactory(database)

    with uow_factory() as uow:
        _create(uow)
        uow.commit()
        _create(uow, email="other@example.com", username="other1")
        uow.rollback()

    with uow_factory(read_only=True) as uow:
        assert uow.users.find_by_email("ana@example.com") is not None
        assert uow.users.find_by_email("other@example.com") is None


def test_commit_timeout_is_translated_and_rolled_back(database, monkeypatch):
    uow_factory = SQLAlchemyUnitOfWorkFactory(database)

    def _lock_timeout(self):
        raise OperationalError("COMMIT", {}, Exception("lock wait timeout exceeded"))

    monkeypatch.setattr(Session, "commit", _lock_timeout)
    with pytest.raises(StoreTimeoutError), uow_factory() as uow:
        _create(uow)
    monkeypatch.undo()

    with uow_factory(read_only=True) as uow:
        assert uow.users.find_by_email("ana@example.com") is None


def test_commit_failure_other_than_timeout_propagates(database, monkeypatch):
    def _disk_io(self):
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(Session, "commit", _disk_io)
    with pytest.raises(OperationalError), SQLAlchemyUnitOfWorkFactory(database)() as uow:
        _create(uow)
