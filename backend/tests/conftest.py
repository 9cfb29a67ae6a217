"""Pytest fixtures for the session engine, the stores and the Flask app.

Engine tests run against the in-memory unit of work with a controllable
clock; persistence tests get a fresh in-memory SQLite database per test so
data never leaks between cases.
"""

from __future__ import annotations

import pytest

from alertify_auth.core.config import TestingConfig
from alertify_auth.core.database import Database
from alertify_auth.factory import create_app, shutdown_app
from alertify_auth.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from alertify_auth.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from alertify_auth.services.auth.service import AuthService
from alertify_auth.uow import (
    InMemoryStorage,
    InMemoryUnitOfWorkFactory,
    SQLAlchemyUnitOfWorkFactory,
)
from tests.factories import SQLAlchemySession
from tests.helpers.clock import MutableClock
from tests.helpers.constants import ACCESS_SECRET, FAST_HASH_METHOD, REFRESH_SECRET


# ------------------------------ Engine wiring ------------------------------ #
@pytest.fixture()
def clock() -> MutableClock:
    """Clock frozen at 2025-01-01T12:00Z until a test advances it."""
    return MutableClock()


@pytest.fixture()
def codec(clock) -> JWTTokenCodec:
    return JWTTokenCodec(access_secret=ACCESS_SECRET, refresh_secret=REFRESH_SECRET, clock=clock)


@pytest.fixture()
def hasher() -> WerkzeugPasswordHasher:
    """Cheap hash method; the adaptive cost is irrelevant to behaviour."""
    return WerkzeugPasswordHasher(method=FAST_HASH_METHOD)


@pytest.fixture()
def storage() -> InMemoryStorage:
    return InMemoryStorage()


@pytest.fixture()
def service(storage, codec, hasher, clock) -> AuthService:
    """Build an AuthService wired to the in-memory stores."""
    return AuthService(
        uow_factory=InMemoryUnitOfWorkFactory(storage),
        codec=codec,
        hasher=hasher,
        clock=clock,
    )


# ------------------------------- Persistence ------------------------------- #
@pytest.fixture()
def database():
    """Open a fresh in-memory SQLite database with all tables created.

    Yields
    ------
    alertify_auth.core.database.Database
        Open handle; closed after the test.
    """
    db = Database("sqlite://").open()
    db.create_all()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def session(database):
    """Session used by Factory Boy to persist fixtures rows."""
    sess = database.session()
    SQLAlchemySession.set(sess)
    try:
        yield sess
    finally:
        SQLAlchemySession.set(None)
        sess.close()


@pytest.fixture()
def sql_service(database, codec, hasher, clock) -> AuthService:
    """AuthService wired to the SQLAlchemy stores."""
    return AuthService(
        uow_factory=SQLAlchemyUnitOfWorkFactory(database),
        codec=codec,
        hasher=hasher,
        clock=clock,
    )


# ---------------------------------- Flask ---------------------------------- #
@pytest.fixture()
def app(database):
    """Create a Flask application configured for testing.

    Returns
    -------
    flask.Flask
        Application instance with :class:`TestingConfig` applied and sharing
        the test database.
    """
    flask_app = create_app(TestingConfig, database=database, instance_relative_config=False)
    flask_app.logger.setLevel("WARNING")
    try:
        yield flask_app
    finally:
        shutdown_app(flask_app)


@pytest.fixture()
def client(app):
    return app.test_client()
