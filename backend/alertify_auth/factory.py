"""Application factory wiring the database, the session engine and Flask extensions."""

from __future__ import annotations

import logging

from flask import Flask

from alertify_auth.core.config import BaseConfig, get_config, secret_problems
from alertify_auth.core.database import Database
from alertify_auth.core.logger import configure_logging
from alertify_auth.core.logger import init_app as init_logging
from alertify_auth.infra.jwt.pyjwt_token_codec import JWTTokenCodec
from alertify_auth.infra.security.werkzeug_password_hasher import WerkzeugPasswordHasher
from alertify_auth.services._shared.ports import parse_ttl
from alertify_auth.services._shared.ports.token_codec import (
    DEFAULT_ACCESS_TTL,
    DEFAULT_REFRESH_TTL,
)
from alertify_auth.services.auth.service import AuthService
from alertify_auth.services.cleanup.service import RevocationCleanupScheduler
from alertify_auth.uow.sqlalchemy_uow import SQLAlchemyUnitOfWorkFactory

log = logging.getLogger(__name__)


def _check_secrets(app: Flask) -> None:
    """Refuse placeholder or shared JWT secrets in production; warn elsewhere."""
    problems = secret_problems(
        app.config.get("JWT_ACCESS_SECRET"), app.config.get("JWT_REFRESH_SECRET")
    )
    if not problems:
        return
    if app.config.get("ENV_NAME") == "production":
        raise RuntimeError("Insecure JWT configuration: " + "; ".join(problems))
    for problem in problems:
        log.warning("Insecure JWT configuration: %s", problem)


def _build_services(app: Flask, database: Database) -> None:
    cfg = app.config
    uow_factory = SQLAlchemyUnitOfWorkFactory(database)
    codec = JWTTokenCodec(
        access_secret=cfg["JWT_ACCESS_SECRET"],
        refresh_secret=cfg["JWT_REFRESH_SECRET"],
        access_ttl=parse_ttl(cfg.get("JWT_ACCESS_TTL"), DEFAULT_ACCESS_TTL),
        refresh_ttl=parse_ttl(cfg.get("JWT_REFRESH_TTL"), DEFAULT_REFRESH_TTL),
        algorithm=cfg.get("JWT_ALGORITHM", "HS256"),
    )
    app.extensions["auth_service"] = AuthService(
        uow_factory=uow_factory,
        codec=codec,
        hasher=WerkzeugPasswordHasher(method=cfg.get("PASSWORD_HASH_METHOD", "scrypt")),
        default_role=cfg.get("DEFAULT_ROLE", "citizen"),
    )
    app.extensions["auth_cleanup"] = RevocationCleanupScheduler(
        uow_factory=uow_factory,
        interval=cfg.get("BLACKLIST_CLEANUP_INTERVAL_SECONDS") or 3600.0,
        retry_backoff=cfg.get("BLACKLIST_CLEANUP_RETRY_BACKOFF_SECONDS") or 3.0,
    )


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    database: Database | None = None,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """
    Build and configure the Flask application.

    :param config: Config object or import path; defaults to ``APP_ENV`` selection.
    :param database: Pre-built database handle (tests); otherwise one is
        constructed from ``DATABASE_URL`` and opened here.
    :returns: Configured application. Call :func:`shutdown_app` to release it.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))
    _check_secrets(app)

    if database is None:
        database = Database(
            app.config["DATABASE_URL"],
            echo=bool(app.config.get("SQLALCHEMY_ECHO")),
            pool_timeout=app.config.get("DATABASE_POOL_TIMEOUT"),
        )
    app.extensions["auth_database"] = database.open()
    _build_services(app, database)

    from alertify_auth.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from alertify_auth.core import cors

    cors.init_app(app)

    from alertify_auth.api import init_app as init_api

    init_api(app)

    from alertify_auth.core import errors

    errors.init_app(app)

    from alertify_auth import cli as app_cli

    app_cli.init_app(app)

    if app.config.get("BLACKLIST_CLEANUP_ENABLED"):
        app.extensions["auth_cleanup"].start()

    return app


def shutdown_app(app: Flask) -> None:
    """Stop background jobs and close the database handle."""
    scheduler: RevocationCleanupScheduler | None = app.extensions.get("auth_cleanup")
    if scheduler is not None:
        scheduler.stop()
    database: Database | None = app.extensions.get("auth_database")
    if database is not None:
        database.close()
