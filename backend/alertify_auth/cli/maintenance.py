"""Flask CLI commands for schema creation and blacklist maintenance."""

from __future__ import annotations

import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from alertify_auth.core.database import Database
from alertify_auth.services.cleanup.service import RevocationCleanupScheduler

LOGGER = logging.getLogger(__name__)


def _database() -> Database:
    return current_app.extensions["auth_database"]


@click.group("auth")
def auth_cli() -> None:
    """Maintenance commands for the authentication service."""


@auth_cli.command("init-db")
@with_appcontext
def init_db() -> None:
    """Create all tables for the configured database."""
    database = _database()
    database.create_all()
    LOGGER.info("Schema created")
    click.echo(f"Tables created ({database.engine.dialect.name}).")


@auth_cli.command("cleanup-blacklist")
@with_appcontext
def cleanup_blacklist() -> None:
    """Delete expired access-token blacklist entries once."""
    scheduler: RevocationCleanupScheduler = current_app.extensions["auth_cleanup"]
    deleted = scheduler.run_once()
    click.echo(f"Deleted {deleted} expired blacklist entries.")
