"""Liveness probe reporting whether the credential database answers."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from alertify_auth.api.deps import json_response, timing
from alertify_auth.core.database import Database

bp = Blueprint("health", __name__)

log = logging.getLogger(__name__)


def _database_status(database: Database | None) -> str:
    if database is None or not database.is_open:
        return "closed"
    try:
        with database.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.exception("Health probe could not reach the database")
        return "fail"
    return "ok"


@bp.get("/health")
@timing
def health():
    payload = {
        "status": "ok",
        "db": _database_status(current_app.extensions.get("auth_database")),
        "version": current_app.config.get("APP_VERSION", "dev"),
    }
    return json_response({"data": payload})
