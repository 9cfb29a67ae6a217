"""Cross-origin policy for the API prefix."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

from alertify_auth.core.logger import REQUEST_ID_HEADER


def parse_origins(raw: str | None) -> list[str] | str:
    """Split ``CORS_ORIGINS``; blank or ``*`` means any origin."""
    origins = [origin.strip() for origin in (raw or "").split(",") if origin.strip()]
    if not origins or "*" in origins:
        return "*"
    return origins


def init_app(app: Flask) -> None:
    """
    Enable CORS on ``{API_BASE_PREFIX}/*``.

    Credentials (the bearer header) are only allowed with an explicit origin
    list; the request id header is exposed so browsers can report it.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    prefix = app.config.get("API_BASE_PREFIX", "/api").rstrip("/")
    CORS(
        app,
        resources={f"{prefix}/*": {"origins": origins}},
        supports_credentials=origins != "*",
        expose_headers=[REQUEST_ID_HEADER],
        max_age=app.config.get("CORS_MAX_AGE"),
    )
