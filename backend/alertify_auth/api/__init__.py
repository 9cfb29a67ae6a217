"""HTTP delivery layer: mounts every API version under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Sequence

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """Join URL segments into a single absolute prefix (``"/api", "v1/"`` -> ``"/api/v1"``)."""
    parts = [segment.strip("/") for segment in segments if segment.strip("/")]
    return "/" + "/".join(parts)


def mount_version(app: Flask, prefix: str, routes: Sequence[tuple[Blueprint, str]]) -> None:
    """
    Register one API version's blueprints.

    :param app: Application receiving the blueprints.
    :param prefix: Absolute version prefix, e.g. ``/api/v1``.
    :param routes: ``(blueprint, relative_prefix)`` pairs; an empty relative
        prefix mounts the blueprint directly on the version root.
    """
    for blueprint, relative in routes:
        app.register_blueprint(blueprint, url_prefix=join_prefix(prefix, relative))


def init_app(app: Flask) -> None:
    from alertify_auth.api import v1

    base = app.config.get("API_BASE_PREFIX", "/api")
    mount_version(app, join_prefix(base, v1.API_VERSION), v1.ROUTES)


__all__ = ["init_app", "join_prefix", "mount_version"]
