"""Flask CLI wiring: ``flask auth <command>``."""

from __future__ import annotations

from flask import Flask

from .maintenance import auth_cli


def init_app(app: Flask) -> None:
    app.cli.add_command(auth_cli)
