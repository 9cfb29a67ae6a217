"""Version 1 of the authentication API."""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth
from .health import bp as health

API_VERSION = "v1"

ROUTES: tuple[tuple[Blueprint, str], ...] = (
    (health, ""),
    (auth, "auth"),
)
