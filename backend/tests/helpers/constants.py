"""Secrets and cheap hashing parameters shared by fixtures and tests."""

from __future__ import annotations

ACCESS_SECRET = "unit-access-secret-0123456789abcdef"
REFRESH_SECRET = "unit-refresh-secret-0123456789abcdef"
FAST_HASH_METHOD = "pbkdf2:sha256:1000"
