"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginResponseSchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    RegisterSchema,
    TokenPairSchema,
    UserPublicSchema,
    WhoAmISchema,
)

__all__ = [
    "LoginResponseSchema",
    "LoginSchema",
    "LogoutSchema",
    "RefreshSchema",
    "RegisterSchema",
    "TokenPairSchema",
    "UserPublicSchema",
    "WhoAmISchema",
]
