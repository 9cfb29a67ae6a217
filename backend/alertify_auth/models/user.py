"""User and role models."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, ForeignKey, Index, String, Table, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, PKMixin, ReprMixin, TimestampMixin, UTCDateTime

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True),
)


class Role(PKMixin, ReprMixin, Base):
    """Named role granted to users (many-to-many)."""

    __tablename__ = "roles"

    name: Mapped[str] = mapped_column(String(50), nullable=False)

    __table_args__ = (UniqueConstraint("name", name="uq_roles_name"),)


class User(PKMixin, ReprMixin, TimestampMixin, Base):
    """
    Authentication identity and its current session credential.

    Fields
    ------
    email : str
        Login email, case-sensitive as stored.
    username : str
        Public handle (4-20 alphanumeric characters, validated at the API layer).
    password_hash : str
        Adaptive hash of the password.
    status : str
        Free-text account status (``active`` on creation); normalized at read time.
    refresh_token_hash : str | None
        SHA-256 hex digest of the single live refresh token.
    refresh_token_expires_at : datetime | None
        Absolute expiry of that refresh token.
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    username: Mapped[str] = mapped_column(String(20), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    refresh_token_hash: Mapped[str | None] = mapped_column(String(64), nullable=True)
    refresh_token_expires_at: Mapped[datetime | None] = mapped_column(UTCDateTime(), nullable=True)

    roles: Mapped[list[Role]] = relationship(secondary=user_roles, lazy="raise")

    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
        Index("ix_users_email", "email"),
        Index("ix_users_username", "username"),
    )
