"""Access-token blacklist rows."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, PKMixin, ReprMixin, TimestampMixin, UTCDateTime


class JwtBlacklistEntry(PKMixin, ReprMixin, TimestampMixin, Base):
    """
    Revoked access token, kept until the token would have expired anyway.

    Fields
    ------
    jti : str
        Access token identifier (unique).
    user_id : int | None
        Token subject, when known.
    expires_at : datetime
        Original ``exp`` of the access token; rows past it are swept.
    """

    __tablename__ = "jwt_blacklist"

    jti: Mapped[str] = mapped_column(String(64), nullable=False)
    user_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime(), nullable=False)

    __table_args__ = (
        UniqueConstraint("jti", name="uq_jwt_blacklist_jti"),
        Index("ix_jwt_blacklist_expires_at", "expires_at"),
    )
