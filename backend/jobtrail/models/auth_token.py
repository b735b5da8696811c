"""
JobTrail Backend — Auth Token Model
=====================================

What:  Bearer tokens issued at register/login.
How:   Only the sha256 digest of a token is stored; the raw value is returned
       to the client once. A token is valid until expires_at.
"""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from jobtrail.database import Base


class AuthToken(Base):
    __tablename__ = "auth_tokens"

    token_hash: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="sha256 hex digest of the bearer token",
    )
    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        Index("idx_auth_tokens_user", "user_id"),
    )
