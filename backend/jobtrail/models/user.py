"""
JobTrail Backend — User Model
===============================

What:  ORM model for the `users` table.
How:   One row per registered account. Usernames are stored lowercased and are
       unique; the PIN is only ever stored as a bcrypt hash.
       Rows are immutable after creation.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from jobtrail.database import Base
from jobtrail.timestamps import utc_now


class User(Base):
    """A registered account; owner of applications, résumés and tokens."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        comment="Opaque user identifier (uuid4)",
    )

    username: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        comment="Lowercased login name",
    )

    # bcrypt modular crypt format: $2b$<cost>$<salt+digest>
    pin_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="bcrypt hash of the 4-digit PIN",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        comment="Registration time (UTC)",
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"
