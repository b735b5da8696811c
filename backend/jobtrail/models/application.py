"""
JobTrail Backend — Application Model
======================================

What:  ORM model for the `applications` table: one tracked job application.
How:   Identified by a client-generated id that is stable across devices.
       The primary key is (user_id, id): two owners reusing the same id get
       two independent rows, so one owner's sync can never touch the other's.

Table Design:
    - company / position are required; status defaults to 'wishlist'
    - resume_id is a soft reference to resumes.id for the same owner. It is
      not a foreign key: an offline client may push the application before
      the résumé upload reaches the server.
    - created_at / updated_at / deleted_at come from SyncStampMixin

Query Patterns:
    - Sync pull:   WHERE user_id = :owner AND updated_at > :since
                   ORDER BY updated_at DESC
                   → idx_applications_user_updated
    - Active list: WHERE user_id = :owner AND deleted_at IS NULL
                   ORDER BY created_at DESC
    - Merge:       point lookup on the primary key
"""

from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from jobtrail.database import Base
from jobtrail.models.mixins import SyncStampMixin

DEFAULT_STATUS = "wishlist"

# Columns a newer proposal overwrites. id, user_id and created_at never change.
MUTABLE_FIELDS = (
    "company",
    "position",
    "status",
    "applied_date",
    "url",
    "notes",
    "resume_id",
    "updated_at",
    "deleted_at",
)


class Application(SyncStampMixin, Base):
    """A job application owned by one user."""

    __tablename__ = "applications"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        comment="Owning user",
    )

    id: Mapped[str] = mapped_column(
        String(64),
        primary_key=True,
        comment="Client-generated identifier, stable across sync",
    )

    company: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[str] = mapped_column(Text, nullable=False)

    # Open enumeration (wishlist, applied, interview, offer, rejected, ...).
    status: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default=DEFAULT_STATUS,
        server_default=text(f"'{DEFAULT_STATUS}'"),
    )

    applied_date: Mapped[Optional[str]] = mapped_column(
        String(32),
        nullable=True,
        comment="Date string as entered by the client (e.g. 2024-01-15)",
    )
    url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    resume_id: Mapped[Optional[str]] = mapped_column(
        String(64),
        nullable=True,
        comment="Soft reference to resumes.id of the same owner",
    )

    __table_args__ = (
        Index("idx_applications_user_updated", "user_id", "updated_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Application(id={self.id}, user_id={self.user_id}, "
            f"status='{self.status}', updated_at='{self.updated_at}')>"
        )
