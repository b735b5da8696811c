"""
JobTrail Backend — Shared Model Columns
=========================================

What:  Column mixins shared by the synchronized entity tables.
How:   SyncStampMixin adds created_at / updated_at / deleted_at. A row whose
       deleted_at is set is a tombstone: it keeps every other field, is hidden
       from "active" views, and is still returned by sync pulls so the delete
       reaches devices that have not seen it yet.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime
from sqlalchemy.orm import Mapped, mapped_column


class SyncStampMixin:
    """created/updated/deleted timestamps, all stored as UTC."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the record was first created (client clock, UTC)",
    )

    # Drives last-write-wins: a proposal replaces the row only when its
    # updated_at is strictly greater than this value.
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="Last mutation time (UTC); strictly advances on every write",
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
        comment="Tombstone marker; NULL means the record is active",
    )

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
