"""
JobTrail Backend — Résumé Model
=================================

What:  ORM model for the `resumes` table: an uploaded résumé file.
How:   file_data holds the encoded payload (base64 or a data: URL) exactly as
       the client sent it; the server never decodes it. An upload with an
       existing (user_id, id) replaces the whole row, there is no versioning.
"""

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from jobtrail.database import Base
from jobtrail.models.mixins import SyncStampMixin


class Resume(SyncStampMixin, Base):
    """A résumé attachment owned by one user."""

    __tablename__ = "resumes"

    user_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    name: Mapped[str] = mapped_column(Text, nullable=False, comment="Display name")
    file_name: Mapped[str] = mapped_column(Text, nullable=False, comment="Original file name")
    file_data: Mapped[str] = mapped_column(Text, nullable=False, comment="Encoded file payload")
    file_type: Mapped[str] = mapped_column(String(255), nullable=False, comment="MIME type tag")

    __table_args__ = (
        Index("idx_resumes_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Resume(id={self.id}, user_id={self.user_id}, file_name='{self.file_name}')>"
