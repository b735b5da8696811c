"""
JobTrail Backend — Résumé Service
===================================

What:  Upload, fetch and soft-delete résumé attachments.
How:   Résumés do not go through last-write-wins. An upload always replaces
       the stored row for (owner, id) and revives it if it was tombstoned;
       clients never edit a résumé, they upload a new one.

Operations:
    upload(owner, résumé)   → unconditional upsert, deleted_at cleared
    fetch_one(owner, id)    → full record incl. payload, or NotFoundError
    fetch_list(owner)       → active records, payload omitted, newest first
    delete(owner, id)       → tombstone + updated_at bump; no-op when the
                              record is absent, already deleted or foreign
"""

import logging
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.database import store_errors
from jobtrail.exceptions import NotFoundError, ValidationError
from jobtrail.models.resume import Resume
from jobtrail.schemas.resume import ResumeDetail, ResumeSummary, ResumeUpload
from jobtrail.timestamps import advance, utc_now

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}

# Columns an upload replaces on conflict; user_id and id identify the row.
_UPLOAD_FIELDS = (
    "name",
    "file_name",
    "file_data",
    "file_type",
    "created_at",
    "updated_at",
    "deleted_at",
)


class ResumeService:
    """Stateless résumé operations, scoped to one owner per call."""

    def __init__(self, max_size: int = 10_485_760):
        self.max_size = max_size

    async def upload(
        self,
        db: AsyncSession,
        owner_id: str,
        resume: ResumeUpload,
        max_size: Optional[int] = None,
    ) -> None:
        """
        Stores ``resume`` for ``owner_id``, replacing any existing row.

        Missing createdAt/updatedAt default to the server time.

        Raises:
            ValidationError: encoded payload longer than the size limit.
        """
        limit = max_size or self.max_size
        if len(resume.file_data) > limit:
            raise ValidationError(
                message=f"Résumé file is too large ({len(resume.file_data)} > {limit} characters)",
                field="fileData",
                context={"size": len(resume.file_data), "limit": limit},
            )

        now = utc_now()
        values = {
            "user_id": owner_id,
            "id": resume.id,
            "name": resume.name,
            "file_name": resume.file_name,
            "file_data": resume.file_data,
            "file_type": resume.file_type,
            "created_at": resume.created_at or now,
            "updated_at": resume.updated_at or now,
            "deleted_at": None,
        }

        with store_errors("resume.upload"):
            insert = _INSERT_BY_DIALECT[db.get_bind().dialect.name]
            stmt = insert(Resume).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=[Resume.user_id, Resume.id],
                set_={field: stmt.excluded[field] for field in _UPLOAD_FIELDS},
            )
            await db.execute(stmt)

        logger.info(
            "Résumé %s uploaded for %s (%s, %d chars)",
            resume.id,
            owner_id,
            resume.file_type,
            len(resume.file_data),
        )

    async def fetch_one(self, db: AsyncSession, owner_id: str, resume_id: str) -> ResumeDetail:
        """
        Raises:
            NotFoundError: absent, tombstoned, or owned by someone else.
        """
        with store_errors("resume.fetch_one"):
            row = await self._active(db, owner_id, resume_id)
        if row is None:
            raise NotFoundError(resource="resume", resource_id=resume_id)
        return ResumeDetail.from_model(row)

    async def fetch_list(self, db: AsyncSession, owner_id: str) -> List[ResumeSummary]:
        stmt = (
            select(Resume)
            .where(Resume.user_id == owner_id, Resume.deleted_at.is_(None))
            .order_by(desc(Resume.created_at), Resume.id)
            .execution_options(populate_existing=True)
        )
        with store_errors("resume.fetch_list"):
            rows = (await db.execute(stmt)).scalars().all()
        return [ResumeSummary.from_model(row) for row in rows]

    async def delete(self, db: AsyncSession, owner_id: str, resume_id: str) -> bool:
        """Tombstones the résumé. Returns False when there was nothing to delete."""
        with store_errors("resume.delete"):
            row = await self._active(db, owner_id, resume_id)
            if row is None:
                logger.debug("Résumé delete no-op: %s/%s", owner_id, resume_id)
                return False

            now = utc_now()
            row.deleted_at = now
            row.updated_at = advance(row.updated_at, now)
            await db.flush()

        logger.info("Résumé %s deleted for %s", resume_id, owner_id)
        return True

    @staticmethod
    async def _active(db: AsyncSession, owner_id: str, resume_id: str):
        stmt = (
            select(Resume)
            .where(
                Resume.user_id == owner_id,
                Resume.id == resume_id,
                Resume.deleted_at.is_(None),
            )
            .execution_options(populate_existing=True)
        )
        return (await db.execute(stmt)).scalar_one_or_none()


# ── Service Instance ─────────────────────────────────────────────────────
resume_service = ResumeService()
