"""
JobTrail Backend — Application Service (direct CRUD)
======================================================

What:  List, create, update, delete and restore for single applications,
       used by clients that talk to the server directly instead of syncing.
How:   Works on the same rows the sync engine merges, so both paths stay
       consistent: deletes are tombstones, and every mutation moves
       updated_at strictly forward (advance()). A device that later syncs
       therefore sees each direct edit as newer than what it holds.

Visibility:
    A tombstoned record is treated as absent by update() and delete(); a
    record of another owner is indistinguishable from an absent one.
"""

import logging
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.database import store_errors
from jobtrail.exceptions import NotFoundError, ValidationError
from jobtrail.models.application import Application
from jobtrail.schemas.application import (
    ApplicationCreate,
    ApplicationRecord,
    ApplicationUpdate,
)
from jobtrail.timestamps import advance, utc_now

logger = logging.getLogger(__name__)


class ApplicationService:

    async def list_active(self, db: AsyncSession, owner_id: str) -> List[ApplicationRecord]:
        """Active applications, newest created first."""
        stmt = (
            select(Application)
            .where(Application.user_id == owner_id, Application.deleted_at.is_(None))
            .order_by(desc(Application.created_at), Application.id)
            .execution_options(populate_existing=True)
        )
        with store_errors("applications.list"):
            rows = (await db.execute(stmt)).scalars().all()
        return [ApplicationRecord.from_model(row) for row in rows]

    async def create(self, db: AsyncSession, owner_id: str, data: ApplicationCreate) -> str:
        """
        Inserts a new application.

        Raises:
            ValidationError: the owner already has a record with this id
                (active or tombstoned; use restore for the latter).
        """
        with store_errors("applications.create"):
            existing = await self._get(db, owner_id, data.id)
            if existing is not None:
                raise ValidationError(
                    message=f"Application '{data.id}' already exists",
                    field="id",
                )

            now = utc_now()
            updated_at = data.updated_at or now
            db.add(
                Application(
                    user_id=owner_id,
                    id=data.id,
                    company=data.company,
                    position=data.position,
                    status=data.status,
                    applied_date=data.applied_date,
                    url=data.url,
                    notes=data.notes,
                    resume_id=data.resume_id,
                    created_at=data.created_at or updated_at,
                    updated_at=updated_at,
                    deleted_at=None,
                )
            )
            await db.flush()

        logger.info("Application %s created for %s", data.id, owner_id)
        return data.id

    async def update(
        self,
        db: AsyncSession,
        owner_id: str,
        application_id: str,
        data: ApplicationUpdate,
    ) -> ApplicationRecord:
        """
        Overwrites the mutable fields of an active application.

        updated_at becomes the client's value (or now), pushed past the stored
        value when it is not already later.

        Raises:
            NotFoundError: absent, tombstoned or foreign.
        """
        with store_errors("applications.update"):
            row = await self._get_active(db, owner_id, application_id)

            row.company = data.company
            row.position = data.position
            row.status = data.status
            row.applied_date = data.applied_date
            row.url = data.url
            row.notes = data.notes
            row.resume_id = data.resume_id
            row.updated_at = advance(row.updated_at, data.updated_at)
            await db.flush()

        logger.info("Application %s updated for %s", application_id, owner_id)
        return ApplicationRecord.from_model(row)

    async def delete(self, db: AsyncSession, owner_id: str, application_id: str) -> None:
        """
        Tombstones an active application.

        Raises:
            NotFoundError: absent, already tombstoned or foreign.
        """
        with store_errors("applications.delete"):
            row = await self._get_active(db, owner_id, application_id)
            now = utc_now()
            row.deleted_at = now
            row.updated_at = advance(row.updated_at, now)
            await db.flush()

        logger.info("Application %s deleted for %s", application_id, owner_id)

    async def restore(
        self,
        db: AsyncSession,
        owner_id: str,
        data: ApplicationCreate,
    ) -> ApplicationRecord:
        """
        Undoes a delete.

        A tombstoned (or active) record gets deleted_at cleared and its
        updated_at advanced; its other fields are kept. A record the server
        has never seen is inserted from ``data``.
        """
        with store_errors("applications.restore"):
            row = await self._get(db, owner_id, data.id)
            if row is None:
                logger.info("Restore of unknown application %s for %s: inserting", data.id, owner_id)
                await self.create(db, owner_id, data)
                row = await self._get(db, owner_id, data.id)
            else:
                row.deleted_at = None
                row.updated_at = advance(row.updated_at, data.updated_at)
                await db.flush()
                logger.info("Application %s restored for %s", data.id, owner_id)

        return ApplicationRecord.from_model(row)

    # ── Lookups ───────────────────────────────────────────────────────────

    @staticmethod
    async def _get(db: AsyncSession, owner_id: str, application_id: str) -> Optional[Application]:
        stmt = (
            select(Application)
            .where(Application.user_id == owner_id, Application.id == application_id)
            .execution_options(populate_existing=True)
        )
        return (await db.execute(stmt)).scalar_one_or_none()

    async def _get_active(self, db: AsyncSession, owner_id: str, application_id: str) -> Application:
        row = await self._get(db, owner_id, application_id)
        if row is None or row.is_deleted:
            raise NotFoundError(resource="application", resource_id=application_id)
        return row


# ── Service Instance ─────────────────────────────────────────────────────
application_service = ApplicationService()
