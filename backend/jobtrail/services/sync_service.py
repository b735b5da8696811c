"""
JobTrail Backend — Sync Service (Reconciliation Engine)
=========================================================

What:  Pull and Push for offline-first replication of application records.
How:   Per-record last-write-wins on updated_at, over tombstoned rows.

Pull(owner, since):
    Every application of the owner, active or tombstoned, with
    updated_at > since, newest first. Read-only.

Push(owner, changes, since):
    Merges each proposed record in the order received, then returns
    Pull(owner, since) computed afterwards plus the server time and one
    outcome per proposal.

Merge (one proposal):
    ┌────────────────────┐  absent   ┌──────────────────────────────┐
    │ (owner, id) lookup │──────────▶│ insert as sent    → inserted │
    └─────────┬──────────┘           └──────────────────────────────┘
              │ present
              ▼
    proposal.updated_at > stored.updated_at ?
        yes → overwrite mutable fields  → updated
        no  → keep stored row           → discarded   (stored wins ties)

    The insert-or-conditional-update runs as ONE statement:

        INSERT ... ON CONFLICT (user_id, id) DO UPDATE SET ...
        WHERE applications.updated_at < excluded.updated_at

    so two devices pushing the same id concurrently converge on the newer
    value without locks. The preceding lookup only labels the outcome.
    Tombstones are ordinary rows here: a newer delete beats an older edit,
    and a newer edit (including deletedAt: null) revives a deleted row.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import desc, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.database import store_errors
from jobtrail.exceptions import MalformedRequestError
from jobtrail.models.application import MUTABLE_FIELDS, Application
from jobtrail.schemas.application import (
    ApplicationChange,
    ApplicationRecord,
    MergeOutcome,
    PullResponse,
    PushResponse,
)
from jobtrail.timestamps import EPOCH, parse_timestamp, utc_now

logger = logging.getLogger(__name__)

_INSERT_BY_DIALECT = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def parse_since(value: Optional[Any]) -> datetime:
    """
    Reads a high-water mark (query ?since= or body lastSync).

    Missing or empty means "from the beginning". Anything else must be an
    ISO-8601 timestamp with an offset.

    Raises:
        MalformedRequestError: value is present but not a usable timestamp.
    """
    if value is None or value == "":
        return EPOCH
    try:
        return parse_timestamp(value)
    except ValueError as e:
        raise MalformedRequestError(
            message=f"Invalid sync timestamp: {e}",
            context={"value": str(value)[:64]},
        ) from e


def _rejection_reason(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(loc) for loc in item.get("loc", ())) or "record"
        parts.append(f"{location}: {item.get('msg', 'invalid')}")
    return "; ".join(parts)


class SyncService:
    """
    Stateless reconciliation engine.

    Every method takes the request's AsyncSession. Pull leaves commit and
    rollback to get_db_session(); push commits after every proposal, so no
    transaction spans more than one record.
    """

    async def pull(
        self,
        db: AsyncSession,
        owner_id: str,
        since: datetime = EPOCH,
    ) -> PullResponse:
        """Applications of ``owner_id`` changed after ``since``, newest first."""
        with store_errors("sync.pull"):
            records = await self._changed_since(db, owner_id, since)

        logger.debug("Pull for %s since %s: %d records", owner_id, since.isoformat(), len(records))
        return PullResponse(applications=records, server_time=utc_now())

    async def push(
        self,
        db: AsyncSession,
        owner_id: str,
        changes: Optional[Sequence[Any]],
        since: datetime = EPOCH,
    ) -> PushResponse:
        """
        Merges ``changes`` into the owner's records and returns the delta.

        Proposals already merged stay committed if a later one fails.

        Raises:
            MalformedRequestError: ``changes`` is not a list of objects.
                Raised before anything is written.
        """
        proposals = self._check_batch(changes)

        outcomes: List[MergeOutcome] = []
        with store_errors("sync.push"):
            for raw in proposals:
                outcomes.append(await self._merge_raw(db, owner_id, raw))
                # One transaction per proposal: a push never holds two row locks.
                await db.commit()
            records = await self._changed_since(db, owner_id, since)

        counts: Dict[str, int] = {}
        for outcome in outcomes:
            counts[outcome.result] = counts.get(outcome.result, 0) + 1
        logger.info(
            "Push for %s: %d proposals %s, returning %d records",
            owner_id,
            len(outcomes),
            counts or "{}",
            len(records),
        )

        return PushResponse(
            applications=records,
            server_time=utc_now(),
            outcomes=outcomes,
        )

    async def merge(
        self,
        db: AsyncSession,
        owner_id: str,
        change: ApplicationChange,
    ) -> MergeOutcome:
        """
        Applies one validated proposal with last-write-wins.

        Returns the outcome: inserted, updated or discarded.
        """
        stored_updated_at = await db.scalar(
            select(Application.updated_at).where(
                Application.user_id == owner_id,
                Application.id == change.id,
            )
        )

        values = change.column_values()
        values["user_id"] = owner_id

        insert = _INSERT_BY_DIALECT[db.get_bind().dialect.name]
        stmt = insert(Application).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[Application.user_id, Application.id],
            set_={field: stmt.excluded[field] for field in MUTABLE_FIELDS},
            where=Application.updated_at < stmt.excluded.updated_at,
        )
        result = await db.execute(stmt)
        written = result.rowcount == 1

        if not written:
            outcome = MergeOutcome(
                id=change.id,
                result="discarded",
                reason="stored record is as new or newer",
            )
        elif stored_updated_at is None:
            outcome = MergeOutcome(id=change.id, result="inserted")
        else:
            outcome = MergeOutcome(id=change.id, result="updated")

        logger.debug("Merge %s/%s → %s", owner_id, change.id, outcome.result)
        return outcome

    # ── Internals ─────────────────────────────────────────────────────────

    @staticmethod
    def _check_batch(changes: Optional[Sequence[Any]]) -> List[Dict[str, Any]]:
        if changes is None:
            return []
        if not isinstance(changes, (list, tuple)):
            raise MalformedRequestError(
                message="changes must be a list of application records",
                context={"type": type(changes).__name__},
            )
        for position, raw in enumerate(changes):
            if not isinstance(raw, dict):
                raise MalformedRequestError(
                    message="changes must be a list of application records",
                    context={"position": position, "type": type(raw).__name__},
                )
        return list(changes)

    async def _merge_raw(
        self,
        db: AsyncSession,
        owner_id: str,
        raw: Dict[str, Any],
    ) -> MergeOutcome:
        raw_id = raw.get("id")
        record_id = raw_id if isinstance(raw_id, str) and raw_id else None
        try:
            change = ApplicationChange.model_validate(raw)
        except PydanticValidationError as e:
            reason = _rejection_reason(e)
            logger.info("Rejected proposal %s for %s: %s", record_id, owner_id, reason)
            return MergeOutcome(id=record_id, result="rejected", reason=reason)

        return await self.merge(db, owner_id, change)

    @staticmethod
    async def _changed_since(
        db: AsyncSession,
        owner_id: str,
        since: datetime,
    ) -> List[ApplicationRecord]:
        stmt = (
            select(Application)
            .where(Application.user_id == owner_id, Application.updated_at > since)
            .order_by(desc(Application.updated_at), Application.id)
            # Rows written by the upsert bypass the identity map.
            .execution_options(populate_existing=True)
        )
        rows = (await db.execute(stmt)).scalars().all()
        return [ApplicationRecord.from_model(row) for row in rows]


# ── Service Instance ─────────────────────────────────────────────────────
sync_service = SyncService()
