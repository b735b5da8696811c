"""
JobTrail Backend — Sync Route Handlers
========================================

What:  GET/POST /api/sync (also mounted at /sync).
How:   Thin HTTP layer over SyncService. The whole push runs in the request's
       session, so it commits once after every proposal has been merged.

Client protocol:
    1. Collect local records changed since the last successful sync
    2. POST {changes, lastSync} → merged delta + serverTime
    3. Apply the returned records locally (they reflect the server's winners)
    4. Store serverTime as the next lastSync
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.database import get_db_session
from jobtrail.dependencies import require_user
from jobtrail.schemas.application import PullResponse, PushResponse, SyncPushRequest
from jobtrail.schemas.common import ErrorResponse
from jobtrail.services.sync_service import parse_since, sync_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sync"])

_ERROR_RESPONSES = {
    400: {"description": "Malformed request", "model": ErrorResponse},
    401: {"description": "Missing or invalid token", "model": ErrorResponse},
    503: {"description": "Record store unavailable", "model": ErrorResponse},
}


@router.get(
    "/api/sync",
    response_model=PullResponse,
    responses=_ERROR_RESPONSES,
    summary="Pull application changes",
    description=(
        "Returns every application of the caller (including tombstones) updated "
        "after `since`, newest first. Omit `since` for a full download."
    ),
)
@router.get("/sync", response_model=PullResponse, include_in_schema=False)
async def pull_changes(
    since: Optional[str] = Query(
        default=None,
        description="High-water mark from the previous sync (ISO 8601 with offset)",
    ),
    owner_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> PullResponse:
    return await sync_service.pull(db, owner_id, parse_since(since))


@router.post(
    "/api/sync",
    response_model=PushResponse,
    responses=_ERROR_RESPONSES,
    summary="Push application changes and pull the merged delta",
    description=(
        "Merges each proposed record with last-write-wins on updatedAt, then "
        "returns the caller's records updated after `lastSync`, the server time "
        "and one outcome per proposal (inserted, updated, discarded, rejected)."
    ),
)
@router.post("/sync", response_model=PushResponse, include_in_schema=False)
async def push_changes(
    body: SyncPushRequest,
    owner_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> PushResponse:
    since = parse_since(body.last_sync)
    return await sync_service.push(db, owner_id, body.changes, since)
