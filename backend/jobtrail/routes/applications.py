"""
JobTrail Backend — Application Route Handlers
===============================================

What:  Direct CRUD on applications for clients that do not use /api/sync.

    GET    /api/applications           → active records, newest first
    POST   /api/applications           → create (201 {success, id})
    PUT    /api/applications/{id}      → overwrite fields
    DELETE /api/applications/{id}      → tombstone
    POST   /api/applications/restore   → undo a delete (201)
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.database import get_db_session
from jobtrail.dependencies import require_user
from jobtrail.schemas.application import (
    ApplicationCreate,
    ApplicationCreatedResponse,
    ApplicationRecord,
    ApplicationUpdate,
)
from jobtrail.schemas.common import ErrorResponse, SuccessResponse
from jobtrail.services.application_service import application_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/applications",
    tags=["Applications"],
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
)


@router.get("", response_model=List[ApplicationRecord], summary="List active applications")
async def list_applications(
    owner_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[ApplicationRecord]:
    return await application_service.list_active(db, owner_id)


@router.post(
    "",
    response_model=ApplicationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"description": "Invalid or duplicate application", "model": ErrorResponse}},
    summary="Create an application",
)
async def create_application(
    body: ApplicationCreate,
    owner_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApplicationCreatedResponse:
    created_id = await application_service.create(db, owner_id, body)
    return ApplicationCreatedResponse(id=created_id)


# Declared before /{application_id} so "restore" is not read as an id.
@router.post(
    "/restore",
    response_model=SuccessResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Restore a deleted application",
)
async def restore_application(
    body: ApplicationCreate,
    owner_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await application_service.restore(db, owner_id, body)
    return SuccessResponse()


@router.put(
    "/{application_id}",
    response_model=SuccessResponse,
    responses={404: {"description": "Application not found", "model": ErrorResponse}},
    summary="Update an application",
)
async def update_application(
    body: ApplicationUpdate,
    application_id: str = Path(min_length=1, max_length=64),
    owner_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await application_service.update(db, owner_id, application_id, body)
    return SuccessResponse()


@router.delete(
    "/{application_id}",
    response_model=SuccessResponse,
    responses={404: {"description": "Application not found", "model": ErrorResponse}},
    summary="Delete (tombstone) an application",
)
async def delete_application(
    application_id: str = Path(min_length=1, max_length=64),
    owner_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await application_service.delete(db, owner_id, application_id)
    return SuccessResponse()
