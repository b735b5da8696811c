"""
JobTrail Backend — Résumé Route Handlers
==========================================

What:  GET/POST /api/resume-sync (also mounted at /resumes).

    GET  ?id=<id>                 → {resume} with fileData, or 404
    GET                           → {resumes} metadata only
    POST {action: "upload", resume}
    POST {action: "delete", resume: {id}}
"""

import logging
from typing import Any, Dict, Optional, Union

from fastapi import APIRouter, Depends, Query
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.context import ServiceContext
from jobtrail.database import get_db_session
from jobtrail.dependencies import get_context, require_user
from jobtrail.exceptions import MalformedRequestError, ValidationError
from jobtrail.schemas.common import ErrorResponse, SuccessResponse
from jobtrail.schemas.resume import (
    ResumeActionRequest,
    ResumeFetchResponse,
    ResumeListResponse,
    ResumeUpload,
)
from jobtrail.services.resume_service import resume_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Résumés"])


def _parse_upload(resume: Optional[Dict[str, Any]]) -> ResumeUpload:
    try:
        return ResumeUpload.model_validate(resume or {})
    except PydanticValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(loc) for loc in first.get("loc", ()))
        raise ValidationError(
            message=f"Invalid résumé: {field or 'resume'}: {first.get('msg', 'invalid')}",
            field=field or None,
        ) from e


@router.get(
    "/api/resume-sync",
    response_model=Union[ResumeFetchResponse, ResumeListResponse],
    responses={
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
        404: {"description": "Résumé not found", "model": ErrorResponse},
    },
    summary="Fetch one résumé or list résumé metadata",
)
@router.get(
    "/resumes",
    response_model=Union[ResumeFetchResponse, ResumeListResponse],
    include_in_schema=False,
)
async def get_resumes(
    id: Optional[str] = Query(default=None, description="Fetch this résumé with its payload"),
    owner_id: str = Depends(require_user),
    db: AsyncSession = Depends(get_db_session),
) -> Union[ResumeFetchResponse, ResumeListResponse]:
    if id:
        return ResumeFetchResponse(resume=await resume_service.fetch_one(db, owner_id, id))
    return ResumeListResponse(resumes=await resume_service.fetch_list(db, owner_id))


@router.post(
    "/api/resume-sync",
    response_model=SuccessResponse,
    responses={
        400: {"description": "Invalid action or résumé", "model": ErrorResponse},
        401: {"description": "Missing or invalid token", "model": ErrorResponse},
    },
    summary="Upload or delete a résumé",
)
@router.post("/resumes", response_model=SuccessResponse, include_in_schema=False)
async def post_resume(
    body: ResumeActionRequest,
    owner_id: str = Depends(require_user),
    context: ServiceContext = Depends(get_context),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    if body.action == "upload":
        resume = _parse_upload(body.resume)
        await resume_service.upload(
            db, owner_id, resume, max_size=context.settings.max_resume_size
        )
        return SuccessResponse()

    if body.action == "delete":
        resume_id = (body.resume or {}).get("id")
        if not isinstance(resume_id, str) or not resume_id:
            raise ValidationError(message="resume.id is required", field="resume.id")
        await resume_service.delete(db, owner_id, resume_id)
        return SuccessResponse()

    raise MalformedRequestError(
        message="Invalid action",
        context={"action": str(body.action)[:32]},
    )
