"""
JobTrail Backend — Account Route Handlers
===========================================

What:  POST /api/register, /api/login and the combined POST /api/auth.
How:   Every route first counts an attempt against the caller's IP
       (limit_auth_attempts); the sixth attempt inside the window gets 429.
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.context import ServiceContext
from jobtrail.database import get_db_session
from jobtrail.dependencies import get_context
from jobtrail.middleware.rate_limit import limit_auth_attempts
from jobtrail.schemas.auth import CredentialsRequest, TokenResponse
from jobtrail.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Accounts"],
    dependencies=[Depends(limit_auth_attempts)],
    responses={
        400: {"description": "Invalid username or PIN format", "model": ErrorResponse},
        429: {"description": "Too many attempts", "model": ErrorResponse},
    },
)


@router.post(
    "/register",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def register(
    body: CredentialsRequest,
    context: ServiceContext = Depends(get_context),
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    issued = await context.auth_service.register(db, body.username, body.pin)
    return TokenResponse(token=issued.token, user_id=issued.user_id)


@router.post(
    "/login",
    response_model=TokenResponse,
    responses={401: {"description": "Invalid credentials", "model": ErrorResponse}},
    summary="Log in and receive a bearer token",
)
async def login(
    body: CredentialsRequest,
    context: ServiceContext = Depends(get_context),
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    issued = await context.auth_service.login(db, body.username, body.pin)
    return TokenResponse(token=issued.token, user_id=issued.user_id)


@router.post(
    "/auth",
    response_model=TokenResponse,
    responses={
        201: {"description": "Registered", "model": TokenResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Register (action=register) or log in",
)
async def authenticate(
    body: CredentialsRequest,
    response: Response,
    context: ServiceContext = Depends(get_context),
    db: AsyncSession = Depends(get_db_session),
) -> TokenResponse:
    if body.action == "register":
        issued = await context.auth_service.register(db, body.username, body.pin)
        response.status_code = status.HTTP_201_CREATED
    else:
        issued = await context.auth_service.login(db, body.username, body.pin)
    return TokenResponse(token=issued.token, user_id=issued.user_id)
