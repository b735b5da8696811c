"""
JobTrail Backend — Route Dependencies
=======================================

What:  FastAPI dependencies shared by the routers: the service context and
       the identity gate.
How:   require_user() reads `Authorization: Bearer <token>` and resolves it
       to an owner id through the AuthService on the context. Every route
       that touches user data depends on it, so services only ever see an
       owner id that was authenticated in this request.
"""

from typing import Optional

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from jobtrail.context import ServiceContext
from jobtrail.database import get_db_session
from jobtrail.exceptions import UnauthorizedError


def get_context(request: Request) -> ServiceContext:
    return request.app.state.context


def bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


async def require_user(
    authorization: Optional[str] = Header(default=None),
    context: ServiceContext = Depends(get_context),
    db: AsyncSession = Depends(get_db_session),
) -> str:
    """
    Owner id of the authenticated caller.

    Raises:
        UnauthorizedError: header missing or not a Bearer credential, or the
            token is unknown or expired.
    """
    token = bearer_token(authorization)
    if token is None:
        raise UnauthorizedError()
    return await context.auth_service.authenticate(db, token)
