"""
Blog API - Authentication Gate
==============================

What:  FastAPI dependencies that turn the Authorization header into an
       AuthContext for the route.
How:   HTTPBearer (auto_error=False) extracts "Bearer <token>" and also
       registers the bearer security scheme in the OpenAPI document. The
       token is verified with the context's TokenService and its subject
       looked up in the users table on the request's own session.

Modes:
    protect        Mandatory. No token, bad token, or vanished user
                   → UnauthenticatedError (401). Returns Identified.
    optional_auth  Never fails on credentials. Anything short of a fully
                   verified token for an existing user → Anonymous.

Side effects: request.state.user_id is set for the access log. No writes.
"""

import logging
import uuid
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth.identity import ANONYMOUS, AuthContext, Identified
from blog_api.auth.tokens import TokenInvalidError
from blog_api.context import AppContext, get_context
from blog_api.database import get_db_session
from blog_api.exceptions import UnauthenticatedError
from blog_api.models.user import User

logger = logging.getLogger(__name__)

NOT_AUTHORIZED = "Not authorized to access this route"

bearer_scheme = HTTPBearer(
    auto_error=False,
    bearerFormat="JWT",
    description="Token returned by /api/auth/register or /api/auth/login",
)


async def _find_user(db: AsyncSession, user_id: uuid.UUID) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def protect(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> Identified:
    """
    Require a valid bearer token.

    Raises:
        UnauthenticatedError: missing/invalid/expired token or unknown user
    """
    if credentials is None:
        raise UnauthenticatedError(NOT_AUTHORIZED)

    try:
        user_id = ctx.tokens.verify(credentials.credentials)
    except TokenInvalidError as e:
        raise UnauthenticatedError(NOT_AUTHORIZED, context={"reason": str(e)})

    user = await _find_user(db, user_id)
    if user is None:
        raise UnauthenticatedError("User not found", context={"user_id": str(user_id)})

    request.state.user_id = str(user.id)
    return Identified(user_id=user.id, user=user)


async def optional_auth(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> AuthContext:
    """Resolve the caller if a valid token is present, otherwise Anonymous."""
    if credentials is None:
        return ANONYMOUS

    try:
        user_id = ctx.tokens.verify(credentials.credentials)
    except TokenInvalidError:
        # Bad tokens on public routes are ignored, not rejected
        return ANONYMOUS

    user = await _find_user(db, user_id)
    if user is None:
        return ANONYMOUS

    request.state.user_id = str(user.id)
    return Identified(user_id=user.id, user=user)
