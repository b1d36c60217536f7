"""
Blog API - Auth Route Handlers
==============================

What:  POST /api/auth/register and POST /api/auth/login.
How:   The body is taken as-is and handed to AuthService, which runs the
       rule-lists, so a missing body reports every missing field.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.context import AppContext, get_context
from blog_api.database import get_db_session
from blog_api.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from blog_api.schemas.common import ErrorResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    responses={
        201: {"description": "User registered successfully", "model": AuthResponse},
        400: {"description": "Validation error or email already exists", "model": ErrorResponse},
    },
    summary="Register a new user",
)
async def register(
    payload: Optional[RegisterRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> AuthResponse:
    body = (payload or RegisterRequest()).model_dump()
    return await ctx.auth_service.register(db, body)


@router.post(
    "/login",
    response_model=AuthResponse,
    responses={
        200: {"description": "Login successful", "model": AuthResponse},
        400: {"description": "Validation error", "model": ErrorResponse},
        401: {"description": "Invalid credentials", "model": ErrorResponse},
    },
    summary="Log in and receive a bearer token",
)
async def login(
    payload: Optional[LoginRequest] = None,
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> AuthResponse:
    """
    Exchange credentials for a token.

    Unknown email and wrong password give the same 401 body.
    """
    body = (payload or LoginRequest()).model_dump()
    return await ctx.auth_service.login(db, body)
