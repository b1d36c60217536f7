"""
Blog API - Post Route Handlers
==============================

What:  CRUD endpoints under /api/posts.
Who:   Any client; writes require a bearer token, reads accept one.

Endpoint summary:
    POST   /api/posts          protect        create (author = caller)
    GET    /api/posts          optional_auth  paginated, filtered listing
    GET    /api/posts/{slug}   optional_auth  single post by slug
    PUT    /api/posts/{id}     protect        partial update (author only)
    DELETE /api/posts/{id}     protect        soft delete (author only)

Path ids are taken as plain strings; PostService treats a malformed id as
an unknown post (404) instead of letting FastAPI answer 422.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth.dependencies import optional_auth, protect
from blog_api.auth.identity import AuthContext, Identified
from blog_api.context import AppContext, get_context
from blog_api.database import get_db_session
from blog_api.schemas.common import ErrorResponse, MessageResponse
from blog_api.schemas.post import (
    PostCreateRequest,
    PostListResponse,
    PostResponse,
    PostUpdateRequest,
)
from blog_api.services.visibility import ListQuery

logger = logging.getLogger(__name__)

# ── Router Configuration ──────────────────────────────────────────────────
router = APIRouter(prefix="/api/posts", tags=["Posts"])

_UNAUTHORIZED = {"description": "Missing or invalid token", "model": ErrorResponse}
_NOT_FOUND = {"description": "Post not found", "model": ErrorResponse}


@router.post(
    "",
    status_code=201,
    response_model=PostResponse,
    responses={
        201: {"description": "Post created", "model": PostResponse},
        400: {"description": "Validation error or duplicate slug", "model": ErrorResponse},
        401: _UNAUTHORIZED,
    },
    summary="Create a post",
)
async def create_post(
    payload: Optional[PostCreateRequest] = None,
    auth: Identified = Depends(protect),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> PostResponse:
    body = (payload or PostCreateRequest()).model_dump()
    return await ctx.post_service.create(db, auth, body)


@router.get(
    "",
    response_model=PostListResponse,
    responses={
        200: {"description": "One page of visible posts", "model": PostListResponse},
        400: {"description": "Invalid status filter", "model": ErrorResponse},
        401: {"description": "Status filter without a token", "model": ErrorResponse},
    },
    summary="List posts",
    description=(
        "Anonymous callers see published posts only. With a token, the caller's "
        "own drafts are included. Filtering by status requires a token; "
        "status=draft always means the caller's own drafts."
    ),
)
async def list_posts(
    page: Optional[str] = Query(default=None, description="Page number (default 1)"),
    limit: Optional[str] = Query(default=None, description="Posts per page (default 10, max 100)"),
    search: Optional[str] = Query(default=None, description="Substring of title or content"),
    tag: Optional[str] = Query(default=None, description="Exact tag"),
    author: Optional[str] = Query(default=None, description="Author user id"),
    status: Optional[str] = Query(default=None, description="draft or published (token required)"),
    auth: AuthContext = Depends(optional_auth),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> PostListResponse:
    # Numbers arrive as raw strings: "abc" falls back to the default, not 422
    query = ListQuery(
        page=page,
        limit=limit,
        search=search,
        tag=tag,
        author=author,
        status=status,
    )
    return await ctx.post_service.list_posts(db, query, auth)


@router.get(
    "/{slug}",
    response_model=PostResponse,
    responses={
        200: {"description": "The post", "model": PostResponse},
        404: _NOT_FOUND,
    },
    summary="Get a post by slug",
)
async def get_post(
    slug: str,
    auth: AuthContext = Depends(optional_auth),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> PostResponse:
    """
    Drafts are only returned to their author; everyone else gets the same
    404 as for a slug that does not exist.
    """
    return await ctx.post_service.get_by_slug(db, slug, auth)


@router.put(
    "/{post_id}",
    response_model=PostResponse,
    responses={
        200: {"description": "Updated post", "model": PostResponse},
        400: {"description": "Validation error or duplicate slug", "model": ErrorResponse},
        401: _UNAUTHORIZED,
        403: {"description": "Not the author", "model": ErrorResponse},
        404: _NOT_FOUND,
    },
    summary="Update a post",
)
async def update_post(
    post_id: str,
    payload: Optional[PostUpdateRequest] = None,
    auth: Identified = Depends(protect),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> PostResponse:
    body = (payload or PostUpdateRequest()).model_dump()
    return await ctx.post_service.update(db, auth, post_id, body)


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    responses={
        200: {"description": "Post soft-deleted", "model": MessageResponse},
        401: _UNAUTHORIZED,
        403: {"description": "Not the author", "model": ErrorResponse},
        404: _NOT_FOUND,
    },
    summary="Delete a post",
)
async def delete_post(
    post_id: str,
    auth: Identified = Depends(protect),
    db: AsyncSession = Depends(get_db_session),
    ctx: AppContext = Depends(get_context),
) -> MessageResponse:
    await ctx.post_service.delete(db, auth, post_id)
    return MessageResponse(message="Post deleted successfully")
