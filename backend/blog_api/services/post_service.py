"""
Blog API - Post Service (Business Logic Orchestrator)
=====================================================

What:  Create, list, fetch, update and soft-delete posts.
Why:   Keeps every rule about posts in one place, independent of HTTP.
How:   Validation comes from blog_api.validation, visibility and
       ownership decisions from blog_api.services.visibility; this module
       only sequences them around database calls on the session it is
       handed.
Who:   The /api/posts route handlers.

Orchestration (PUT /api/posts/{id}):
    ┌──────────┐    ┌──────────┐    ┌─────────────┐    ┌──────────┐
    │ Validate │───▶│  Load    │───▶│  Authorize  │───▶│  Apply + │
    │  body    │    │  by id   │    │  (author?)  │    │  flush   │
    └──────────┘    └──────────┘    └─────────────┘    └──────────┘

Every write goes through flush() only; the commit belongs to
get_db_session() so a failure anywhere rolls the whole request back.
"""

import logging
import uuid
from typing import Any, Mapping, Optional

from sqlalchemy import desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth.identity import AuthContext, Identified
from blog_api.exceptions import ConflictError, DatabaseError, UnauthenticatedError
from blog_api.models.post import DEFAULT_STATUS, Post, slugify
from blog_api.schemas.post import (
    AuthorOut,
    PaginationOut,
    PostListResponse,
    PostOut,
    PostResponse,
)
from blog_api.services.visibility import (
    ListQuery,
    Pagination,
    apply_update,
    authorize_mutation,
    build_list_filter,
    ensure_visible,
    mark_deleted,
)
from blog_api.validation import create_post_rules, update_post_rules

logger = logging.getLogger(__name__)


def to_post_out(post: Post) -> PostOut:
    """Serialize a loaded Post with its author populated."""
    return PostOut(
        id=post.id,
        title=post.title,
        slug=post.slug,
        content=post.content,
        author=AuthorOut(id=post.author.id, name=post.author.name, email=post.author.email),
        status=post.status,
        tags=post.tags,
        created_at=post.created_at,
        updated_at=post.updated_at,
        deleted_at=post.deleted_at,
    )


def parse_post_id(raw: str) -> Optional[uuid.UUID]:
    """A malformed id identifies no post."""
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        return None


class PostService:
    """
    Business logic for posts.

    Holds only the pagination limits; sessions and the caller's identity
    are passed per call.
    """

    def __init__(self, default_page_size: int = 10, max_page_size: int = 100):
        self.default_page_size = default_page_size
        self.max_page_size = max_page_size

    # ── Reads ─────────────────────────────────────────────────────────────

    async def list_posts(
        self,
        db: AsyncSession,
        query: ListQuery,
        auth: AuthContext,
    ) -> PostListResponse:
        """
        One page of the posts visible to the caller, newest first.

        Query plan:
            SELECT count(*) FROM posts WHERE <filter>
            SELECT * FROM posts WHERE <filter>
              ORDER BY created_at DESC LIMIT :limit OFFSET :offset
            (author and tags arrive via selectin loads)

        Raises:
            UnauthenticatedError: anonymous caller filtered by status
            ValidationError:      unknown status value
        """
        post_filter = build_list_filter(query, auth)
        page = Pagination.from_query(
            query.page,
            query.limit,
            default_limit=self.default_page_size,
            max_limit=self.max_page_size,
        )
        clauses = post_filter.clauses()

        try:
            count_stmt = select(func.count()).select_from(Post).where(*clauses)
            total = (await db.execute(count_stmt)).scalar_one()

            stmt = (
                select(Post)
                .where(*clauses)
                .order_by(desc(Post.created_at))
                .offset(page.offset)
                .limit(page.limit)
            )
            posts = (await db.execute(stmt)).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to list posts: %s", str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.debug(
            "Listed %d/%d posts (page=%d, limit=%d)",
            len(posts), total, page.page, page.limit,
        )
        return PostListResponse(
            data=[to_post_out(post) for post in posts],
            pagination=PaginationOut(
                page=page.page,
                limit=page.limit,
                total=total,
                pages=page.pages(total),
            ),
        )

    async def get_by_slug(self, db: AsyncSession, slug: str, auth: AuthContext) -> PostResponse:
        """
        Fetch one live post by slug.

        Raises:
            NotFoundError: no such post, soft-deleted, or a draft the
                           caller does not own (same error in every case)
        """
        result = await db.execute(
            select(Post).where(Post.slug == slug, Post.deleted_at.is_(None))
        )
        post = ensure_visible(result.scalar_one_or_none(), auth)
        return PostResponse(data=to_post_out(post))

    # ── Writes ────────────────────────────────────────────────────────────

    async def create(
        self,
        db: AsyncSession,
        auth: AuthContext,
        payload: Mapping[str, Any],
    ) -> PostResponse:
        """
        Create a post authored by the caller.

        Raises:
            UnauthenticatedError: caller is anonymous
            ValidationError:      title/content/status/tags invalid
            ConflictError:        another post already has this slug
        """
        if not isinstance(auth, Identified):
            raise UnauthenticatedError()
        clean = create_post_rules.validate(payload)

        post = Post(
            title=clean["title"],
            content=clean["content"],
            author_id=auth.user_id,
            status=clean.get("status") or DEFAULT_STATUS,
        )
        if clean.get("tags") is not None:
            post.tags = clean["tags"]

        await self._ensure_slug_free(db, post.slug)
        db.add(post)
        await self._flush(db, "create")
        logger.info("Post created: %s (slug=%s, author=%s)", post.id, post.slug, auth.user_id)

        return PostResponse(data=to_post_out(await self._reload(db, post.id)))

    async def update(
        self,
        db: AsyncSession,
        auth: AuthContext,
        post_id: str,
        payload: Mapping[str, Any],
    ) -> PostResponse:
        """
        Partially update a post owned by the caller.

        Raises:
            ValidationError:      a supplied field is invalid
            NotFoundError:        id malformed, unknown, or soft-deleted
            ForbiddenError:       caller is not the author
            ConflictError:        the new title's slug is taken
        """
        clean = update_post_rules.validate(payload)
        post = authorize_mutation(await self._find(db, post_id), auth, "update")

        # Checked before any attribute changes so autoflush has nothing to write
        if clean.get("title"):
            new_slug = slugify(clean["title"])
            if new_slug != post.slug:
                await self._ensure_slug_free(db, new_slug, exclude=post.id)
        changed = apply_update(post, clean)
        await self._flush(db, "update")
        logger.info("Post updated: %s (fields=%s)", post.id, ",".join(changed) or "none")

        return PostResponse(data=to_post_out(await self._reload(db, post.id)))

    async def delete(self, db: AsyncSession, auth: AuthContext, post_id: str) -> None:
        """
        Soft-delete a post owned by the caller.

        Raises:
            NotFoundError:  id malformed, unknown, or already deleted
            ForbiddenError: caller is not the author
        """
        post = authorize_mutation(await self._find(db, post_id), auth, "delete")
        mark_deleted(post)
        await self._flush(db, "delete")
        logger.info("Post soft-deleted: %s", post.id)

    # ── Helpers ───────────────────────────────────────────────────────────

    async def _find(self, db: AsyncSession, post_id: str) -> Optional[Post]:
        parsed = parse_post_id(post_id)
        if parsed is None:
            return None
        result = await db.execute(select(Post).where(Post.id == parsed))
        return result.scalar_one_or_none()

    async def _reload(self, db: AsyncSession, post_id: uuid.UUID) -> Post:
        # populate_existing refreshes the identity-map copy, tags included
        result = await db.execute(
            select(Post)
            .where(Post.id == post_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one()

    async def _ensure_slug_free(
        self,
        db: AsyncSession,
        slug: str,
        exclude: Optional[uuid.UUID] = None,
    ) -> None:
        # Soft-deleted posts keep their slug, so they are checked too
        stmt = select(Post.id).where(Post.slug == slug)
        if exclude is not None:
            stmt = stmt.where(Post.id != exclude)
        result = await db.execute(stmt)
        if result.first() is not None:
            raise ConflictError("slug")

    async def _flush(self, db: AsyncSession, operation: str) -> None:
        try:
            await db.flush()
        except IntegrityError as e:
            # Concurrent writer took the slug between the check and the flush
            logger.warning("Integrity error during post %s: %s", operation, e.orig)
            raise ConflictError("slug")
        except SQLAlchemyError as e:
            logger.error("Database error during post %s: %s", operation, str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})
