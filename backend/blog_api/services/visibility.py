"""
Blog API - Post Visibility & Access Policy
==========================================

What:  The decision engine for "which posts may this caller see" and "may
       this caller change this post".
How:   Pure functions over (query parameters, AuthContext, Post). Nothing
       here touches the database: build_list_filter() returns a PostFilter
       that PostService renders into SQL WHERE clauses, and the per-post
       checks receive an already-loaded Post (or None).
Who:   PostService for every read and write path.

Listing rules (build_list_filter):
    Always                    deleted_at IS NULL
    search                    title ILIKE %s% OR content ILIKE %s%
    tag                       post has that exact tag
    author                    author_id = author (unparseable id → no rows)
    status given, anonymous   UnauthenticatedError
    status=draft              status = draft AND author_id = caller
                              (replaces any author filter the caller sent)
    status=published          status = published
    no status, anonymous      status = published
    no status, identified     status = published
                              OR (status = draft AND author_id = caller)

Single-post rules:
    ensure_visible()       missing, deleted, or someone else's draft
                           → the same NotFoundError("Post")
    authorize_mutation()   missing/deleted → NotFoundError
                           not the author → ForbiddenError
"""

import logging
import math
import re
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, List, Mapping, Optional

from sqlalchemy import and_, false, or_
from sqlalchemy.sql.elements import ColumnElement

from blog_api.auth.identity import AuthContext, Identified
from blog_api.exceptions import (
    ForbiddenError,
    NotFoundError,
    UnauthenticatedError,
    ValidationError,
)
from blog_api.models.post import Post, PostTag, utc_now
from blog_api.validation import STATUS_MESSAGE

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*[+-]?\d+")
_LIKE_SPECIALS = re.compile(r"([\\%_])")

UPDATABLE_FIELDS = ("title", "content", "status")


# ══════════════════════════════════════════════════════════════════════════
# Listing
# ══════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class ListQuery:
    """Raw query-string parameters of GET /api/posts, unparsed."""

    page: Optional[str] = None
    limit: Optional[str] = None
    search: Optional[str] = None
    tag: Optional[str] = None
    author: Optional[str] = None
    status: Optional[str] = None


def parse_positive_int(value: Optional[str], default: int) -> int:
    """
    Read a leading integer the way a lenient query parser does.

    "3" → 3, "2abc" → 2, "abc" / "" / "0" / "-4" / None → default.
    """
    if value is None:
        return default
    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    number = int(match.group(0))
    return number if number >= 1 else default


@dataclass(frozen=True)
class Pagination:
    page: int
    limit: int

    @classmethod
    def from_query(
        cls,
        page: Optional[str],
        limit: Optional[str],
        default_limit: int = 10,
        max_limit: int = 100,
    ) -> "Pagination":
        return cls(
            page=parse_positive_int(page, 1),
            limit=min(parse_positive_int(limit, default_limit), max_limit),
        )

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    def pages(self, total: int) -> int:
        return math.ceil(total / self.limit)


def escape_like(text: str) -> str:
    """Escape LIKE wildcards so search text matches literally."""
    return _LIKE_SPECIALS.sub(r"\\\1", text)


@dataclass(frozen=True)
class PostFilter:
    """
    The effective filter for a listing; clauses() renders it as SQL.

    include_drafts_of set means "published posts, plus drafts by this
    user"; status set means "exactly this status". They are never both set.
    """

    search: Optional[str] = None
    tag: Optional[str] = None
    author_id: Optional[uuid.UUID] = None
    status: Optional[str] = None
    include_drafts_of: Optional[uuid.UUID] = None
    matches_nothing: bool = False

    def clauses(self) -> List[ColumnElement[bool]]:
        """Render as SQLAlchemy WHERE clauses, to be AND-ed together."""
        clauses: List[ColumnElement[bool]] = [Post.deleted_at.is_(None)]
        if self.matches_nothing:
            clauses.append(false())
        if self.search:
            pattern = f"%{escape_like(self.search)}%"
            clauses.append(
                or_(
                    Post.title.ilike(pattern, escape="\\"),
                    Post.content.ilike(pattern, escape="\\"),
                )
            )
        if self.tag:
            clauses.append(Post.tag_entries.any(PostTag.name == self.tag))
        if self.author_id is not None:
            clauses.append(Post.author_id == self.author_id)
        if self.status is not None:
            clauses.append(Post.status == self.status)
        if self.include_drafts_of is not None:
            clauses.append(
                or_(
                    Post.status == "published",
                    and_(Post.status == "draft", Post.author_id == self.include_drafts_of),
                )
            )
        return clauses


def build_list_filter(query: ListQuery, auth: AuthContext) -> PostFilter:
    """
    Combine the caller's query with the visibility rules.

    Raises:
        UnauthenticatedError: anonymous caller asked for a status filter
        ValidationError:      status is neither draft nor published
    """
    author_id: Optional[uuid.UUID] = None
    matches_nothing = False
    if query.author:
        try:
            author_id = uuid.UUID(query.author)
        except ValueError:
            # Empty page rather than the 404 a failed id cast would give
            matches_nothing = True

    if query.status:
        if not isinstance(auth, Identified):
            raise UnauthenticatedError("Authentication required to filter by status")
        if query.status == "draft":
            # Drafts are only ever the caller's own, whatever author was asked for
            if query.author and author_id != auth.user_id:
                logger.debug(
                    "status=draft overrides author=%s with caller %s",
                    query.author,
                    auth.user_id,
                )
            return PostFilter(
                search=query.search or None,
                tag=query.tag or None,
                author_id=auth.user_id,
                status="draft",
            )
        if query.status != "published":
            raise ValidationError(STATUS_MESSAGE, field="status")
        return PostFilter(
            search=query.search or None,
            tag=query.tag or None,
            author_id=author_id,
            status="published",
            matches_nothing=matches_nothing,
        )

    if isinstance(auth, Identified):
        return PostFilter(
            search=query.search or None,
            tag=query.tag or None,
            author_id=author_id,
            include_drafts_of=auth.user_id,
            matches_nothing=matches_nothing,
        )
    return PostFilter(
        search=query.search or None,
        tag=query.tag or None,
        author_id=author_id,
        status="published",
        matches_nothing=matches_nothing,
    )


# ══════════════════════════════════════════════════════════════════════════
# Single post
# ══════════════════════════════════════════════════════════════════════════

def ensure_visible(post: Optional[Post], auth: AuthContext) -> Post:
    """
    Gate a slug lookup.

    A draft the caller does not own is reported exactly like a missing
    post.
    """
    if post is None or post.is_deleted:
        raise NotFoundError("Post")
    if post.status == "draft":
        if not (isinstance(auth, Identified) and auth.owns(post.author_id)):
            raise NotFoundError("Post")
    return post


def authorize_mutation(post: Optional[Post], auth: AuthContext, action: str) -> Post:
    """
    Gate an update or delete.

    Args:
        action: "update" or "delete", used in the Forbidden message

    Raises:
        NotFoundError:         post missing or soft-deleted
        UnauthenticatedError:  no identified caller
        ForbiddenError:        caller is not the author
    """
    if post is None or post.is_deleted:
        raise NotFoundError("Post")
    if not isinstance(auth, Identified):
        raise UnauthenticatedError()
    if not auth.owns(post.author_id):
        raise ForbiddenError(
            f"Not authorized to {action} this post",
            context={"post_id": str(post.id), "user_id": str(auth.user_id)},
        )
    return post


def apply_update(post: Post, changes: Mapping[str, Any]) -> List[str]:
    """
    Apply a partial update in place.

    title/content/status change only when a non-empty value is supplied.
    tags change whenever a list is supplied, so [] clears them. Assigning
    title re-derives the slug (see Post._derive_slug).

    Returns:
        Names of the fields that were assigned
    """
    changed = []
    for name in UPDATABLE_FIELDS:
        value = changes.get(name)
        if value:
            setattr(post, name, value)
            changed.append(name)
    tags = changes.get("tags")
    if tags is not None:
        post.tags = list(tags)
        changed.append("tags")
    return changed


def mark_deleted(post: Post, now: Optional[datetime] = None) -> Post:
    """Soft-delete: stamp deleted_at and leave every other field alone."""
    post.deleted_at = now or utc_now()
    return post
