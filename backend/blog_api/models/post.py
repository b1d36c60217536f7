"""
Blog API - Post SQLAlchemy Models
=================================

What:  ORM models for the `posts` table and its `post_tags` child table.
Who:   PostService for CRUD, the visibility policy for filter building,
       Alembic for schema management.

Table Design:
    - title, slug, tag names: TEXT; request validation sets no length limit
    - slug: derived from title on every title assignment (see slugify()),
      unique across all posts including soft-deleted ones
    - status: 'draft' | 'published', defaults to 'draft'
    - deleted_at: soft-delete marker; NULL means live. Rows are never
      physically removed.
    - tags: one row per (post, tag) in post_tags, ordered by position so
      the client gets tags back in the order it sent them

    Relationships use lazy="selectin": every SELECT of Post eagerly loads
    author and tags, so nothing lazy-loads later inside async code.

Indexes:
    slug (unique), author_id, status, deleted_at, created_at DESC,
    post_tags.name
"""

import re
import uuid
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from blog_api.database import Base
from blog_api.models.user import User

POST_STATUSES = ("draft", "published")
DEFAULT_STATUS = "draft"

# re.ASCII: "word character" means [A-Za-z0-9_], so accented letters are
# stripped rather than kept
_NON_SLUG_CHARS = re.compile(r"[^\w\s-]", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-+")


def slugify(title: str) -> str:
    """
    Derive a URL slug from a post title.

    Steps: trim, lowercase, drop anything that is not a word character,
    whitespace or hyphen, turn whitespace runs into one hyphen, collapse
    repeated hyphens.

    >>> slugify("Getting Started with Node.js!")
    'getting-started-with-nodejs'
    """
    slug = title.strip().lower()
    slug = _NON_SLUG_CHARS.sub("", slug)
    slug = _WHITESPACE.sub("-", slug)
    slug = _HYPHENS.sub("-", slug)
    return slug.strip()


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PostTag(Base):
    """One tag attached to one post."""

    __tablename__ = "post_tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("posts.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("post_id", "name", name="uq_post_tags_post_id_name"),
        Index("idx_post_tags_name", "name"),
    )

    def __repr__(self) -> str:
        return f"<PostTag(post_id={self.post_id}, name='{self.name}')>"


class Post(Base):
    """
    A blog post.

    Lifecycle:
        1. Created by an authenticated user (author = caller), status
           defaults to 'draft'
        2. Updated only by its author; a new title recomputes the slug
        3. Soft-deleted only by its author (deleted_at set, nothing else
           touched); hidden from every query afterwards
    """

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(Text, nullable=False)

    slug: Mapped[str] = mapped_column(Text, nullable=False)

    content: Mapped[str] = mapped_column(Text, nullable=False)

    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("users.id"),
        nullable=False,
    )

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=DEFAULT_STATUS,
        server_default=text("'draft'"),
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        default=None,
    )

    author: Mapped[User] = relationship(lazy="selectin")

    tag_entries: Mapped[List[PostTag]] = relationship(
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by=PostTag.position,
    )

    __table_args__ = (
        UniqueConstraint("slug", name="uq_posts_slug"),
        Index("idx_posts_author_id", "author_id"),
        Index("idx_posts_status", "status"),
        Index("idx_posts_deleted_at", "deleted_at"),
        Index("idx_posts_created_at", created_at.desc()),
    )

    @validates("title")
    def _derive_slug(self, key: str, value: str) -> str:
        # Keeps the slug in lock-step with the title on every assignment
        title = value.strip()
        self.slug = slugify(title)
        return title

    @property
    def tags(self) -> List[str]:
        return [entry.name for entry in self.tag_entries]

    @tags.setter
    def tags(self, names: List[str]) -> None:
        unique: List[str] = []
        for name in names:
            name = name.strip()
            if name and name not in unique:
                unique.append(name)
        # Reuse rows for tags that survive: the unit of work inserts before it
        # deletes, so re-adding a dropped (post_id, name) would collide
        existing = {entry.name: entry for entry in self.tag_entries}
        entries = []
        for position, name in enumerate(unique):
            entry = existing.get(name) or PostTag(name=name)
            entry.position = position
            entries.append(entry)
        self.tag_entries = entries

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def __repr__(self) -> str:
        return f"<Post(id={self.id}, slug='{self.slug}', status='{self.status}')>"
