"""
Blog API - Post Request/Response Schemas
========================================

What:  API contract for the /api/posts endpoints.
Why:   Separate from the ORM models so internal columns (author_id,
       post_tags positions) never leak and the OpenAPI docs describe the
       public shape.

Like the auth schemas, request bodies accept anything per field; the
create/update rule-lists report every problem at once.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class PostCreateRequest(BaseModel):
    title: Optional[str] = Field(default=None, examples=["Getting Started with Node.js"])
    content: Optional[str] = Field(default=None, examples=["Node.js is a powerful runtime..."])
    status: Optional[str] = Field(
        default=None,
        description="draft (default) or published",
        examples=["published"],
    )
    tags: Optional[Any] = Field(
        default=None,
        description="Array of tag strings",
        examples=[["nodejs", "javascript"]],
    )


class PostUpdateRequest(BaseModel):
    """Partial update: only fields present and non-empty are changed."""
    title: Optional[str] = Field(default=None)
    content: Optional[str] = Field(default=None)
    status: Optional[str] = Field(default=None, description="draft or published")
    tags: Optional[Any] = Field(default=None, description="Replaces all tags; [] clears them")


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class AuthorOut(BaseModel):
    """The populated author of a post."""
    id: uuid.UUID
    name: str
    email: str


class PostOut(BaseModel):
    id: uuid.UUID
    title: str
    slug: str = Field(description="URL identifier derived from the title")
    content: str
    author: AuthorOut
    status: str = Field(description="draft or published")
    tags: List[str]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = None


class PostResponse(BaseModel):
    success: bool = Field(default=True)
    data: PostOut


class PaginationOut(BaseModel):
    page: int = Field(description="1-indexed page number")
    limit: int = Field(description="Page size")
    total: int = Field(description="Posts matching the filter across all pages")
    pages: int = Field(description="ceil(total / limit)")


class PostListResponse(BaseModel):
    success: bool = Field(default=True)
    data: List[PostOut]
    pagination: PaginationOut
