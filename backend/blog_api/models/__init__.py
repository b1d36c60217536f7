"""ORM models. Importing this package registers every table on Base.metadata."""

from blog_api.models.post import Post, PostTag
from blog_api.models.user import User

__all__ = ["Post", "PostTag", "User"]
