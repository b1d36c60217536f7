"""
Blog API - User SQLAlchemy Model
================================

What:  ORM model for the `users` table (the credential store).
Who:   AuthService (register/login), the auth gate (token subject lookup),
       and Post.author for populating author name/email.

Table Design:
    - UUID primary key: non-sequential, not enumerable
    - name: TEXT; registration sets no length limit
    - email: unique, stored trimmed and lower-cased by AuthService;
      email-validator already caps addresses at 254 characters
    - password_hash: bcrypt hash from passlib; never serialized
    - created_at: UTC with timezone
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column

from blog_api.database import Base


class User(Base):
    """
    A registered author.

    Lifecycle:
        Created on registration; never mutated or deleted by the API.
    """

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(Text, nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
