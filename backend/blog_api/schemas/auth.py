"""
Blog API - Auth Request/Response Schemas
========================================

Request bodies are deliberately loose (every field optional): the rule-lists
in blog_api.validation decide what is missing or malformed, so all problems
come back together in one 400 response instead of FastAPI's 422.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    name: Optional[str] = Field(default=None, examples=["John Doe"])
    email: Optional[str] = Field(default=None, examples=["john@example.com"])
    password: Optional[str] = Field(
        default=None,
        description="At least 6 characters",
        examples=["secret123"],
    )


class LoginRequest(BaseModel):
    email: Optional[str] = Field(default=None, examples=["john@example.com"])
    password: Optional[str] = Field(default=None, examples=["secret123"])


class UserOut(BaseModel):
    """Public user representation; the password hash never leaves the server."""
    id: uuid.UUID
    name: str
    email: str
    created_at: datetime

    model_config = {"from_attributes": True}


class AuthData(BaseModel):
    user: UserOut
    token: str = Field(description="Bearer token for the Authorization header")


class AuthResponse(BaseModel):
    success: bool = Field(default=True)
    data: AuthData
