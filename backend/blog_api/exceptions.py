"""
Blog API - Custom Exception Hierarchy
=====================================

What:  Application-specific exceptions for every failure the API reports.
How:   Each exception carries a user-facing message and an optional context
       dict. Global handlers registered in main.py turn them into the
       {"success": false, "error": ...} envelope with the right status code.
Who:   Raised by the auth gate, validation rule-lists, visibility policy and
       services; caught by the handlers in main.py.

Exception Hierarchy:
    BlogAPIError (base)
    ├── ValidationError        → 400 Bad Request (carries per-field errors)
    ├── UnauthenticatedError   → 401 Unauthorized
    ├── ForbiddenError         → 403 Forbidden
    ├── NotFoundError          → 404 Not Found
    ├── ConflictError          → 400 Bad Request (duplicate unique field)
    └── DatabaseError          → 500 Internal Server Error

Hidden drafts raise the very same NotFoundError as a missing post, so the
response body cannot reveal whether a draft exists.
"""

from typing import Any, Dict, List, Optional


class BlogAPIError(Exception):
    """
    Base exception for all Blog API errors.

    Attributes:
        message:      User-facing error description (safe to return)
        context:      Additional debug info (logged, never returned)
        status_code:  HTTP status the global handler responds with
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(BlogAPIError):
    """
    Raised when client input fails one or more validation rules.

    Every failed rule is kept in `errors` as {"field", "message"} so the
    client can fix all problems in one round trip.

    Example response:
        {
            "success": false,
            "error": "Name is required, Please provide a valid email",
            "errors": [
                {"field": "name", "message": "Name is required"},
                {"field": "email", "message": "Please provide a valid email"}
            ]
        }
    """

    status_code = 400

    def __init__(
        self,
        message: Optional[str] = None,
        errors: Optional[List[Dict[str, Optional[str]]]] = None,
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        self.errors = list(errors or [])
        if message is None:
            message = ", ".join(e["message"] for e in self.errors) or "Validation failed"
        if not self.errors:
            self.errors = [{"field": field, "message": message}]
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class UnauthenticatedError(BlogAPIError):
    """
    Missing, invalid or expired token, unknown token subject, or bad login
    credentials.
    """

    status_code = 401

    def __init__(
        self,
        message: str = "Not authorized to access this route",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ForbiddenError(BlogAPIError):
    """The caller is authenticated but does not own the resource."""

    status_code = 403

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(BlogAPIError):
    """
    Raised when a requested resource does not exist, was soft-deleted, or is
    hidden from the caller by the visibility policy.
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(message=f"{resource} not found", context=ctx)


class ConflictError(BlogAPIError):
    """
    Raised when a write would duplicate a unique field (email, slug).

    The message names the field: "Email already exists".
    """

    status_code = 400

    def __init__(
        self,
        field: str = "value",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["field"] = field
        super().__init__(message=f"{field.capitalize()} already exists", context=ctx)
        self.field = field


class DatabaseError(BlogAPIError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic; the original
    error type goes into context and the server log only.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)
