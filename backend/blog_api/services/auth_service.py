"""
Blog API - Auth Service
=======================

What:  Registration and login.
Why:   Keeps credential handling out of the route handlers so it can be
       exercised with a mocked session.
How:   Validate with the rule-lists, talk to the users table through the
       request's AsyncSession, hash with PasswordHasher, sign with
       TokenService.
Who:   POST /api/auth/register and POST /api/auth/login.

Flow (register):
    ┌──────────┐    ┌───────────────┐    ┌──────────┐    ┌──────────┐
    │ Validate │───▶│ Email unused? │───▶│  Hash +  │───▶│  Issue   │
    │ (rules)  │    │  (SELECT)     │    │  INSERT  │    │  token   │
    └──────────┘    └───────────────┘    └──────────┘    └──────────┘

Login never says which half of the credentials was wrong: an unknown email
and a wrong password both raise UnauthenticatedError("Invalid credentials").
"""

import logging
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from blog_api.auth.passwords import PasswordHasher
from blog_api.auth.tokens import TokenService
from blog_api.exceptions import BlogAPIError, ConflictError, DatabaseError, UnauthenticatedError
from blog_api.models.user import User
from blog_api.schemas.auth import AuthData, AuthResponse, UserOut
from blog_api.validation import login_rules, register_rules

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"


class AuthService:
    """
    Stateless apart from the two collaborators it is built with; the
    session is passed per call.
    """

    def __init__(self, tokens: TokenService, passwords: PasswordHasher):
        self.tokens = tokens
        self.passwords = passwords

    async def register(self, db: AsyncSession, payload: Mapping[str, Any]) -> AuthResponse:
        """
        Create an account and sign the caller in.

        Raises:
            ValidationError: name/email/password failed the rule-list
            ConflictError:   email already registered
            DatabaseError:   anything else went wrong in the database
        """
        clean = register_rules.validate(payload)
        email = clean["email"].lower()

        try:
            existing = await db.execute(select(User.id).where(User.email == email))
            if existing.scalar_one_or_none() is not None:
                raise ConflictError("email")

            user = User(
                name=clean["name"],
                email=email,
                password_hash=self.passwords.hash(clean["password"]),
            )
            db.add(user)
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise ConflictError("email")
        except BlogAPIError:
            raise
        except Exception as e:
            logger.error("Unexpected error in register: %s", str(e), exc_info=True)
            raise DatabaseError(context={"original_error": type(e).__name__})

        logger.info("User registered: %s", user.id)
        return self._respond(user)

    async def login(self, db: AsyncSession, payload: Mapping[str, Any]) -> AuthResponse:
        """
        Exchange email + password for a token.

        Raises:
            ValidationError:      email/password failed the rule-list
            UnauthenticatedError: unknown email or wrong password
        """
        clean = login_rules.validate(payload)
        email = clean["email"].lower()

        result = await db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if user is None or not self.passwords.verify(clean["password"], user.password_hash):
            logger.info("Failed login attempt for %s", email)
            raise UnauthenticatedError(INVALID_CREDENTIALS)

        logger.info("User logged in: %s", user.id)
        return self._respond(user)

    def _respond(self, user: User) -> AuthResponse:
        return AuthResponse(
            data=AuthData(
                user=UserOut.model_validate(user),
                token=self.tokens.issue(user.id),
            )
        )
