"""
Blog API - Token Service
========================

What:  Issues and verifies signed, time-limited bearer tokens (JWT via PyJWT).
How:   Payload {"sub": <user id>, "iat", "exp"}, signed with the configured
       secret and algorithm. verify() returns the subject or raises
       TokenInvalidError; expiry, bad signatures and malformed tokens are
       deliberately not distinguished for callers.
Who:   AuthService issues tokens after register/login; the auth gate
       verifies them.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone

import jwt

logger = logging.getLogger(__name__)


class TokenInvalidError(Exception):
    """Token is expired, tampered with, malformed, or has no usable subject."""


class TokenService:
    """
    Sign/verify capability for identity tokens.

    Args:
        secret:          HMAC signing secret
        algorithm:       JWS algorithm name (default HS256)
        expire_minutes:  Token lifetime
    """

    def __init__(self, secret: str, algorithm: str = "HS256", expire_minutes: int = 10_080):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    def issue(self, user_id: uuid.UUID) -> str:
        """Create a signed token whose subject is the given user id."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + timedelta(minutes=self.expire_minutes),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> uuid.UUID:
        """
        Verify a token and return its subject.

        Raises:
            TokenInvalidError: for any verification failure
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError as e:
            logger.debug("Rejected expired token")
            raise TokenInvalidError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            logger.debug("Rejected invalid token: %s", e)
            raise TokenInvalidError(f"Invalid token: {e}") from e

        try:
            return uuid.UUID(payload["sub"])
        except (ValueError, TypeError, AttributeError) as e:
            raise TokenInvalidError("Token subject is not a user id") from e
