"""
Blog API - Application Context
==============================

What:  One explicitly constructed object holding every piece of process-wide
       state: settings, database engine, session factory, token service,
       password hasher, and the services built on top of them.
How:   create_app(settings) calls build_context(settings) and stores the
       result on app.state.context. Dependencies reach it through
       get_context(request). Nothing is created at import time, so a test
       can build an app against its own database with its own settings.
Who:   main.create_app(), route dependencies, the test suite.
"""

import logging
from dataclasses import dataclass

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from blog_api.auth.passwords import PasswordHasher
from blog_api.auth.tokens import TokenService
from blog_api.config import Settings
from blog_api.database import build_engine, build_session_factory
from blog_api.services.auth_service import AuthService
from blog_api.services.post_service import PostService

logger = logging.getLogger(__name__)


@dataclass
class AppContext:
    settings: Settings
    engine: AsyncEngine
    session_factory: async_sessionmaker[AsyncSession]
    tokens: TokenService
    passwords: PasswordHasher
    auth_service: AuthService
    post_service: PostService

    async def dispose(self) -> None:
        """Close every pooled database connection (called on shutdown)."""
        await self.engine.dispose()
        logger.info("Database engine disposed")


def build_context(settings: Settings) -> AppContext:
    """Wire the context together from a Settings instance."""
    engine = build_engine(settings)
    tokens = TokenService(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expire_minutes=settings.jwt_expire_minutes,
    )
    passwords = PasswordHasher(rounds=settings.bcrypt_rounds)
    return AppContext(
        settings=settings,
        engine=engine,
        session_factory=build_session_factory(engine),
        tokens=tokens,
        passwords=passwords,
        auth_service=AuthService(tokens=tokens, passwords=passwords),
        post_service=PostService(
            default_page_size=settings.default_page_size,
            max_page_size=settings.max_page_size,
        ),
    )


def get_context(request: Request) -> AppContext:
    """FastAPI dependency returning the context the app was built with."""
    return request.app.state.context
