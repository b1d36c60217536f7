"""
Blog API - FastAPI Application Factory
======================================

What:  Creates and configures the FastAPI application instance.
How:   create_app(settings) builds the AppContext, registers middleware,
       exception handlers and routers, and returns the app. The
       module-level `app` is what uvicorn serves (uvicorn blog_api.main:app).

Application Architecture:
    ┌─────────────────────────────────────────────────────┐
    │                   FastAPI App                       │
    │                                                     │
    │  Middleware Chain:                                  │
    │  ┌──────────┐ ┌──────────────┐ ┌─────────────────┐  │
    │  │  Req ID  │→│  Access log  │→│  GZip → CORS    │  │
    │  └──────────┘ └──────────────┘ └─────────────────┘  │
    │                                                     │
    │  Routes:                                            │
    │  ┌────────────┐ ┌─────────────┐ ┌───────────────┐   │
    │  │ /api/auth  │ │ /api/posts  │ │ / and /health │   │
    │  └────────────┘ └─────────────┘ └───────────────┘   │
    │                                                     │
    │  Exception Handlers:                                │
    │  ┌───────────────────────────────────────────────┐  │
    │  │ BlogAPIError→status_code │ 404 route │ 500    │  │
    │  └───────────────────────────────────────────────┘  │
    │                                                     │
    │  app.state.context: AppContext                      │
    └─────────────────────────────────────────────────────┘

Error envelope (every failure):
    {"success": false, "error": "<message>"}
    + "errors": [{"field", "message"}]   validation failures
    + "stack": "<traceback>"             unexpected errors, development only
"""

import logging
import sys
import traceback
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blog_api import __version__
from blog_api.config import Settings
from blog_api.context import build_context
from blog_api.exceptions import BlogAPIError, DatabaseError, ValidationError
from blog_api.middleware.logging import RequestLoggingMiddleware
from blog_api.middleware.request_id import (
    REQUEST_ID_HEADER,
    RequestIDFilter,
    RequestIDMiddleware,
    request_id_var,
)
from blog_api.routes import auth, health, index, posts

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

def setup_logging(settings: Settings) -> None:
    """
    Configure logging for the whole process.

    Format: 2024-01-15T12:00:00 [INFO] blog_api.services.post_service [a1b2c3d4] ...

    The request id comes from RequestIDFilter on the handler, so records
    logged outside a request show "-".
    """
    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s [%(request_id)s] %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
        handlers=[handler],
        force=True,
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: configure logging, check production settings, log readiness.
    Shutdown: dispose the database engine.
    """
    ctx = app.state.context
    settings = ctx.settings

    # ── Startup ───────────────────────────────────────────────────────────
    setup_logging(settings)
    logger.info("=" * 60)
    logger.info("Blog API %s starting up (%s)", __version__, settings.environment)

    try:
        settings.validate_required_for_production()
    except ValueError as e:
        logger.error("Configuration error: %s", str(e))
        raise

    logger.info("Server ready at http://%s:%d", settings.backend_host, settings.backend_port)
    logger.info("API docs: http://%s:%d/api-docs", settings.backend_host, settings.backend_port)
    logger.info("=" * 60)

    yield

    # ── Shutdown ──────────────────────────────────────────────────────────
    logger.info("Blog API shutting down...")
    await ctx.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def error_body(message: str, **extra) -> dict:
    body = {"success": False, "error": message}
    body.update({k: v for k, v in extra.items() if v is not None})
    return body


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:
    """
    Map every failure onto the error envelope.

    Handler hierarchy:
        BlogAPIError            → exc.status_code (400/401/403/404/500)
        RequestValidationError  → 400 (malformed JSON or wrong field types)
        StarletteHTTPException  → its status; 404 becomes "Route ... not found"
        Exception (fallback)    → 500 "Internal Server Error"

    Context dicts and tracebacks are logged, never returned, except the
    traceback of an unexpected error in development.
    """

    @app.exception_handler(BlogAPIError)
    async def handle_blog_api_error(request: Request, exc: BlogAPIError):
        rid = request_id_var.get()
        if isinstance(exc, DatabaseError):
            logger.error("[%s] Database error: %s | Context: %s", rid, exc.message, exc.context)
        elif exc.status_code >= 500:
            logger.error("[%s] %s: %s", rid, type(exc).__name__, exc.message)
        else:
            logger.info("[%s] %s: %s", rid, type(exc).__name__, exc.message)

        errors = exc.errors if isinstance(exc, ValidationError) else None
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, errors=errors),
        )

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        errors = []
        for err in exc.errors():
            loc = [str(part) for part in err.get("loc", ()) if part != "body"]
            errors.append({"field": ".".join(loc) or None, "message": err.get("msg", "Invalid value")})
        message = ", ".join(e["message"] for e in errors) or "Invalid request"
        logger.info("[%s] Request validation failed: %s", request_id_var.get(), message)
        return JSONResponse(status_code=400, content=error_body(message, errors=errors))

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            message = f"Route {request.url.path} not found"
        else:
            message = str(exc.detail)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(message),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get()
        logger.error("[%s] Unexpected error: %s", rid, str(exc), exc_info=True)
        stack = None
        if settings.environment == "development":
            stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        return JSONResponse(
            status_code=500,
            content=error_body("Internal Server Error", stack=stack),
        )


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Assemble the application.

    Args:
        settings: Configuration to build from; read from the environment
                  when omitted. Tests pass their own.
    """
    settings = settings or Settings()

    app = FastAPI(
        title="Blog API",
        description=(
            "Blog backend with user registration, token login, and post CRUD "
            "with draft/published visibility and author-only editing."
        ),
        version=__version__,
        docs_url="/api-docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.context = build_context(settings)

    # ── Register Middleware ───────────────────────────────────────────────
    # Last added runs first: RequestID → Logging → GZip → CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )
    app.add_middleware(GZipMiddleware, minimum_size=500)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # ── Register Exception Handlers ───────────────────────────────────────
    register_exception_handlers(app, settings)

    # ── Register Routes ───────────────────────────────────────────────────
    app.include_router(index.router)
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(posts.router)

    return app


app = create_app()
