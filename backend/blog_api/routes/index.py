"""GET / : a short machine-readable index of the API."""

from fastapi import APIRouter

from blog_api import __version__

router = APIRouter(tags=["Index"])

ENDPOINTS = {
    "auth": {
        "register": "POST /api/auth/register",
        "login": "POST /api/auth/login",
    },
    "posts": {
        "create": "POST /api/posts",
        "list": "GET /api/posts",
        "get": "GET /api/posts/{slug}",
        "update": "PUT /api/posts/{id}",
        "delete": "DELETE /api/posts/{id}",
    },
}


@router.get("/", summary="API index")
async def index() -> dict:
    return {
        "success": True,
        "message": "Blog API",
        "version": __version__,
        "documentation": "/api-docs",
        "endpoints": ENDPOINTS,
    }
