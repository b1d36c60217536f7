"""
Blog API - Routes Package
=========================

Route Inventory:
    - auth.py:    POST /api/auth/register, POST /api/auth/login
    - posts.py:   POST/GET /api/posts, GET /api/posts/{slug},
                  PUT/DELETE /api/posts/{id}
    - health.py:  GET /health
    - index.py:   GET /

Routes stay thin: pull the body, query and caller out of the request, call
the service from the AppContext, return its response model. Business rules
live in blog_api.services.
"""
