"""
Blog API - Application Package
==============================

What: Package root for the blogging REST API backend.
Who:  Imported by uvicorn (blog_api.main:app), Alembic and pytest.

Architecture Note:
    ┌─────────────────────────────────────┐
    │        Routes (HTTP layer)          │  ← status codes, envelopes
    ├─────────────────────────────────────┤
    │  Auth gate + validation rule-lists  │  ← who is calling, is input sane
    ├─────────────────────────────────────┤
    │   Services + visibility policy      │  ← who may see / change what
    ├─────────────────────────────────────┤
    │     Models & Schemas (Data)         │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │   Database (async SQLAlchemy)       │
    └─────────────────────────────────────┘

    Everything process-wide (settings, engine, session factory, token
    service, password hasher) lives on one AppContext built by
    create_app(); see blog_api.context.
"""

__version__ = "1.0.0"
