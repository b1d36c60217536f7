"""
Blog API - Middleware Package
=============================

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    Request ID runs outermost so the access log line, and every log line
    emitted while the handler runs, carries the same id.
"""
