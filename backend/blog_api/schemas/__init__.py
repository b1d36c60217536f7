"""Pydantic request/response schemas (the public API contract)."""
