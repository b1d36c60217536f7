"""
Authentication: caller identity, bearer tokens, password hashing and the
FastAPI dependencies that gate routes.
"""

from blog_api.auth.identity import ANONYMOUS, Anonymous, AuthContext, Identified

__all__ = ["ANONYMOUS", "Anonymous", "AuthContext", "Identified"]
