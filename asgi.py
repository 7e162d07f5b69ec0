"""
asgi.py -- ASGI entry point for the bookmarks auth service.

Run with:  uvicorn asgi:app --reload

Only the auth API is served here; the bookmark and profile endpoints are
not part of this package.
"""

from api.main import app

__all__ = ["app"]
