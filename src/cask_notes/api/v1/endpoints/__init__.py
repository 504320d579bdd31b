# src/cask_notes/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .auth import router as auth_router
from .content import router as content_router
from .posts import router as posts_router

__all__ = [
    "auth_router",
    "content_router",
    "posts_router",
]
