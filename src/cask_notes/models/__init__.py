# src/cask_notes/models/__init__.py
"""SQLAlchemy models for the Cask Notes application."""

from .comment import Comment
from .post import OwnershipMode, Post
from .user import User

__all__ = [
    "Comment",
    "OwnershipMode",
    "Post",
    "User",
]
