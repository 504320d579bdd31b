# src/cask_notes/services/__init__.py
"""Business logic services for the Cask Notes application."""

from .accounts import AccountService, RegistrationResult, resolve_identity
from .comments import CommentService
from .conversion import AnonymousPostConverter
from .post_authority import PostOwnershipAuthority
from .sanitizer import sanitize_content

__all__ = [
    "AccountService",
    "AnonymousPostConverter",
    "CommentService",
    "PostOwnershipAuthority",
    "RegistrationResult",
    "resolve_identity",
    "sanitize_content",
]
