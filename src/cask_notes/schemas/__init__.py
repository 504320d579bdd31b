# src/cask_notes/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .content import SanitizeRequest, SanitizeResponse
from .post import (
    PostCreate,
    PostDeleteRequest,
    PostResponse,
    PostUpdate,
    TastingInput,
    TastingResponse,
)
from .user import LoginRequest, RegisterRequest, RegisterResponse, TokenResponse

__all__ = [
    "CommentCreate",
    "CommentResponse",
    "LoginRequest",
    "PostCreate",
    "PostDeleteRequest",
    "PostResponse",
    "PostUpdate",
    "RegisterRequest",
    "RegisterResponse",
    "SanitizeRequest",
    "SanitizeResponse",
    "TastingInput",
    "TastingResponse",
    "TokenResponse",
]
