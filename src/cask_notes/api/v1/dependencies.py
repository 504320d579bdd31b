"""Shared API dependencies for sessions and services."""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from cask_notes.core.errors import AuthenticationRequired
from cask_notes.core.settings import settings
from cask_notes.core.tokens import CallerIdentity
from cask_notes.db.session import get_db
from cask_notes.services.accounts import AccountService, resolve_identity
from cask_notes.services.comments import CommentService
from cask_notes.services.media import MediaStore, get_media_store
from cask_notes.services.post_authority import PostOwnershipAuthority

# Bearer credentials are optional: anonymous authors post without a session.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_session_token(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> str | None:
    """Return the raw bearer credential from the header or the session cookie."""
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.session_cookie_name) or None


SessionTokenDep = Annotated[str | None, Depends(get_session_token)]


def get_optional_caller(token: SessionTokenDep, db: SessionDep) -> CallerIdentity | None:
    """Resolve the caller, treating a missing or expired session as no session."""
    if not token:
        return None
    try:
        return resolve_identity(db, token)
    except AuthenticationRequired:
        return None


def get_current_caller(token: SessionTokenDep, db: SessionDep) -> CallerIdentity:
    """Resolve the caller or raise ``AuthenticationRequired``."""
    if not token:
        raise AuthenticationRequired()
    return resolve_identity(db, token)


def get_current_member(caller: Annotated[CallerIdentity, Depends(get_current_caller)]) -> CallerIdentity:
    """Require a registered (non-anonymous) member."""
    if caller.is_anonymous:
        raise AuthenticationRequired()
    return caller


def get_media_store_dep() -> MediaStore:
    """Return the configured media store."""
    return get_media_store()


def get_post_authority(
    db: SessionDep,
    media_store: Annotated[MediaStore, Depends(get_media_store_dep)],
) -> PostOwnershipAuthority:
    """Build the post authority for this request."""
    return PostOwnershipAuthority(db, media_store=media_store)


def get_comment_service(db: SessionDep) -> CommentService:
    """Build the comment service with the configured feature switch."""
    return CommentService(db, enabled=settings.comments_enabled)


def get_account_service(db: SessionDep) -> AccountService:
    return AccountService(db)


OptionalCallerDep = Annotated[CallerIdentity | None, Depends(get_optional_caller)]
CurrentCallerDep = Annotated[CallerIdentity, Depends(get_current_caller)]
CurrentMemberDep = Annotated[CallerIdentity, Depends(get_current_member)]
PostAuthorityDep = Annotated[PostOwnershipAuthority, Depends(get_post_authority)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
AccountServiceDep = Annotated[AccountService, Depends(get_account_service)]
