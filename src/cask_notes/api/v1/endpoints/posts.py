# src/cask_notes/api/v1/endpoints/posts.py
"""Post-related endpoints for the Cask Notes API."""

from fastapi import APIRouter, Body, Query, Response, status

from cask_notes.api.v1.dependencies import (
    CommentServiceDep,
    CurrentMemberDep,
    OptionalCallerDep,
    PostAuthorityDep,
)
from cask_notes.models import Comment, Post
from cask_notes.schemas.comment import CommentCreate, CommentResponse
from cask_notes.schemas.post import PostCreate, PostDeleteRequest, PostResponse, PostUpdate

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("/", response_model=list[PostResponse])
def list_posts(
    authority: PostAuthorityDep,
    limit: int = Query(50, ge=1, le=100, description="Maximum number of posts to return"),
) -> list[Post]:
    """List posts newest first."""
    return authority.list_recent(limit)


@router.get("/mine", response_model=list[PostResponse])
def list_my_posts(
    authority: PostAuthorityDep,
    member: CurrentMemberDep,
    limit: int = Query(50, ge=1, le=100),
) -> list[Post]:
    """List the logged-in member's posts."""
    return authority.list_by_owner(member.user_id, limit)


@router.get("/{post_id}", response_model=PostResponse)
def get_post(post_id: str, authority: PostAuthorityDep) -> Post:
    """Get a post by ID and count the view."""
    return authority.record_view(post_id)


@router.post("/", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
def create_post(
    post_data: PostCreate,
    authority: PostAuthorityDep,
    caller: OptionalCallerDep,
) -> Post:
    """Create a post.

    Logged-in members create member posts. Everyone else must choose an edit
    password, which is the only way to change the post later.
    """
    return authority.create_post(post_data, caller)


@router.put("/{post_id}", response_model=PostResponse)
def update_post(
    post_id: str,
    post_data: PostUpdate,
    authority: PostAuthorityDep,
    caller: OptionalCallerDep,
) -> Post:
    """Edit a post as its owner, or with its password for anonymous posts."""
    return authority.update_post(post_id, post_data, caller)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_post(
    post_id: str,
    authority: PostAuthorityDep,
    caller: OptionalCallerDep,
    payload: PostDeleteRequest | None = Body(None),
) -> Response:
    """Delete a post as its owner, or with its password for anonymous posts."""
    password = payload.edit_password if payload is not None else None
    authority.delete_post(post_id, caller, password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{post_id}/delete", status_code=status.HTTP_204_NO_CONTENT)
def delete_post_action(
    post_id: str,
    authority: PostAuthorityDep,
    caller: OptionalCallerDep,
    payload: PostDeleteRequest | None = Body(None),
) -> Response:
    """Form-friendly alias of ``DELETE /posts/{post_id}``."""
    password = payload.edit_password if payload is not None else None
    authority.delete_post(post_id, caller, password)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
def list_comments(post_id: str, comments: CommentServiceDep) -> list[Comment]:
    """List a post's comments (empty while comments are disabled)."""
    return comments.list_comments(post_id)


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    comments: CommentServiceDep,
    caller: OptionalCallerDep,
) -> Comment:
    """Add a plain-text comment to a post."""
    return comments.add_comment(post_id, comment_data.content, caller, comment_data.author_name)
