"""Data access helpers for working with posts.

Mutations on this path are scoped to the caller's identity, mirroring the
store's default row policy: a caller can only change member posts it owns.
Anonymous posts are only reachable for mutation through
:class:`cask_notes.repositories.signed_ops.SignedOperationGateway`.
"""
from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from cask_notes.core.errors import UpstreamUnavailable
from cask_notes.models.comment import Comment
from cask_notes.models.post import OwnershipMode, Post

__all__ = ["PostRepository", "store_errors", "MUTABLE_POST_FIELDS"]

MUTABLE_POST_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "content",
        "author_name",
        "tags",
        "thumbnail_url",
        "whisky_id",
        "color_100",
        "nose_score_x2",
        "palate_score_x2",
        "finish_score_x2",
    }
)


@contextmanager
def store_errors() -> Iterator[None]:
    """Translate connectivity failures from the store into ``UpstreamUnavailable``."""
    try:
        yield
    except OperationalError as err:
        raise UpstreamUnavailable() from err


def _mutable_values(values: dict[str, Any]) -> dict[str, Any]:
    unknown = set(values) - MUTABLE_POST_FIELDS
    if unknown:
        raise ValueError(f"Fields cannot be changed through this path: {sorted(unknown)}")
    return dict(values)


class PostRepository:
    """Thin wrapper around database access for post entities."""

    def __init__(self, session: Session) -> None:
        """Initialize the repository with a SQLAlchemy session."""
        self.session = session

    def get_by_id(self, post_id: str) -> Post | None:
        """Return a post by identifier, or None."""
        with store_errors():
            return self.session.execute(
                select(Post).where(Post.id == post_id)
            ).scalars().first()

    def list_recent(self, limit: int | None = None) -> list[Post]:
        """Return posts newest first."""
        stmt = select(Post).order_by(Post.created_at.desc())
        if limit is not None and limit > 0:
            stmt = stmt.limit(limit)
        with store_errors():
            return list(self.session.execute(stmt).scalars())

    def list_by_owner(self, owner_user_id: str, limit: int | None = None) -> list[Post]:
        """Return member posts owned by ``owner_user_id``, newest first."""
        stmt = (
            select(Post)
            .where(
                Post.owner_user_id == owner_user_id,
                Post.ownership_mode == OwnershipMode.MEMBER,
            )
            .order_by(Post.created_at.desc())
        )
        if limit is not None and limit > 0:
            stmt = stmt.limit(limit)
        with store_errors():
            return list(self.session.execute(stmt).scalars())

    def count_anonymous_by_owner(self, owner_user_id: str) -> int:
        """Return how many anonymous posts were created by session ``owner_user_id``."""
        with store_errors():
            count = self.session.execute(
                select(func.count())
                .select_from(Post)
                .where(
                    Post.owner_user_id == owner_user_id,
                    Post.ownership_mode == OwnershipMode.ANONYMOUS,
                )
            ).scalar_one()
        return int(count)

    def create(
        self,
        *,
        ownership_mode: OwnershipMode,
        owner_user_id: str | None,
        edit_password_hash: str | None,
        title: str,
        content: str,
        author_name: str,
        tags: list[str],
        thumbnail_url: str | None = None,
        whisky_id: str | None = None,
        tasting: dict[str, int] | None = None,
    ) -> Post:
        """Insert a new post and return the persisted ORM instance."""
        post = Post(
            ownership_mode=ownership_mode,
            owner_user_id=owner_user_id,
            edit_password_hash=edit_password_hash,
            title=title,
            content=content,
            author_name=author_name,
            tags=tags,
            thumbnail_url=thumbnail_url,
            whisky_id=whisky_id,
            view_count=0,
            **(tasting or {}),
        )
        with store_errors():
            self.session.add(post)
            self.session.flush()
        return post

    def update_owned(self, post_id: str, owner_user_id: str, values: dict[str, Any]) -> bool:
        """Update a member post owned by ``owner_user_id``; return False if no row matched."""
        stmt = (
            update(Post)
            .where(
                Post.id == post_id,
                Post.owner_user_id == owner_user_id,
                Post.ownership_mode == OwnershipMode.MEMBER,
            )
            .values(**_mutable_values(values))
            .execution_options(synchronize_session=False)
        )
        with store_errors():
            result = self.session.execute(stmt)
        return bool(result.rowcount)

    def delete_owned(self, post_id: str, owner_user_id: str) -> bool:
        """Delete a member post owned by ``owner_user_id``; return False if no row matched."""
        with store_errors():
            post = self.session.execute(
                select(Post).where(
                    Post.id == post_id,
                    Post.owner_user_id == owner_user_id,
                    Post.ownership_mode == OwnershipMode.MEMBER,
                )
            ).scalars().first()
            if post is None:
                return False
            self.session.execute(delete(Comment).where(Comment.post_id == post_id))
            self.session.delete(post)
            self.session.flush()
        return True

    def increment_views(self, post_id: str) -> None:
        """Bump the view counter for ``post_id``."""
        with store_errors():
            self.session.execute(
                update(Post)
                .where(Post.id == post_id)
                .values(view_count=Post.view_count + 1)
                .execution_options(synchronize_session=False)
            )
