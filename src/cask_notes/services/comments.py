"""Plain-text comments on posts.

Whether comments are available is configuration injected at construction
(``COMMENTS_ENABLED``), not a constant in this module.
"""
from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from cask_notes.core.errors import Forbidden, NotFound, ValidationError
from cask_notes.core.settings import settings
from cask_notes.core.tokens import CallerIdentity
from cask_notes.models.comment import Comment
from cask_notes.repositories.post_repo import PostRepository, store_errors
from cask_notes.services.validation import normalize_author_name
from cask_notes.services.sanitizer import sanitize_plain_text


class CommentService:
    """List and add comments, honouring the comments feature switch."""

    def __init__(self, db: Session, *, enabled: bool, default_author_name: str | None = None) -> None:
        self.db = db
        self.enabled = enabled
        self.posts = PostRepository(db)
        self.default_author_name = default_author_name or settings.default_author_name

    def list_comments(self, post_id: str) -> list[Comment]:
        """Return a post's comments oldest first; empty while comments are disabled."""
        if not self.enabled:
            return []
        with store_errors():
            return list(
                self.db.execute(
                    select(Comment)
                    .where(Comment.post_id == post_id)
                    .order_by(Comment.created_at.asc())
                ).scalars()
            )

    def add_comment(
        self,
        post_id: str,
        content: str,
        caller: CallerIdentity | None,
        author_name: str | None = None,
    ) -> Comment:
        if not self.enabled:
            raise Forbidden("Comments are currently disabled.")
        if self.posts.get_by_id(post_id) is None:
            raise NotFound()

        text = sanitize_plain_text(content)
        if not text:
            raise ValidationError({"content": "Please enter a comment."})

        if caller is not None and caller.is_member:
            name = normalize_author_name(caller.display_name, self.default_author_name)
        else:
            name = normalize_author_name(author_name, self.default_author_name)

        comment = Comment(
            post_id=post_id,
            user_id=caller.user_id if caller is not None else None,
            author_name=name,
            content=text,
        )
        with store_errors():
            self.db.add(comment)
            self.db.commit()
            self.db.refresh(comment)
        return comment
