# tests/services/test_comments.py
"""Tests for the comment service and its feature switch."""

import pytest
from sqlalchemy.orm import Session

from cask_notes.core.errors import Forbidden, NotFound, ValidationError
from cask_notes.core.tokens import CallerIdentity
from cask_notes.models import Post
from cask_notes.services.comments import CommentService


def test_disabled_comments_hide_and_refuse(db_session: Session, member_post: Post) -> None:
    service = CommentService(db_session, enabled=False)
    assert service.list_comments(member_post.id) == []
    with pytest.raises(Forbidden, match="disabled"):
        service.add_comment(member_post.id, "Lovely dram", None)


def test_add_and_list_comments(
    db_session: Session, member_post: Post, member_caller: CallerIdentity
) -> None:
    service = CommentService(db_session, enabled=True)
    service.add_comment(member_post.id, "First", None, author_name="Guest")
    service.add_comment(member_post.id, "<b>Second</b>", member_caller, author_name="ignored")

    comments = service.list_comments(member_post.id)
    assert [c.content for c in comments] == ["First", "Second"]
    assert [c.author_name for c in comments] == ["Guest", "Alice"]
    assert comments[1].user_id == member_caller.user_id


def test_anonymous_comment_uses_default_name(db_session: Session, member_post: Post) -> None:
    service = CommentService(db_session, enabled=True, default_author_name="Someone")
    comment = service.add_comment(member_post.id, "Hi", None)
    assert comment.author_name == "Someone"


def test_comment_on_missing_post(db_session: Session) -> None:
    with pytest.raises(NotFound):
        CommentService(db_session, enabled=True).add_comment("missing", "Hi", None)


def test_empty_comment(db_session: Session, member_post: Post) -> None:
    with pytest.raises(ValidationError) as exc_info:
        CommentService(db_session, enabled=True).add_comment(member_post.id, "<p> </p>", None)
    assert "content" in exc_info.value.field_errors
