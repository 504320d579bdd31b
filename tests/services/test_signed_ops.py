# tests/services/test_signed_ops.py
"""Tests for the signed operation gateway and the owner-scoped repository."""

import pytest
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from cask_notes.core.errors import OperationRejected, UpstreamUnavailable
from cask_notes.core.passwords import verify_password
from cask_notes.core.signer import (
    OP_ANON_DELETE,
    OP_ANON_UPDATE,
    OP_READ_HASH,
    OperationSigner,
)
from cask_notes.models import Post, User
from cask_notes.repositories.post_repo import PostRepository
from cask_notes.repositories.signed_ops import SignedOperationGateway

from conftest import ANON_PASSWORD


@pytest.fixture()
def gateway(db_session: Session) -> SignedOperationGateway:
    return SignedOperationGateway(db_session)


class TestGatewayTags:
    """Every operation refuses a tag it did not expect."""

    def test_read_hash_with_valid_tag(
        self, gateway: SignedOperationGateway, signer: OperationSigner, anonymous_post: Post
    ) -> None:
        stored = gateway.read_hash(anonymous_post.id, signer.sign(anonymous_post.id, OP_READ_HASH))
        assert stored is not None
        assert verify_password(ANON_PASSWORD, stored)

    def test_read_hash_of_member_post_is_none(
        self, gateway: SignedOperationGateway, signer: OperationSigner, member_post: Post
    ) -> None:
        assert gateway.read_hash(member_post.id, signer.sign(member_post.id, OP_READ_HASH)) is None

    def test_tag_for_another_post_is_rejected(
        self,
        gateway: SignedOperationGateway,
        signer: OperationSigner,
        anonymous_post: Post,
    ) -> None:
        with pytest.raises(OperationRejected):
            gateway.read_hash(anonymous_post.id, signer.sign("other-post", OP_READ_HASH))

    def test_tag_for_another_operation_is_rejected(
        self,
        gateway: SignedOperationGateway,
        signer: OperationSigner,
        db_session: Session,
        anonymous_post: Post,
    ) -> None:
        with pytest.raises(OperationRejected):
            gateway.anon_delete(anonymous_post.id, signer.sign(anonymous_post.id, OP_ANON_UPDATE))
        assert db_session.get(Post, anonymous_post.id) is not None

    def test_missing_tag_is_rejected(
        self, gateway: SignedOperationGateway, anonymous_post: Post
    ) -> None:
        with pytest.raises(OperationRejected):
            gateway.anon_update(anonymous_post.id, "", {"title": "x"})

    def test_anon_update_refuses_ownership_fields(
        self,
        gateway: SignedOperationGateway,
        signer: OperationSigner,
        anonymous_post: Post,
    ) -> None:
        tag = signer.sign(anonymous_post.id, OP_ANON_UPDATE)
        with pytest.raises(ValueError):
            gateway.anon_update(anonymous_post.id, tag, {"edit_password_hash": None})

    def test_anon_ops_do_not_reach_member_posts(
        self,
        gateway: SignedOperationGateway,
        signer: OperationSigner,
        member_post: Post,
    ) -> None:
        assert not gateway.anon_update(
            member_post.id, signer.sign(member_post.id, OP_ANON_UPDATE), {"title": "x"}
        )
        assert not gateway.anon_delete(member_post.id, signer.sign(member_post.id, OP_ANON_DELETE))


class TestOwnerScopedRepository:
    """The ordinary path only mutates member posts of the given owner."""

    def test_update_owned_requires_owner(
        self, db_session: Session, member_post: Post, other_member: User
    ) -> None:
        repo = PostRepository(db_session)
        assert not repo.update_owned(member_post.id, other_member.id, {"title": "x"})
        assert repo.update_owned(member_post.id, member_post.owner_user_id, {"title": "x"})

    def test_update_owned_never_touches_anonymous_posts(
        self, db_session: Session, anonymous_post: Post
    ) -> None:
        repo = PostRepository(db_session)
        assert not repo.update_owned(anonymous_post.id, anonymous_post.owner_user_id, {"title": "x"})
        assert not repo.delete_owned(anonymous_post.id, anonymous_post.owner_user_id)

    def test_list_by_owner_only_returns_member_posts(
        self,
        db_session: Session,
        member_post: Post,
        anonymous_post: Post,
    ) -> None:
        repo = PostRepository(db_session)
        assert [p.id for p in repo.list_by_owner(member_post.owner_user_id)] == [member_post.id]
        assert repo.list_by_owner(anonymous_post.owner_user_id) == []
        assert repo.count_anonymous_by_owner(anonymous_post.owner_user_id) == 1


def test_store_outage_is_reported_as_upstream_unavailable(
    db_session: Session, monkeypatch: pytest.MonkeyPatch
) -> None:
    def _down(*args: object, **kwargs: object) -> None:
        raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    monkeypatch.setattr(db_session, "execute", _down)
    with pytest.raises(UpstreamUnavailable):
        PostRepository(db_session).get_by_id("any")
