"""Trusted boundary for signed bypass operations on protected post rows.

Each operation recomputes the expected tag from this boundary's own copy of
the signing secret and refuses before touching any row when the supplied tag
does not match.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from cask_notes.core.errors import OperationRejected
from cask_notes.core.settings import settings
from cask_notes.core.signer import (
    OP_ANON_DELETE,
    OP_ANON_UPDATE,
    OP_READ_HASH,
    OperationSigner,
)
from cask_notes.models.comment import Comment
from cask_notes.models.post import OwnershipMode, Post
from cask_notes.repositories.post_repo import MUTABLE_POST_FIELDS, store_errors

__all__ = ["SignedOperationGateway"]

logger = logging.getLogger(__name__)


class SignedOperationGateway:
    """Named privileged operations gated by HMAC tags."""

    def __init__(self, session: Session, verifier: OperationSigner | None = None) -> None:
        self.session = session
        self._verifier = verifier or OperationSigner(settings.operation_signing_secret)

    def _require(self, subject_id: str, operation: str, tag: str) -> None:
        if not self._verifier.verify(subject_id, operation, tag):
            logger.warning("Rejected %s for post %s: signature mismatch", operation, subject_id)
            raise OperationRejected()

    def read_hash(self, post_id: str, tag: str) -> str | None:
        """Return the stored credential hash of an anonymous post, or None."""
        self._require(post_id, OP_READ_HASH, tag)
        with store_errors():
            return self.session.execute(
                select(Post.edit_password_hash).where(
                    Post.id == post_id,
                    Post.ownership_mode == OwnershipMode.ANONYMOUS,
                )
            ).scalar_one_or_none()

    def anon_update(self, post_id: str, tag: str, values: dict[str, Any]) -> bool:
        """Apply ``values`` to an anonymous post; return False if no row matched."""
        self._require(post_id, OP_ANON_UPDATE, tag)
        unknown = set(values) - MUTABLE_POST_FIELDS
        if unknown:
            raise ValueError(f"Fields cannot be changed through this path: {sorted(unknown)}")
        with store_errors():
            result = self.session.execute(
                update(Post)
                .where(
                    Post.id == post_id,
                    Post.ownership_mode == OwnershipMode.ANONYMOUS,
                )
                .values(**values)
                .execution_options(synchronize_session=False)
            )
        return bool(result.rowcount)

    def anon_delete(self, post_id: str, tag: str) -> bool:
        """Delete an anonymous post and its comments; return False if no row matched."""
        self._require(post_id, OP_ANON_DELETE, tag)
        with store_errors():
            post = self.session.execute(
                select(Post).where(
                    Post.id == post_id,
                    Post.ownership_mode == OwnershipMode.ANONYMOUS,
                )
            ).scalars().first()
            if post is None:
                return False
            self.session.execute(delete(Comment).where(Comment.post_id == post_id))
            self.session.delete(post)
            self.session.flush()
        return True

    def convert(self, source_identity: str, destination_identity: str, tag: str) -> int:
        """Re-own every anonymous post of ``source_identity`` in a single UPDATE.

        Returns:
            Number of rows the statement changed.
        """
        if not self._verifier.verify_conversion(source_identity, destination_identity, tag):
            logger.warning("Rejected conversion for %s: signature mismatch", source_identity)
            raise OperationRejected()
        with store_errors():
            result = self.session.execute(
                update(Post)
                .where(
                    Post.owner_user_id == source_identity,
                    Post.ownership_mode == OwnershipMode.ANONYMOUS,
                )
                .values(
                    ownership_mode=OwnershipMode.MEMBER,
                    owner_user_id=destination_identity,
                    edit_password_hash=None,
                )
                .execution_options(synchronize_session=False)
            )
        return int(result.rowcount or 0)
