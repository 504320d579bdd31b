"""Re-ownership of a session's anonymous posts when it becomes a member."""
from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from cask_notes.core.signer import OperationSigner, get_operation_signer
from cask_notes.repositories.post_repo import PostRepository
from cask_notes.repositories.signed_ops import SignedOperationGateway

__all__ = ["AnonymousPostConverter"]

logger = logging.getLogger(__name__)


class AnonymousPostConverter:
    """Move every anonymous post of a session identity to a member identity."""

    def __init__(
        self,
        db: Session,
        *,
        signer: OperationSigner | None = None,
        gateway: SignedOperationGateway | None = None,
    ) -> None:
        self.db = db
        self.repo = PostRepository(db)
        self.signer = signer or get_operation_signer()
        self.gateway = gateway or SignedOperationGateway(db)

    def convert(self, source_identity: str, destination_identity: str) -> int:
        """Convert ``source_identity``'s anonymous posts to member posts.

        The selecting predicate only matches anonymous rows, so running the
        conversion again after it completed converts nothing.

        Args:
            source_identity: Session identity that created the anonymous posts.
            destination_identity: Member identity that will own them.

        Returns:
            Number of posts converted. Zero when there was nothing to convert.
        """
        expected = self.repo.count_anonymous_by_owner(source_identity)
        if expected == 0:
            return 0

        tag = self.signer.sign_conversion(source_identity, destination_identity)
        converted = self.gateway.convert(source_identity, destination_identity, tag)
        self.db.commit()
        # Bulk statements do not touch objects already loaded in the session.
        self.db.expire_all()

        if converted != expected:
            logger.warning(
                "Conversion count mismatch for %s -> %s: expected %d, updated %d",
                source_identity,
                destination_identity,
                expected,
                converted,
            )
        else:
            logger.info(
                "Converted %d anonymous posts from %s to %s",
                converted,
                source_identity,
                destination_identity,
            )
        return converted
