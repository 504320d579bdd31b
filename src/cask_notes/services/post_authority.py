"""Authorization and mutation of posts under their ownership mode.

A post is either member-owned (authorized by identity) or anonymously owned
(authorized by its edit password). All create/update/delete decisions are made
here rather than in the route handlers.

Anonymous posts are protected by the store's default row policy, so the
password check and the subsequent write both go through signed operations on
the :class:`SignedOperationGateway`. The read and the write are two calls; a
concurrent edit with the same password between them can only lose an update.
"""
from __future__ import annotations

import logging
from typing import Any

from sqlalchemy.orm import Session

from cask_notes.core.errors import (
    AuthenticationRequired,
    Forbidden,
    NotFound,
    PasswordMismatch,
    PasswordRequired,
    ValidationError,
)
from cask_notes.core.passwords import hash_password, verify_password
from cask_notes.core.settings import settings
from cask_notes.core.signer import (
    OP_ANON_DELETE,
    OP_ANON_UPDATE,
    OP_READ_HASH,
    OperationSigner,
    get_operation_signer,
)
from cask_notes.core.tokens import CallerIdentity
from cask_notes.models.post import OwnershipMode, Post, tasting_columns
from cask_notes.repositories.post_repo import PostRepository
from cask_notes.repositories.signed_ops import SignedOperationGateway
from cask_notes.schemas.post import PostCreate, PostUpdate, TastingInput
from cask_notes.services.media import MediaStore, get_media_store, post_media_namespace
from cask_notes.services.sanitizer import normalize_href, sanitize_content
from cask_notes.services.validation import (
    normalize_author_name,
    parse_tags,
    validate_edit_password,
    validate_post_fields,
    validate_tasting_input,
)

__all__ = ["PostOwnershipAuthority"]

logger = logging.getLogger(__name__)

ANONYMOUS_EDIT_WHILE_LOGGED_IN = (
    "Anonymous posts can only be edited or deleted with their password while logged out."
)


def _tasting_values(tasting: TastingInput | None) -> dict[str, int] | None:
    if tasting is None:
        return None
    return tasting_columns(tasting.color, tasting.nose, tasting.palate, tasting.finish)


def _clean_thumbnail(url: str | None) -> str | None:
    if not url:
        return None
    cleaned = normalize_href(url)
    if cleaned is None or cleaned.startswith(("mailto:", "#", "?")):
        return None
    return cleaned


class PostOwnershipAuthority:
    """Decide whether a post mutation is authorized and perform it on the right path."""

    def __init__(
        self,
        db: Session,
        *,
        signer: OperationSigner | None = None,
        gateway: SignedOperationGateway | None = None,
        media_store: MediaStore | None = None,
        max_tags: int | None = None,
        default_author_name: str | None = None,
    ) -> None:
        self.db = db
        self.repo = PostRepository(db)
        self.signer = signer or get_operation_signer()
        self.gateway = gateway or SignedOperationGateway(db)
        self.media_store = media_store or get_media_store()
        self.max_tags = max_tags if max_tags is not None else settings.max_tags
        self.default_author_name = default_author_name or settings.default_author_name

    # Reads -----------------------------------------------------------------

    def get_post(self, post_id: str) -> Post:
        """Return the post or raise ``NotFound``."""
        post = self.repo.get_by_id(post_id)
        if post is None:
            raise NotFound()
        return post

    def list_recent(self, limit: int | None = None) -> list[Post]:
        return self.repo.list_recent(limit)

    def list_by_owner(self, user_id: str, limit: int | None = None) -> list[Post]:
        return self.repo.list_by_owner(user_id, limit)

    def record_view(self, post_id: str) -> Post:
        """Increment the view counter and return the refreshed post."""
        post = self.get_post(post_id)
        self.repo.increment_views(post_id)
        self.db.commit()
        self.db.refresh(post)
        return post

    # Mutations -------------------------------------------------------------

    def create_post(self, data: PostCreate, caller: CallerIdentity | None) -> Post:
        """Create a member post for a logged-in member, otherwise an anonymous one.

        Raises:
            ValidationError: Listing every invalid field.
        """
        member = caller if caller is not None and caller.is_member else None
        content = sanitize_content(data.content)

        field_errors = validate_post_fields(data.title, content)
        if data.tasting is not None:
            field_errors.update(validate_tasting_input(data.tasting))
        if member is None:
            field_errors.update(
                validate_edit_password(data.edit_password, data.edit_password_confirm)
            )
        if field_errors:
            raise ValidationError(field_errors)

        if member is not None:
            mode = OwnershipMode.MEMBER
            owner_user_id: str | None = member.user_id
            credential_hash = None
            author_name = normalize_author_name(member.display_name, self.default_author_name)
        else:
            mode = OwnershipMode.ANONYMOUS
            # Session identity kept for later conversion only; not an authorization input.
            owner_user_id = caller.user_id if caller is not None else None
            credential_hash = hash_password(data.edit_password or "")
            author_name = normalize_author_name(data.author_name, self.default_author_name)

        post = self.repo.create(
            ownership_mode=mode,
            owner_user_id=owner_user_id,
            edit_password_hash=credential_hash,
            title=data.title.strip(),
            content=content,
            author_name=author_name,
            tags=parse_tags(data.tags, self.max_tags),
            thumbnail_url=_clean_thumbnail(data.thumbnail_url),
            whisky_id=data.whisky_id,
            tasting=_tasting_values(data.tasting),
        )
        self.db.commit()
        self.db.refresh(post)
        logger.info("Created %s post %s", mode.value, post.id)
        return post

    def update_post(
        self,
        post_id: str,
        data: PostUpdate,
        caller: CallerIdentity | None,
        password: str | None = None,
    ) -> Post:
        """Apply ``data`` to a post after checking the caller may edit it.

        Args:
            post_id: Target post.
            data: New field values; ``data.edit_password`` is used when
                ``password`` is not given.
            caller: Identity of the current session, if any.
            password: Plaintext edit password for anonymous posts.
        """
        post = self.get_post(post_id)
        password = password if password is not None else data.edit_password
        owner = self._authorize(post, caller, password)

        content = sanitize_content(data.content)
        field_errors = validate_post_fields(data.title, content)
        if data.tasting is not None:
            field_errors.update(validate_tasting_input(data.tasting))
        if field_errors:
            raise ValidationError(field_errors)

        values: dict[str, Any] = {"title": data.title.strip(), "content": content}
        tasting = _tasting_values(data.tasting)
        if tasting is not None:
            values.update(tasting)
        if data.tags is not None:
            values["tags"] = parse_tags(data.tags, self.max_tags)
        if data.thumbnail_url is not None:
            values["thumbnail_url"] = _clean_thumbnail(data.thumbnail_url)

        if owner is not None:
            values["author_name"] = normalize_author_name(owner.display_name, post.author_name)
            updated = self.repo.update_owned(post.id, owner.user_id, values)
        else:
            if data.author_name is not None:
                values["author_name"] = normalize_author_name(
                    data.author_name, self.default_author_name
                )
            tag = self.signer.sign(post.id, OP_ANON_UPDATE)
            updated = self.gateway.anon_update(post.id, tag, values)

        if not updated:
            self.db.rollback()
            raise NotFound()

        self.db.commit()
        # Bulk statements do not touch objects already loaded in the session.
        self.db.refresh(post)
        logger.info("Updated %s post %s", post.ownership_mode.value, post.id)
        return post

    def delete_post(
        self,
        post_id: str,
        caller: CallerIdentity | None,
        password: str | None = None,
    ) -> None:
        """Delete a post after checking the caller may do so.

        Media under the post's namespace is removed first on a best-effort
        basis; a cleanup failure is logged and never blocks the deletion.
        """
        post = self.get_post(post_id)
        owner = self._authorize(post, caller, password)

        mode = post.ownership_mode
        self._remove_media(post)

        if owner is not None:
            deleted = self.repo.delete_owned(post.id, owner.user_id)
        else:
            tag = self.signer.sign(post.id, OP_ANON_DELETE)
            deleted = self.gateway.anon_delete(post.id, tag)

        if not deleted:
            self.db.rollback()
            raise NotFound()

        self.db.commit()
        logger.info("Deleted %s post %s", mode.value, post_id)

    # Internals -------------------------------------------------------------

    def _authorize(
        self,
        post: Post,
        caller: CallerIdentity | None,
        password: str | None,
    ) -> CallerIdentity | None:
        """Check the caller may change ``post``.

        Returns the owning member for member posts and ``None`` for anonymous
        posts, whose password has been verified.
        """
        if post.ownership_mode == OwnershipMode.MEMBER:
            if caller is None:
                raise AuthenticationRequired()
            if caller.user_id != post.owner_user_id:
                raise Forbidden()
            return caller

        if caller is not None and caller.is_member:
            raise Forbidden(ANONYMOUS_EDIT_WHILE_LOGGED_IN)
        if not password:
            raise PasswordRequired()

        stored_hash = self.gateway.read_hash(post.id, self.signer.sign(post.id, OP_READ_HASH))
        if stored_hash is None:
            # Converted or deleted since it was loaded.
            raise NotFound()
        if not verify_password(password, stored_hash):
            raise PasswordMismatch()
        return None

    def _remove_media(self, post: Post) -> None:
        namespace = post_media_namespace(post)
        try:
            self.media_store.delete_namespace(namespace)
        except Exception:  # noqa: BLE001 - media is disposable
            logger.warning(
                "Failed to remove media under %s; deleting post %s anyway",
                namespace,
                post.id,
                exc_info=True,
            )
