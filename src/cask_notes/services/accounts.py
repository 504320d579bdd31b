"""Session identities, sign-up with anonymous upgrade, and login."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from cask_notes.core.errors import AuthenticationRequired, CaskNotesError, ValidationError
from cask_notes.core.passwords import hash_password, verify_password
from cask_notes.core.tokens import CallerIdentity, create_access_token, decode_access_token
from cask_notes.models.user import User
from cask_notes.repositories.post_repo import store_errors
from cask_notes.services.conversion import AnonymousPostConverter
from cask_notes.services.validation import validate_registration

__all__ = ["AccountService", "RegistrationResult", "resolve_identity"]

logger = logging.getLogger(__name__)


def resolve_identity(db: Session, token: str) -> CallerIdentity:
    """Resolve a bearer credential to a live identity.

    Raises:
        AuthenticationRequired: If the token is invalid, expired, or its user is gone.
    """
    payload = decode_access_token(token)
    with store_errors():
        user = db.get(User, payload["sub"])
    if user is None:
        raise AuthenticationRequired("Could not validate credentials")
    return CallerIdentity(
        user_id=user.id,
        is_anonymous=user.is_anonymous,
        display_name=user.display_name,
    )


@dataclass(frozen=True)
class RegistrationResult:
    """Outcome of a sign-up, including the anonymous-post conversion."""

    user: User
    access_token: str
    was_anonymous: bool
    converted_count: int = 0
    conversion_incomplete: bool = False

    @property
    def message(self) -> str:
        """Human-readable summary shown after sign-up."""
        message = "Your account has been created."
        if not self.was_anonymous:
            return message
        if self.converted_count > 0:
            message += (
                f" {self.converted_count} post(s) you wrote anonymously now belong to your account."
            )
            if self.conversion_incomplete:
                message += " Some posts may not have been moved; please log in again if needed."
        elif self.conversion_incomplete:
            message += (
                " Posts you wrote anonymously may not have been moved because your session"
                " expired; please log in again if needed."
            )
        return message


class AccountService:
    """Manage anonymous sessions and member accounts."""

    def __init__(self, db: Session, converter: AnonymousPostConverter | None = None) -> None:
        self.db = db
        self._converter = converter

    @property
    def converter(self) -> AnonymousPostConverter:
        if self._converter is None:
            self._converter = AnonymousPostConverter(self.db)
        return self._converter

    def start_anonymous_session(self) -> tuple[User, str]:
        """Create an anonymous session identity and its bearer credential."""
        user = User(is_anonymous=True)
        with store_errors():
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        return user, create_access_token(user.id, anonymous=True)

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Authenticate a member by email and password."""
        normalized = (email or "").strip().lower()
        with store_errors():
            user = self.db.execute(
                select(User).where(func.lower(User.email) == normalized)
            ).scalars().first()
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationRequired("Incorrect email or password.")
        return user, create_access_token(user.id, anonymous=False)

    def register(
        self,
        *,
        email: str,
        nickname: str,
        password: str,
        password_confirm: str,
        current_token: str | None = None,
    ) -> RegistrationResult:
        """Create a member account, upgrading an anonymous session in place.

        Losing the anonymous-post conversion never blocks account creation:
        conversion problems are reported through ``conversion_incomplete``.
        """
        field_errors = validate_registration(email, nickname, password, password_confirm)
        normalized_email = (email or "").strip().lower()
        if "email" not in field_errors:
            with store_errors():
                taken = self.db.execute(
                    select(User.id).where(func.lower(User.email) == normalized_email)
                ).first()
            if taken is not None:
                field_errors["email"] = "This email is already registered."
        if field_errors:
            raise ValidationError(field_errors)

        current = self._current_identity(current_token)
        anonymous_source = current.user_id if current is not None and current.is_anonymous else None

        user = self.db.get(User, anonymous_source) if anonymous_source else None
        if user is None:
            user = User()
            self.db.add(user)
        user.email = normalized_email
        user.nickname = nickname.strip()
        user.password_hash = hash_password(password)
        user.is_anonymous = False
        with store_errors():
            self.db.commit()
            self.db.refresh(user)

        token = create_access_token(user.id, anonymous=False)
        if anonymous_source is None:
            return RegistrationResult(user=user, access_token=token, was_anonymous=False)

        converted, incomplete = self._convert_after_signup(anonymous_source, token)
        return RegistrationResult(
            user=user,
            access_token=token,
            was_anonymous=True,
            converted_count=converted,
            conversion_incomplete=incomplete,
        )

    def _current_identity(self, token: str | None) -> CallerIdentity | None:
        if not token:
            return None
        try:
            return resolve_identity(self.db, token)
        except AuthenticationRequired:
            logger.info("Ignoring expired session during registration")
            return None

    def _convert_after_signup(self, source_identity: str, token: str) -> tuple[int, bool]:
        try:
            destination = resolve_identity(self.db, token)
        except AuthenticationRequired:
            logger.warning(
                "New session for %s did not resolve; skipping post conversion",
                source_identity,
            )
            return 0, True

        try:
            converted = self.converter.convert(source_identity, destination.user_id)
        except CaskNotesError as err:
            self.db.rollback()
            logger.warning(
                "Post conversion for %s failed: %s",
                source_identity,
                err.reason,
            )
            return 0, True
        return converted, False
