"""Bearer credentials for member and anonymous sessions."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from cask_notes.core.errors import AuthenticationRequired
from cask_notes.core.settings import settings


@dataclass(frozen=True)
class CallerIdentity:
    """Live identity resolved from a bearer credential."""

    user_id: str
    is_anonymous: bool
    display_name: str | None = None

    @property
    def is_member(self) -> bool:
        """Return True for registered (non-anonymous) identities."""
        return not self.is_anonymous


def create_access_token(user_id: str, *, anonymous: bool) -> str:
    """Create a JWT access token for ``user_id``.

    Anonymous session tokens expire sooner; the identity they carry is not
    durable and may rotate between visits.
    """
    minutes = (
        settings.anonymous_token_expire_minutes
        if anonymous
        else settings.access_token_expire_minutes
    )
    expire = datetime.now(UTC) + timedelta(minutes=minutes)
    to_encode: dict[str, object] = {"sub": user_id, "anon": anonymous, "exp": expire}
    encoded_jwt: str = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return encoded_jwt


def decode_access_token(token: str) -> dict[str, object]:
    """Decode and validate ``token``.

    Raises:
        AuthenticationRequired: If the token is malformed, expired, or has no subject.
    """
    try:
        payload: dict[str, object] = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError as err:
        raise AuthenticationRequired("Your session has expired. Please log in again.") from err

    if not isinstance(payload.get("sub"), str):
        raise AuthenticationRequired("Could not validate credentials")
    return payload
