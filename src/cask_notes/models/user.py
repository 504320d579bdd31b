# src/cask_notes/models/user.py
"""SQLAlchemy models for member and anonymous session identities."""

from __future__ import annotations

import uuid

from sqlalchemy import Boolean, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cask_notes.db.session import Base, CreatedAtMixin


def _new_user_id() -> str:
    return str(uuid.uuid4())


class User(CreatedAtMixin, Base):
    """Identity behind a bearer credential.

    Anonymous session users have no email or password. Registration either
    upgrades such a row in place or creates a fresh member row.
    """

    __tablename__ = "user_account"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_user_id)
    email: Mapped[str | None] = mapped_column(String(320), unique=True, nullable=True)
    nickname: Mapped[str | None] = mapped_column(Text, nullable=True)
    password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_anonymous: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    @property
    def display_name(self) -> str | None:
        """Return the name shown on member posts."""
        return self.nickname or self.email
