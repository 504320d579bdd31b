# src/cask_notes/models/post.py
"""SQLAlchemy models for posts and their ownership mode."""

from __future__ import annotations

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cask_notes.db.session import Base, CreatedAtMixin, utcnow


class OwnershipMode(str, enum.Enum):
    """Who may mutate a post: its member owner, or whoever knows its password."""

    MEMBER = "member"
    ANONYMOUS = "anonymous"


def _new_post_id() -> str:
    return str(uuid.uuid4())


class Post(CreatedAtMixin, Base):
    """Article written either by a member or by a password-holding anonymous author.

    ``owner_user_id`` is authoritative only for member posts. Anonymous posts keep
    the creating session identity there for later conversion, but authorization
    for them relies solely on ``edit_password_hash``.
    """

    __tablename__ = "post"
    __table_args__ = (
        CheckConstraint(
            "(ownership_mode = 'member' AND edit_password_hash IS NULL) OR "
            "(ownership_mode = 'anonymous' AND edit_password_hash IS NOT NULL)",
            name="ck_post_ownership_credential",
        ),
        CheckConstraint(
            "(color_100 IS NULL AND nose_score_x2 IS NULL AND palate_score_x2 IS NULL "
            "AND finish_score_x2 IS NULL) OR "
            "(color_100 BETWEEN 0 AND 100 AND nose_score_x2 BETWEEN 0 AND 10 "
            "AND palate_score_x2 BETWEEN 0 AND 10 AND finish_score_x2 BETWEEN 0 AND 10)",
            name="ck_post_tasting_complete",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_post_id)
    ownership_mode: Mapped[OwnershipMode] = mapped_column(
        Enum(
            OwnershipMode,
            name="ownership_mode",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        index=True,
    )
    owner_user_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    # Never exposed through the ordinary repository; read via the signed gateway.
    edit_password_hash: Mapped[str | None] = mapped_column(Text, nullable=True)

    title: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    author_name: Mapped[str] = mapped_column(Text, nullable=False)
    tags: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    thumbnail_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    whisky_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    view_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Tasting notes, scaled to integers: color x100, ratings x2.
    color_100: Mapped[int | None] = mapped_column(Integer, nullable=True)
    nose_score_x2: Mapped[int | None] = mapped_column(Integer, nullable=True)
    palate_score_x2: Mapped[int | None] = mapped_column(Integer, nullable=True)
    finish_score_x2: Mapped[int | None] = mapped_column(Integer, nullable=True)

    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        onupdate=utcnow,
    )

    @property
    def is_anonymous(self) -> bool:
        """Return True when the post is authorized by password."""
        return self.ownership_mode == OwnershipMode.ANONYMOUS

    @property
    def tasting(self) -> dict[str, float] | None:
        """Tasting notes on their display scales, or None when not recorded."""
        if self.color_100 is None:
            return None
        return {
            "color": self.color_100 / 100,
            "nose": (self.nose_score_x2 or 0) / 2,
            "palate": (self.palate_score_x2 or 0) / 2,
            "finish": (self.finish_score_x2 or 0) / 2,
        }


def tasting_columns(color: float, nose: float, palate: float, finish: float) -> dict[str, int]:
    """Scale validated tasting values to the stored integer columns."""
    return {
        "color_100": round(color * 100),
        "nose_score_x2": round(nose * 2),
        "palate_score_x2": round(palate * 2),
        "finish_score_x2": round(finish * 2),
    }
