# src/cask_notes/schemas/post.py
"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator

from cask_notes.models.post import OwnershipMode


class TastingInput(BaseModel):
    """Tasting notes attached to a post.

    Ranges are checked by the post service so every bad field is reported.
    """

    color: float | None = Field(None, description="Color from 0.00 (pale) to 1.00 (dark)")
    nose: float | None = Field(None, description="0-5 in steps of 0.5")
    palate: float | None = Field(None, description="0-5 in steps of 0.5")
    finish: float | None = Field(None, description="0-5 in steps of 0.5")


class TastingResponse(BaseModel):
    color: float
    nose: float
    palate: float
    finish: float


class PostCreate(BaseModel):
    """Schema for creating a new post.

    Field-level rules (non-empty title and content, password policy) are checked
    by the post service so that every invalid field is reported at once.
    """

    title: str = Field("", max_length=200, description="Post title")
    content: str = Field("", max_length=100_000, description="Rich HTML from the editor")
    author_name: str | None = Field(None, max_length=40, description="Display name for anonymous posts")
    tags: list[str] | str = Field(default_factory=list, description="Tags, as a list or comma-separated")
    thumbnail_url: str | None = Field(None, max_length=2048)
    whisky_id: str | None = Field(None, max_length=36, description="Catalog entry the post is about")
    tasting: TastingInput | None = None
    edit_password: str | None = Field(None, max_length=128, description="Password for anonymous posts")
    edit_password_confirm: str | None = Field(None, max_length=128)


class PostUpdate(BaseModel):
    """Schema for editing a post. Omitted optional fields keep their value."""

    title: str = Field("", max_length=200)
    content: str = Field("", max_length=100_000)
    author_name: str | None = Field(None, max_length=40)
    tags: list[str] | str | None = None
    thumbnail_url: str | None = Field(None, max_length=2048)
    tasting: TastingInput | None = None
    edit_password: str | None = Field(None, max_length=128)


class PostDeleteRequest(BaseModel):
    """Optional body for deleting an anonymous post."""

    edit_password: str | None = Field(None, max_length=128)


class PostResponse(BaseModel):
    """Schema for post information returned by the API.

    The credential hash is never part of a response. The session identity kept
    on anonymous posts is not an owner and is omitted as well.
    """

    id: str
    title: str
    content: str
    author_name: str
    tags: list[str]
    thumbnail_url: str | None = None
    whisky_id: str | None = None
    tasting: TastingResponse | None = None
    view_count: int
    ownership_mode: OwnershipMode
    is_anonymous: bool
    owner_user_id: str | None = None
    created_at: datetime
    updated_at: datetime | None = None

    @model_validator(mode="before")
    @classmethod
    def _hide_session_owner(cls, data: object) -> object:
        if not isinstance(data, dict):
            extracted: dict[str, object | None] = {}
            for field_name in cls.model_fields:
                extracted[field_name] = getattr(data, field_name, None)
            data = extracted

        if data.get("ownership_mode") in (OwnershipMode.ANONYMOUS, OwnershipMode.ANONYMOUS.value):
            data["owner_user_id"] = None
            data["is_anonymous"] = True
        elif data.get("is_anonymous") is None:
            data["is_anonymous"] = False
        if data.get("tags") is None:
            data["tags"] = []
        return data

    model_config = ConfigDict(from_attributes=True)
