"""Comment Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    """Schema for adding a plain-text comment."""

    content: str = Field("", max_length=2000)
    author_name: str | None = Field(None, max_length=40)


class CommentResponse(BaseModel):
    """Comment returned by the API."""

    id: str
    post_id: str
    author_name: str
    content: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
