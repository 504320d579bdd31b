"""Schemas for the content sanitization endpoint."""

from pydantic import BaseModel, Field


class SanitizeRequest(BaseModel):
    html: str = Field("", max_length=100_000)


class SanitizeResponse(BaseModel):
    html: str
