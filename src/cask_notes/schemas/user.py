"""User and session Pydantic schemas."""

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Sign-up payload; an active anonymous session is upgraded in place."""

    email: str = Field("", max_length=320)
    nickname: str = Field("", max_length=40)
    password: str = Field("", max_length=128)
    password_confirm: str = Field("", max_length=128)


class LoginRequest(BaseModel):
    """Email/password login payload."""

    email: str = Field(..., max_length=320)
    password: str = Field(..., max_length=128)


class TokenResponse(BaseModel):
    """Bearer credential issued for a session."""

    access_token: str
    token_type: str = "bearer"
    user_id: str
    is_anonymous: bool


class RegisterResponse(TokenResponse):
    """Registration outcome including the anonymous-post conversion result."""

    converted_count: int = 0
    conversion_incomplete: bool = False
    message: str
