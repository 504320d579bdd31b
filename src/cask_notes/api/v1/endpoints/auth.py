# src/cask_notes/api/v1/endpoints/auth.py
"""Session and account endpoints for the Cask Notes API."""

from __future__ import annotations

from fastapi import APIRouter, Response, status

from cask_notes.api.v1.dependencies import (
    AccountServiceDep,
    CurrentCallerDep,
    SessionTokenDep,
)
from cask_notes.core.settings import settings
from cask_notes.schemas.user import (
    LoginRequest,
    RegisterRequest,
    RegisterResponse,
    TokenResponse,
)

router = APIRouter(prefix="/auth", tags=["authentication"])


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        settings.session_cookie_name,
        token,
        httponly=True,
        samesite="lax",
        secure=not settings.debug,
        path="/",
    )


@router.post(
    "/anonymous",
    response_model=TokenResponse,
    status_code=status.HTTP_201_CREATED,
)
def start_anonymous_session(
    response: Response,
    accounts: AccountServiceDep,
) -> TokenResponse:
    """Issue an anonymous session so anonymous posts can be converted on sign-up."""
    user, token = accounts.start_anonymous_session()
    _set_session_cookie(response, token)
    return TokenResponse(access_token=token, user_id=user.id, is_anonymous=True)


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: RegisterRequest,
    response: Response,
    accounts: AccountServiceDep,
    token: SessionTokenDep,
) -> RegisterResponse:
    """Create a member account, moving the current anonymous session's posts to it."""
    result = accounts.register(
        email=payload.email,
        nickname=payload.nickname,
        password=payload.password,
        password_confirm=payload.password_confirm,
        current_token=token,
    )
    _set_session_cookie(response, result.access_token)
    return RegisterResponse(
        access_token=result.access_token,
        user_id=result.user.id,
        is_anonymous=False,
        converted_count=result.converted_count,
        conversion_incomplete=result.conversion_incomplete,
        message=result.message,
    )


@router.post("/login", response_model=TokenResponse)
def login(
    payload: LoginRequest,
    response: Response,
    accounts: AccountServiceDep,
) -> TokenResponse:
    """Log in with email and password."""
    user, token = accounts.login(payload.email, payload.password)
    _set_session_cookie(response, token)
    return TokenResponse(access_token=token, user_id=user.id, is_anonymous=False)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout() -> Response:
    """Clear the session cookie."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    response.delete_cookie(settings.session_cookie_name, path="/")
    return response


@router.get("/me")
async def whoami(caller: CurrentCallerDep) -> dict[str, object]:
    """Return the identity behind the current session."""
    return {
        "user_id": caller.user_id,
        "is_anonymous": caller.is_anonymous,
        "display_name": caller.display_name,
    }
