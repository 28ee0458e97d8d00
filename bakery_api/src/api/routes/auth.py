from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import get_current_active_user
from src.core.settings import get_app_settings
from src.db.models.security import User
from src.db.session import get_async_session
from src.schemas.auth import LoginResponse, Message, ProfileUpdate, RefreshRequest, TokenPair, UserRead
from src.services.users import UserService, issue_tokens

router = APIRouter(prefix="/auth", tags=["Auth"])


def _set_auth_cookie(response: Response, access_token: str) -> None:
    settings = get_app_settings()
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=access_token,
        httponly=True,
        secure=settings.AUTH_COOKIE_SECURE,
        samesite="lax",
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
    )


# PUBLIC_INTERFACE
@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login",
    description=(
        "Authenticate using OAuth2 password form (username = email) and receive access/refresh tokens. "
        "The access token is also set as an httpOnly cookie."
    ),
)
async def login_for_tokens(
    response: Response,
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_async_session),
) -> LoginResponse:
    """Authenticate user, record the attempt and issue tokens."""
    user = await UserService(session).authenticate(form_data.username, form_data.password)
    tokens = issue_tokens(user)
    _set_auth_cookie(response, tokens["access_token"])
    return LoginResponse(**tokens, user=UserRead.model_validate(user))


# PUBLIC_INTERFACE
@router.post(
    "/refresh",
    response_model=TokenPair,
    summary="Refresh access token",
    description="Issue a new token pair from a valid refresh token.",
)
async def refresh_token(
    payload: RefreshRequest,
    response: Response,
    session: AsyncSession = Depends(get_async_session),
) -> TokenPair:
    """Validate refresh token and issue a new access token pair."""
    _, tokens = await UserService(session).refresh(payload.refresh_token)
    _set_auth_cookie(response, tokens["access_token"])
    return TokenPair(**tokens)


# PUBLIC_INTERFACE
@router.post(
    "/logout",
    response_model=Message,
    summary="Logout",
    description="Clear the auth cookie. Bearer clients should discard their tokens.",
)
async def logout(response: Response) -> Message:
    response.delete_cookie(get_app_settings().AUTH_COOKIE_NAME)
    return Message(message="Logged out")


# PUBLIC_INTERFACE
@router.get(
    "/me",
    response_model=UserRead,
    summary="Read current user",
    description="Return the current authenticated user.",
)
async def read_current_user(user: User = Depends(get_current_active_user)) -> UserRead:
    return UserRead.model_validate(user)


# PUBLIC_INTERFACE
@router.put(
    "/profile",
    response_model=UserRead,
    summary="Update own profile",
    description="Update name, email or picture; a new password requires the current password.",
)
async def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_active_user),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    updated = await UserService(session).update_profile(user, payload.model_dump(exclude_unset=True))
    return UserRead.model_validate(updated)
