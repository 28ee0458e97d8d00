from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.logging import user_id_var
from src.core.security import ACCESS, decode_token
from src.core.settings import get_app_settings
from src.db.models.security import User
from src.db.session import get_async_session
from src.repositories.security import UserRepository
from src.services.audit import AuditService
from src.services.permissions import PermissionService

logger = logging.getLogger(__name__)

# OAuth2 bearer (used by docs); login endpoint path referenced here.
# auto_error is off so the auth cookie can be used instead of the header.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def _credentials_error(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


# PUBLIC_INTERFACE
async def user_from_token(session: AsyncSession, token: Optional[str]) -> User:
    """
    Resolve a user from an access token.

    Shared by HTTP dependencies and websocket endpoints.
    Raises:
        HTTPException: 401 when the token is missing, invalid or not an access token.
    """
    if not token:
        raise _credentials_error()
    try:
        payload = decode_token(token, expected_type=ACCESS)
    except JWTError:
        raise _credentials_error("Invalid token")
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise _credentials_error("Invalid token")

    user = await UserRepository(session).get(user_id)
    if not user:
        raise _credentials_error("User not found")
    return user


# PUBLIC_INTERFACE
async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_async_session),
) -> User:
    """
    Resolve and return the current user from the Authorization bearer token,
    falling back to the auth cookie set at login.
    """
    if not token:
        token = request.cookies.get(get_app_settings().AUTH_COOKIE_NAME)
    user = await user_from_token(session, token)
    user_id_var.set(str(user.id))
    return user


# PUBLIC_INTERFACE
async def get_current_active_user(user: User = Depends(get_current_user)) -> User:
    """Ensure user is active."""
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user


# PUBLIC_INTERFACE
def require_permission(resource: str, action: str):
    """
    Create a dependency that requires the current user to hold `action` on `resource`
    after role grants and user overrides are resolved. Returns the user.
    """

    async def _dep(
        user: User = Depends(get_current_active_user),
        session: AsyncSession = Depends(get_async_session),
    ) -> User:
        if not await PermissionService(session).check(user, resource, action):
            logger.info("Permission denied: %s on %s_%s", user.email, resource, action)
            await AuditService(session).record_denied(user=user, resource=resource, action=action)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission {resource}:{action}",
            )
        return user

    return _dep


# PUBLIC_INTERFACE
def require_roles(*required: str):
    """Create a dependency that requires the current user to have one of the specified roles."""

    async def _dep(user: User = Depends(get_current_active_user)) -> User:
        if user.role not in required:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Insufficient role")
        return user

    return _dep
