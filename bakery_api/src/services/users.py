from __future__ import annotations

import logging
from typing import Any, Optional

from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.security import (
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    verify_password,
)
from src.db.models.security import User
from src.repositories.security import UserRepository
from src.services.audit import AuditService, snapshot
from src.services.base import BaseService, ConflictError, DomainValidationError, NotFoundError, ServiceError
from src.services.permissions import ROLES

logger = logging.getLogger(__name__)


class AuthenticationError(ServiceError):
    """Credentials or token rejected."""

    status_code = 401
    error_type = "unauthorized"


def issue_tokens(user: User) -> dict[str, str]:
    return {
        "access_token": create_access_token(subject=str(user.id), role=user.role),
        "refresh_token": create_refresh_token(subject=str(user.id)),
        "token_type": "bearer",
    }


class UserService(BaseService):
    """Login, token refresh, own profile and admin user management."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)
        self.repo = UserRepository(session)
        self.audit = AuditService(session)

    # PUBLIC_INTERFACE
    async def authenticate(self, email: str, password: str) -> User:
        """
        Check credentials and record the attempt in the login log.

        Unknown email, wrong password and inactive accounts all fail with 401;
        the stored failure reason tells them apart.
        """
        user = await self.repo.get_user_by_email(email)
        reason = None
        if user is None:
            reason = "User not found"
        elif not verify_password(password, user.hashed_password):
            reason = "Invalid password"
        elif not user.is_active:
            reason = "Account inactive"
        await self.audit.record_login(email=email, user=user, success=reason is None, failure_reason=reason)
        if reason is not None:
            raise AuthenticationError("Account is inactive" if reason == "Account inactive" else "Invalid credentials")
        return user  # type: ignore[return-value]

    # PUBLIC_INTERFACE
    async def refresh(self, refresh_token: str) -> tuple[User, dict[str, str]]:
        try:
            claims = decode_token(refresh_token, expected_type=REFRESH)
        except JWTError:
            raise AuthenticationError("Invalid refresh token")
        user = await self.repo.get(int(claims["sub"]))
        if user is None or not user.is_active:
            raise AuthenticationError("User not found or inactive")
        return user, issue_tokens(user)

    # PUBLIC_INTERFACE
    async def get_user(self, user_id: int) -> User:
        user = await self.repo.get(user_id)
        if user is None:
            raise NotFoundError(f"User {user_id} not found")
        return user

    # PUBLIC_INTERFACE
    async def list_users(self, *, role: Optional[str], limit: int, offset: int) -> list[User]:
        return await self.repo.list_users(role=role, limit=limit, offset=offset)

    async def _check_email(self, email: str, exclude_id: Optional[int] = None) -> None:
        existing = await self.repo.get_user_by_email(email)
        if existing is not None and existing.id != exclude_id:
            raise ConflictError("User with this email already exists")

    # PUBLIC_INTERFACE
    async def create_user(self, values: dict[str, Any], *, actor: Optional[User] = None) -> User:
        data = dict(values)
        if data.get("role", "staff") not in ROLES:
            raise DomainValidationError(f"Invalid role '{data.get('role')}'")
        await self._check_email(data["email"])
        data["hashed_password"] = get_password_hash(data.pop("password"))
        user = await self.repo.create(data, commit=False)
        await self.audit.record(
            user=actor, action="CREATE", resource="users", resource_id=user.id, new_values=snapshot(user)
        )
        await self.session.commit()
        logger.info("User %s created with role %s", user.email, user.role)
        return await self.get_user(user.id)

    # PUBLIC_INTERFACE
    async def update_user(self, user_id: int, values: dict[str, Any], *, actor: Optional[User] = None) -> User:
        user = await self.get_user(user_id)
        data = dict(values)
        if "role" in data and data["role"] not in ROLES:
            raise DomainValidationError(f"Invalid role '{data['role']}'")
        if data.get("email"):
            await self._check_email(data["email"], exclude_id=user_id)
        password = data.pop("password", None)
        if password:
            data["hashed_password"] = get_password_hash(password)
        old = snapshot(user)
        await self.repo.update(user, data, commit=False)
        await self.audit.record(
            user=actor,
            action="UPDATE",
            resource="users",
            resource_id=user_id,
            old_values=old,
            new_values=snapshot(user),
        )
        await self.session.commit()
        return await self.get_user(user_id)

    # PUBLIC_INTERFACE
    async def update_profile(self, user: User, values: dict[str, Any]) -> User:
        """Self-service profile edit; a new password needs the current one."""
        data = dict(values)
        new_password = data.pop("new_password", None)
        current_password = data.pop("current_password", None)
        if new_password:
            if not current_password or not verify_password(current_password, user.hashed_password):
                raise DomainValidationError("Current password is incorrect")
            data["password"] = new_password
        for forbidden in ("role", "is_active"):
            data.pop(forbidden, None)
        return await self.update_user(user.id, data, actor=user)

    # PUBLIC_INTERFACE
    async def delete_user(self, user_id: int, *, actor: Optional[User] = None) -> None:
        user = await self.get_user(user_id)
        if actor is not None and actor.id == user_id:
            raise DomainValidationError("You cannot delete your own account")
        old = snapshot(user)
        await self.repo.delete(user, commit=False)
        await self.audit.record(user=actor, action="DELETE", resource="users", resource_id=user_id, old_values=old)
        await self.session.commit()
