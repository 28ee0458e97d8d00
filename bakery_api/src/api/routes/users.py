from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.deps import require_permission
from src.db.models.security import User
from src.db.session import get_async_session
from src.schemas.auth import UserCreate, UserRead, UserUpdate
from src.services.users import UserService

router = APIRouter(prefix="/users", tags=["Users"])


# PUBLIC_INTERFACE
@router.get(
    "",
    response_model=List[UserRead],
    summary="List users",
    dependencies=[Depends(require_permission("users", "read"))],
)
async def list_users(
    session: AsyncSession = Depends(get_async_session),
    role: Optional[str] = Query(None, description="Filter by role"),
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
) -> List[UserRead]:
    items = await UserService(session).list_users(role=role, limit=limit, offset=offset)
    return [UserRead.model_validate(u) for u in items]


# PUBLIC_INTERFACE
@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create user",
)
async def create_user(
    payload: UserCreate,
    actor: User = Depends(require_permission("users", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    created = await UserService(session).create_user(payload.model_dump(), actor=actor)
    return UserRead.model_validate(created)


# PUBLIC_INTERFACE
@router.get(
    "/{user_id}",
    response_model=UserRead,
    summary="Get user",
    dependencies=[Depends(require_permission("users", "read"))],
)
async def get_user(
    user_id: int = Path(...),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    return UserRead.model_validate(await UserService(session).get_user(user_id))


# PUBLIC_INTERFACE
@router.put(
    "/{user_id}",
    response_model=UserRead,
    summary="Update user",
)
async def update_user(
    payload: UserUpdate,
    user_id: int = Path(...),
    actor: User = Depends(require_permission("users", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> UserRead:
    updated = await UserService(session).update_user(user_id, payload.model_dump(exclude_unset=True), actor=actor)
    return UserRead.model_validate(updated)


# PUBLIC_INTERFACE
@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete user",
)
async def delete_user(
    user_id: int = Path(...),
    actor: User = Depends(require_permission("users", "write")),
    session: AsyncSession = Depends(get_async_session),
) -> None:
    await UserService(session).delete_user(user_id, actor=actor)
