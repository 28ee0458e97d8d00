from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field

from .common import ORMModel, PartialUpdate


class TokenPair(BaseModel):
    """Access and refresh tokens."""
    token_type: str = Field("bearer", description="Token type, typically 'bearer'")
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="JWT refresh token")


class LoginResponse(TokenPair):
    """Tokens plus the authenticated user."""
    user: "UserRead" = Field(..., description="Authenticated user")


class RefreshRequest(BaseModel):
    """Request to refresh an access token."""
    refresh_token: str = Field(..., description="Refresh token")


class Message(BaseModel):
    """Simple message response."""
    message: str = Field(...)


class UserRead(ORMModel):
    """User read model."""
    email: EmailStr = Field(..., description="User email")
    first_name: Optional[str] = Field(None)
    last_name: Optional[str] = Field(None)
    full_name: Optional[str] = Field(None)
    profile_image_url: Optional[str] = Field(None)
    role: str = Field(..., description="Role name")
    is_active: bool = Field(..., description="Active flag")


class UserCreate(BaseModel):
    """Admin create user payload."""
    email: EmailStr = Field(..., description="Email")
    password: str = Field(..., min_length=6, description="Password")
    first_name: Optional[str] = Field(None)
    last_name: Optional[str] = Field(None)
    profile_image_url: Optional[str] = Field(None)
    role: str = Field("staff", description="Role name")
    is_active: bool = Field(default=True)


class UserUpdate(PartialUpdate):
    """Admin update user payload."""
    NOT_NULL = ("email", "role", "is_active")

    email: Optional[EmailStr] = Field(None)
    password: Optional[str] = Field(None, min_length=6)
    first_name: Optional[str] = Field(None)
    last_name: Optional[str] = Field(None)
    profile_image_url: Optional[str] = Field(None)
    role: Optional[str] = Field(None)
    is_active: Optional[bool] = Field(None)


class ProfileUpdate(PartialUpdate):
    """Own profile update; changing the password requires the current one."""
    NOT_NULL = ("email",)

    first_name: Optional[str] = Field(None)
    last_name: Optional[str] = Field(None)
    email: Optional[EmailStr] = Field(None)
    profile_image_url: Optional[str] = Field(None)
    current_password: Optional[str] = Field(None)
    new_password: Optional[str] = Field(None, min_length=6)


class LoginLogRead(BaseModel):
    """Login attempt."""
    id: int
    user_id: Optional[int] = None
    email: str
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    device_type: Optional[str] = None
    status: str
    failure_reason: Optional[str] = None
    login_time: datetime

    class Config:
        from_attributes = True


class LoginAnalytics(BaseModel):
    """Aggregated login activity for a period."""
    period_days: int
    total_attempts: int
    successful: int
    failed: int
    unique_users: int
    device_types: List[dict] = Field(default_factory=list)
    top_ip_addresses: List[dict] = Field(default_factory=list)


LoginResponse.model_rebuild()
