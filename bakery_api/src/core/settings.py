from __future__ import annotations

from typing import Annotated, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class AppSettings(BaseSettings):
    """
    Application-level settings for the FastAPI service.

    This is separate from src.db.config.Settings, which focuses on the database layer.
    """

    # FastAPI metadata
    APP_NAME: str = Field(default="Bakery Management API")
    APP_DESCRIPTION: str = Field(
        default=(
            "Backend API for a bakery business-management application: orders, inventory, "
            "production scheduling, staff and payroll, customer and supplier ledgers."
        )
    )
    APP_VERSION: str = Field(default="0.1.0")

    # CORS
    CORS_ORIGINS: Annotated[List[str], NoDecode] = Field(
        default_factory=lambda: ["*"],
        description="Comma-separated list or JSON array of allowed origins. Default: *",
    )
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True)
    CORS_ALLOW_METHODS: List[str] = Field(default_factory=lambda: ["*"])
    CORS_ALLOW_HEADERS: List[str] = Field(default_factory=lambda: ["*"])

    # Auth
    JWT_SECRET_KEY: str = Field(
        default="change-me-in-production",
        description="Secret used to sign JWT access and refresh tokens.",
    )
    JWT_ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24)
    REFRESH_TOKEN_EXPIRE_MINUTES: int = Field(default=60 * 24 * 7)
    AUTH_COOKIE_NAME: str = Field(default="access_token")
    AUTH_COOKIE_SECURE: bool = Field(
        default=False, description="Mark the auth cookie Secure (enable behind HTTPS)."
    )

    # Startup behavior
    RUN_MIGRATIONS_ON_STARTUP: bool = Field(
        default=True,
        description="If true, run Alembic migrations (upgrade head) at app startup.",
    )
    AUTO_SEED: bool = Field(
        default=False,
        description="If true, run database seeding after migrations.",
    )
    DEFAULT_ADMIN_PASSWORD: str = Field(
        default="password123",
        description="Password assigned to the seeded default users.",
    )

    # Uploads
    UPLOAD_DIR: str = Field(default="uploads")
    UPLOAD_MAX_BYTES: int = Field(default=5 * 1024 * 1024)

    # Notifications
    NOTIFICATION_RETENTION: int = Field(
        default=100, description="Maximum number of notifications kept per user."
    )
    LOW_STOCK_CHECK_INTERVAL_SECONDS: int = Field(
        default=300, description="Interval for the background low stock check. 0 disables it."
    )

    # Logging
    LOG_LEVEL: str = Field(default="INFO", description="Root log level name, e.g. DEBUG or WARNING.")
    SQL_LOG_LEVEL: str = Field(default="WARNING", description="Level for the sqlalchemy.engine logger.")

    ENVIRONMENT: Optional[str] = Field(
        default=None, description="Environment label (dev/test/prod)"
    )

    # Automatically load from .env at runtime.
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors_origins(cls, v):
        """
        Accept both JSON array format and comma-separated formats for CORS origins.
        """
        if v is None:
            return ["*"]
        if isinstance(v, str):
            # Try comma-separated
            parts = [p.strip() for p in v.split(",") if p.strip()]
            return parts or ["*"]
        if isinstance(v, list):
            return v or ["*"]
        return ["*"]


# PUBLIC_INTERFACE
def get_app_settings() -> AppSettings:
    """Read application settings from the environment (and .env). Built fresh on every call."""
    return AppSettings()
