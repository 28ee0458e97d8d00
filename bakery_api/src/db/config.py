from __future__ import annotations

import re
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

_ASYNC_DRIVERS = {
    "postgresql": "postgresql+asyncpg",
    "sqlite": "sqlite+aiosqlite",
}


class Settings(BaseSettings):
    """
    Database connection settings for the bakery backend.

    The URL comes from DATABASE_URL when set; otherwise it is assembled from
    the POSTGRES_* variables. Both PostgreSQL (production) and SQLite (local
    runs and tests) URLs are accepted.
    """

    DATABASE_URL: Optional[str] = Field(default=None, description="Full SQLAlchemy URL; wins over POSTGRES_*")
    POSTGRES_USER: Optional[str] = Field(default=None, description="DB username")
    POSTGRES_PASSWORD: Optional[str] = Field(default=None, description="DB password")
    POSTGRES_DB: Optional[str] = Field(default="bakery", description="Database name")
    POSTGRES_HOST: str = Field(default="localhost", description="Database host")
    POSTGRES_PORT: int = Field(default=5432, description="Database port")

    SQL_ECHO: bool = Field(default=False, description="Log every SQL statement")
    DB_POOL_SIZE: int = Field(default=5, ge=1, description="Connections kept open per worker (PostgreSQL)")
    DB_MAX_OVERFLOW: int = Field(default=10, ge=0, description="Extra connections allowed under load (PostgreSQL)")

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @property
    def database_url(self) -> str:
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Heroku style scheme
            if url.startswith("postgres://"):
                url = "postgresql://" + url[len("postgres://"):]
            return url
        if not (self.POSTGRES_USER and self.POSTGRES_PASSWORD):
            raise ValueError(
                "Database configuration missing: set DATABASE_URL or POSTGRES_USER and POSTGRES_PASSWORD."
            )
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def backend(self) -> str:
        """Dialect name without driver, e.g. 'postgresql' or 'sqlite'."""
        return self.database_url.split(":", 1)[0].split("+", 1)[0]

    @property
    def is_sqlite(self) -> bool:
        return self.backend == "sqlite"

    @property
    def async_database_url(self) -> str:
        """URL with the async driver used by the application engine."""
        driver = _ASYNC_DRIVERS.get(self.backend)
        if driver is None:
            return self.database_url
        return re.sub(r"^[\w+]+://", f"{driver}://", self.database_url)

    @property
    def sync_database_url(self) -> str:
        """Driver-less URL for Alembic offline mode."""
        return re.sub(r"^(\w+)\+\w+://", r"\1://", self.database_url)


# PUBLIC_INTERFACE
def get_settings() -> Settings:
    """Return database settings read from the environment."""
    return Settings()
