"""
Shared fixtures: an in-memory SQLite database per test, the seeded reference
data (permissions, default users, units, settings) and an ASGI client.
"""
import os
import tempfile

# Settings are read at import time, so the environment is prepared first.
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["RUN_MIGRATIONS_ON_STARTUP"] = "false"
os.environ["AUTO_SEED"] = "false"
os.environ["LOW_STOCK_CHECK_INTERVAL_SECONDS"] = "0"
os.environ["DEFAULT_ADMIN_PASSWORD"] = "password123"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="bakery-uploads-")

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import src.db.session as db_session  # noqa: E402
from src.db import models  # noqa: E402,F401
from src.db.base import Base  # noqa: E402
from src.db.seed import seed_all  # noqa: E402
from src.repositories.security import UserRepository  # noqa: E402
from src.services.users import issue_tokens  # noqa: E402
from src.api.main import app  # noqa: E402

DEFAULT_PASSWORD = "password123"


# =============================================================================
# DATABASE
# =============================================================================

@pytest_asyncio.fixture
async def engine():
    """Fresh in-memory database wired into the application's session factory."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    db_session._ENGINE = test_engine
    db_session._SESSION_MAKER = async_sessionmaker(
        bind=test_engine, expire_on_commit=False, autoflush=False
    )
    yield test_engine

    await db_session.dispose_engine()


@pytest_asyncio.fixture
async def session(engine):
    async with db_session.get_session_maker()() as s:
        yield s


@pytest_asyncio.fixture
async def seeded(engine):
    """Permissions, role grants, default users, units and settings."""
    await seed_all()


@pytest_asyncio.fixture
async def users(seeded):
    """Seeded users keyed by role."""
    async with db_session.session_scope() as s:
        rows = await UserRepository(s).list_users()
    return {u.role: u for u in rows}


# =============================================================================
# HTTP
# =============================================================================

@pytest_asyncio.fixture
async def client(engine):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def auth_headers(users):
    """Bearer headers for a seeded role: auth_headers("manager")."""

    def _headers(role: str = "admin") -> dict:
        token = issue_tokens(users[role])["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _headers
