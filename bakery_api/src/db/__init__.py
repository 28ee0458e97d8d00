"""
Persistence layer: declarative base, database settings, the async engine and
session helpers. Importing the package registers every model on Base.metadata.
"""

from .base import Base
from .config import Settings, get_settings
from .session import (
    dispose_engine,
    get_async_session,
    get_engine,
    get_session_maker,
    session_scope,
)
from . import models as models  # noqa: F401

__all__ = [
    "Base",
    "Settings",
    "dispose_engine",
    "get_async_session",
    "get_engine",
    "get_session_maker",
    "get_settings",
    "models",
    "session_scope",
]
