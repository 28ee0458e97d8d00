from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

CENT = Decimal("0.01")


class ServiceError(Exception):
    """Base class for errors raised by services and mapped to HTTP responses."""

    status_code = 400
    error_type = "service_error"

    def __init__(self, message: str, details: Optional[Any] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class NotFoundError(ServiceError):
    """Requested entity does not exist."""

    status_code = 404
    error_type = "not_found"


class DomainValidationError(ServiceError):
    """Request is well-formed but violates a business rule."""

    status_code = 400
    error_type = "validation_error"


class ConflictError(ServiceError):
    """Request conflicts with existing state (duplicate key, already clocked in, ...)."""

    status_code = 409
    error_type = "conflict"


def to_decimal(value: Any) -> Decimal:
    """Coerce numbers (and None) to Decimal without float artefacts."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money(value: Any) -> Decimal:
    """Round to cents, half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Attach UTC to naive datetimes read back from backends without timezone support."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class BaseService:
    """
    Base class for services. Holds a session for use across multiple repositories.

    Services should keep business logic and orchestration, delegating data access
    to repositories.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
