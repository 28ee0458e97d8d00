from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Generic, List, Optional, Tuple, TypeVar

from pydantic import BaseModel, Field, model_validator

T = TypeVar("T")


class IDModel(BaseModel):
    """Base schema exposing an integer primary key."""
    id: int = Field(..., description="Unique identifier")


class Timestamps(BaseModel):
    """Common created/updated timestamp fields."""
    created_at: Optional[datetime] = Field(None, description="Creation timestamp (UTC)")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp (UTC)")


class ORMModel(IDModel, Timestamps):
    """Read model base for ORM rows."""

    class Config:
        from_attributes = True


class Pagination(BaseModel):
    """Pagination parameters."""
    limit: int = Field(100, ge=1, le=1000, description="Max number of records to return")
    offset: int = Field(0, ge=0, description="Number of records to skip")


class Page(BaseModel, Generic[T]):
    """A page of results with the total row count for the applied filters."""
    items: List[T] = Field(default_factory=list, description="Rows on this page")
    total: int = Field(..., description="Total matching rows")
    limit: int = Field(..., description="Page size")
    offset: int = Field(..., description="Rows skipped")


class MessageResponse(BaseModel):
    """Standard message response."""
    message: str = Field(..., description="Human readable message")
    details: Optional[dict] = Field(default=None, description="Optional extra data")


class ErrorInfo(BaseModel):
    """Structured error description."""
    type: str = Field(..., description="Machine-readable error type code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Any] = Field(default=None, description="Optional error details (e.g., validation issues)")


# PUBLIC_INTERFACE
class ErrorResponse(BaseModel):
    """Standardized API error envelope returned by exception handlers."""
    status: int = Field(..., description="HTTP status code")
    error: ErrorInfo = Field(..., description="Error details")
    correlation_id: Optional[str] = Field(default=None, description="Request correlation ID")
    path: Optional[str] = Field(default=None, description="Request path")
    method: Optional[str] = Field(default=None, description="HTTP method")
    timestamp: datetime = Field(..., description="Error timestamp (UTC)")


class PartialUpdate(BaseModel):
    """
    Base for PUT payloads where every field is optional.

    Fields named in NOT_NULL may be left out but not sent as null, since
    they map to required columns.
    """

    NOT_NULL: ClassVar[Tuple[str, ...]] = ()

    @model_validator(mode="after")
    def _reject_null_required(self):
        nulls = [name for name in self.NOT_NULL if name in self.model_fields_set and getattr(self, name) is None]
        if nulls:
            raise ValueError(f"{', '.join(nulls)} cannot be null")
        return self
