"""
Shared response models and the camelCase base model.

The wire format uses camelCase field names (wineId, totalElements) while
Python code uses snake_case; CamelModel bridges the two. Models can be
built directly from ORM objects (from_attributes=True).
"""
from datetime import datetime, timezone
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Base for every request/response body."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Page(CamelModel, Generic[T]):
    """
    One page of a list read.

    content never holds more than `size` items; totalPages is
    ceil(totalElements / size).
    """
    content: List[T]
    page: int = Field(..., description="Zero-based page index")
    size: int = Field(..., description="Requested page size")
    total_elements: int
    total_pages: int


class HealthResponse(BaseModel):
    """Response model for the /health endpoints."""
    status: str = Field(default="healthy")
    version: str
    database: Optional[str] = None
    timestamp: datetime = Field(default_factory=_now)


class ErrorResponse(BaseModel):
    """Standard error response model."""
    error: str
    message: str
    details: Optional[str] = None
    timestamp: datetime = Field(default_factory=_now)
