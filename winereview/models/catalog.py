"""Response models for users and wines."""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from winereview.core.validators import MAX_VINTAGE, MIN_VINTAGE
from winereview.models.common import CamelModel


class UserSummary(CamelModel):
    """Public view of a user, embedded as the author of reviews and comments."""
    id: UUID
    display_name: str
    avatar_url: Optional[str] = None


class UserResponse(CamelModel):
    """Full profile of the authenticated user."""
    id: UUID
    display_name: str
    email: str
    avatar_url: Optional[str] = None
    created_at: datetime
    review_count: int = 0
    comment_count: int = 0


class WineSummary(CamelModel):
    """Wine as embedded in a review."""
    id: UUID
    name: str
    winery: Optional[str] = None
    country: Optional[str] = None
    year: Optional[int] = None
    image_url: Optional[str] = None


class WineResponse(WineSummary):
    grape: Optional[str] = None
    created_at: datetime
    average_rating: Optional[float] = None
    review_count: int = 0


class CreateWineRequest(CamelModel):
    """Catalog entry input. Wines are curated, not created by reviewers."""
    name: str = Field(..., min_length=1, max_length=160)
    winery: Optional[str] = Field(default=None, max_length=160)
    country: Optional[str] = Field(default=None, max_length=80)
    grape: Optional[str] = Field(default=None, max_length=80)
    year: Optional[int] = Field(default=None, ge=MIN_VINTAGE, le=MAX_VINTAGE)
    image_url: Optional[str] = None
