"""
Request and response models for reviews and comments.

Shape checks (required ids, rating range, text length) are declared here
so malformed bodies fail with 400 before reaching a service. Services
re-check the domain rules themselves.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import Field

from winereview.core.validators import MAX_COMMENT_LENGTH, MAX_NOTES_LENGTH, MAX_RATING, MIN_RATING
from winereview.models.catalog import UserSummary, WineSummary
from winereview.models.common import CamelModel


class CreateReviewRequest(CamelModel):
    wine_id: UUID = Field(..., description="Wine being reviewed")
    rating: int = Field(..., ge=MIN_RATING, le=MAX_RATING)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    image_url: Optional[str] = Field(default=None, description="URL returned by /files/upload")


class UpdateReviewRequest(CamelModel):
    """Partial update: only fields that are present are changed."""
    rating: Optional[int] = Field(default=None, ge=MIN_RATING, le=MAX_RATING)
    notes: Optional[str] = Field(default=None, max_length=MAX_NOTES_LENGTH)
    image_url: Optional[str] = None


class ReviewResponse(CamelModel):
    id: UUID
    rating: int
    notes: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    author: UserSummary
    wine: WineSummary
    comment_count: int = 0


class CreateCommentRequest(CamelModel):
    review_id: UUID
    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)


class UpdateCommentRequest(CamelModel):
    comment_id: UUID
    text: str = Field(..., min_length=1, max_length=MAX_COMMENT_LENGTH)


class CommentResponse(CamelModel):
    id: UUID
    review_id: UUID
    text: str
    created_at: datetime
    updated_at: datetime
    author: UserSummary
