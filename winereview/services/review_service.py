"""
Review Service - create, read, update and delete wine reviews.

Every mutation runs as one transaction spanning the lookup, the
ownership check and the write (plus cascade on delete). Reads need no
ownership.
"""
from typing import Dict, Iterable, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from winereview.core.exceptions import NotFoundError
from winereview.core.logging_config import LoggerMixin
from winereview.core.validators import MAX_NOTES_LENGTH, optional_text, require_rating, sanitize_text
from winereview.database.connection import DatabaseConnection
from winereview.database.models import Comment, Review, User, Wine
from winereview.models.catalog import UserSummary, WineSummary
from winereview.models.common import Page
from winereview.models.reviews import CreateReviewRequest, ReviewResponse, UpdateReviewRequest
from winereview.services.authorization import require_owner
from winereview.services.lifecycle import DeletionReport, ResourceLifecycleManager, get_lifecycle_manager
from winereview.services.pagination import PageRequest, SortOrder, paginate

REVIEW_SORT_FIELDS = {
    "createdAt": Review.created_at,
    "updatedAt": Review.updated_at,
    "rating": Review.rating,
}
DEFAULT_REVIEW_SORT = SortOrder(field="createdAt")


def comment_counts(session: Session, review_ids: Iterable[UUID]) -> Dict[UUID, int]:
    """Number of comments per review, for the given reviews only."""
    ids = list(review_ids)
    if not ids:
        return {}
    rows = session.execute(
        select(Comment.review_id, func.count(Comment.id))
        .where(Comment.review_id.in_(ids))
        .group_by(Comment.review_id)
    ).all()
    return {review_id: count for review_id, count in rows}


def to_review_response(review: Review, comment_count: int) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        rating=review.rating,
        notes=review.notes,
        image_url=review.image_url,
        created_at=review.created_at,
        updated_at=review.updated_at,
        author=UserSummary.model_validate(review.user),
        wine=WineSummary.model_validate(review.wine),
        comment_count=comment_count,
    )


class ReviewService(LoggerMixin):
    """
    Business logic for reviews.

    Example:
        >>> service = ReviewService(get_database())
        >>> review = service.create_review(CreateReviewRequest(wineId=wine_id, rating=5), user_id)
        >>> service.delete_review(review.id, user_id).count(Comment)
        0
    """

    def __init__(self, database: DatabaseConnection, lifecycle: Optional[ResourceLifecycleManager] = None):
        self.database = database
        self.lifecycle = lifecycle or get_lifecycle_manager()

    def create_review(self, request: CreateReviewRequest, user_id: UUID) -> ReviewResponse:
        """
        Raises:
            ValidationError: Rating outside 1..5 or notes too long
            NotFoundError: User or wine does not exist
        """
        rating = require_rating(request.rating)
        notes = optional_text(request.notes, "notes", MAX_NOTES_LENGTH)
        image_url = sanitize_text(request.image_url)

        with self.database.get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            wine = session.get(Wine, request.wine_id)
            if wine is None:
                raise NotFoundError("Wine", request.wine_id)

            review = Review(user=user, wine=wine, rating=rating, notes=notes, image_url=image_url)
            session.add(review)
            session.flush()

            self.logger.info(f"Review {review.id} created by user {user_id} for wine {wine.id}")
            return to_review_response(review, comment_count=0)

    def update_review(self, review_id: UUID, request: UpdateReviewRequest, user_id: UUID) -> ReviewResponse:
        """
        Apply a partial update. Only fields present in the request change.

        Raises:
            ValidationError: Invalid rating or notes (nothing is changed)
            NotFoundError: Review does not exist
            ForbiddenError: Caller is not the review's owner
        """
        rating = require_rating(request.rating) if request.rating is not None else None
        notes = optional_text(request.notes, "notes", MAX_NOTES_LENGTH)

        with self.database.get_session() as session:
            review = session.get(Review, review_id, with_for_update=True)
            if review is None:
                raise NotFoundError("Review", review_id)

            require_owner(user_id, review)

            if rating is not None:
                review.rating = rating
            if request.notes is not None:
                review.notes = notes
            if request.image_url is not None:
                review.image_url = sanitize_text(request.image_url)
            session.flush()

            self.logger.info(f"Review {review_id} updated by user {user_id}")
            return to_review_response(review, comment_counts(session, [review.id]).get(review.id, 0))

    def get_review(self, review_id: UUID) -> ReviewResponse:
        with self.database.get_session() as session:
            review = session.get(Review, review_id)
            if review is None:
                raise NotFoundError("Review", review_id)

            self.logger.debug(f"Review {review_id} loaded")
            return to_review_response(review, comment_counts(session, [review.id]).get(review.id, 0))

    def list_reviews(
        self,
        page_request: PageRequest,
        wine_id: Optional[UUID] = None,
        user_id: Optional[UUID] = None,
    ) -> Page[ReviewResponse]:
        """List reviews, optionally filtered by wine and/or author (AND)."""
        statement = select(Review)
        if wine_id is not None:
            statement = statement.where(Review.wine_id == wine_id)
        if user_id is not None:
            statement = statement.where(Review.user_id == user_id)

        with self.database.get_session() as session:
            result = paginate(
                session,
                statement,
                page_request,
                sort_fields=REVIEW_SORT_FIELDS,
                default_sort=DEFAULT_REVIEW_SORT,
                tiebreaker=Review.id,
            )
            counts = comment_counts(session, (review.id for review in result.items))

            self.logger.info(
                f"Listed reviews wineId={wine_id} userId={user_id} "
                f"page={result.page} returned={len(result.items)}/{result.total_elements}"
            )
            return Page[ReviewResponse](
                content=[to_review_response(r, counts.get(r.id, 0)) for r in result.items],
                page=result.page,
                size=result.size,
                total_elements=result.total_elements,
                total_pages=result.total_pages,
            )

    def delete_review(self, review_id: UUID, user_id: UUID) -> DeletionReport:
        """
        Delete a review and all its comments.

        Raises:
            NotFoundError: Review does not exist (or was just deleted)
            ForbiddenError: Caller is not the review's owner
        """
        with self.database.get_session() as session:
            review = session.get(Review, review_id, with_for_update=True)
            if review is None:
                raise NotFoundError("Review", review_id)

            require_owner(user_id, review)
            return self.lifecycle.delete(session, Review, review_id)
