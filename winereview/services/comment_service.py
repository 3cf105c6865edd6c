"""
Comment Service - comments on reviews.

Any signed-in user may comment on any review; only the author may edit
or delete a comment. Comments disappear with their review.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import select

from winereview.core.exceptions import NotFoundError
from winereview.core.logging_config import LoggerMixin
from winereview.core.validators import MAX_COMMENT_LENGTH, require_text
from winereview.database.connection import DatabaseConnection
from winereview.database.models import Comment, Review, User
from winereview.models.common import Page
from winereview.models.reviews import CommentResponse, CreateCommentRequest, UpdateCommentRequest
from winereview.services.authorization import require_owner
from winereview.services.lifecycle import DeletionReport, ResourceLifecycleManager, get_lifecycle_manager
from winereview.services.pagination import PageRequest, PageResult, SortOrder, paginate

COMMENT_SORT_FIELDS = {
    "createdAt": Comment.created_at,
    "updatedAt": Comment.updated_at,
}
# A user's own comments: newest first. A review's thread: oldest first.
DEFAULT_USER_COMMENT_SORT = SortOrder(field="createdAt", descending=True)
DEFAULT_REVIEW_COMMENT_SORT = SortOrder(field="createdAt")


def _to_page(result: PageResult) -> Page[CommentResponse]:
    return Page[CommentResponse](
        content=[CommentResponse.model_validate(comment) for comment in result.items],
        page=result.page,
        size=result.size,
        total_elements=result.total_elements,
        total_pages=result.total_pages,
    )


class CommentService(LoggerMixin):
    """Business logic for comments."""

    def __init__(self, database: DatabaseConnection, lifecycle: Optional[ResourceLifecycleManager] = None):
        self.database = database
        self.lifecycle = lifecycle or get_lifecycle_manager()

    def add_comment(self, request: CreateCommentRequest, user_id: UUID) -> CommentResponse:
        """
        Raises:
            ValidationError: Blank or too long text
            NotFoundError: Review or user does not exist
        """
        text = require_text(request.text, "text", MAX_COMMENT_LENGTH)

        with self.database.get_session() as session:
            review = session.get(Review, request.review_id)
            if review is None:
                raise NotFoundError("Review", request.review_id)

            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            comment = Comment(review=review, author=user, text=text)
            session.add(comment)
            session.flush()

            self.logger.info(f"Comment {comment.id} added to review {review.id} by user {user_id}")
            return CommentResponse.model_validate(comment)

    def update_comment(self, request: UpdateCommentRequest, user_id: UUID) -> CommentResponse:
        """
        Raises:
            ValidationError: Blank or too long text (nothing is changed)
            NotFoundError: Comment does not exist
            ForbiddenError: Caller is not the author
        """
        text = require_text(request.text, "text", MAX_COMMENT_LENGTH)

        with self.database.get_session() as session:
            comment = session.get(Comment, request.comment_id, with_for_update=True)
            if comment is None:
                raise NotFoundError("Comment", request.comment_id)

            require_owner(user_id, comment)

            comment.text = text
            session.flush()

            self.logger.info(f"Comment {comment.id} edited by user {user_id}")
            return CommentResponse.model_validate(comment)

    def list_comments_by_user(self, user_id: UUID, page_request: PageRequest) -> Page[CommentResponse]:
        """Comments written by the user, newest first unless sorted otherwise."""
        statement = select(Comment).where(Comment.author_id == user_id)

        with self.database.get_session() as session:
            result = paginate(
                session,
                statement,
                page_request,
                sort_fields=COMMENT_SORT_FIELDS,
                default_sort=DEFAULT_USER_COMMENT_SORT,
                tiebreaker=Comment.id,
            )
            self.logger.info(f"Loaded {len(result.items)}/{result.total_elements} comments of user {user_id}")
            return _to_page(result)

    def list_comments_by_review(self, review_id: UUID, page_request: PageRequest) -> Page[CommentResponse]:
        """
        Raises:
            NotFoundError: Review does not exist
        """
        with self.database.get_session() as session:
            if session.get(Review, review_id) is None:
                raise NotFoundError("Review", review_id)

            result = paginate(
                session,
                select(Comment).where(Comment.review_id == review_id),
                page_request,
                sort_fields=COMMENT_SORT_FIELDS,
                default_sort=DEFAULT_REVIEW_COMMENT_SORT,
                tiebreaker=Comment.id,
            )
            self.logger.info(f"Loaded {len(result.items)}/{result.total_elements} comments of review {review_id}")
            return _to_page(result)

    def delete_comment(self, comment_id: UUID, user_id: UUID) -> DeletionReport:
        """
        Raises:
            NotFoundError: Comment does not exist
            ForbiddenError: Caller is not the author
        """
        with self.database.get_session() as session:
            comment = session.get(Comment, comment_id, with_for_update=True)
            if comment is None:
                raise NotFoundError("Comment", comment_id)

            require_owner(user_id, comment)
            return self.lifecycle.delete(session, Comment, comment_id)
