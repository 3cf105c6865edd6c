"""
User Service - profile reads and account deletion.

Deleting an account removes everything it owns: its reviews (and the
comments on them) and every comment it wrote elsewhere.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select

from winereview.core.exceptions import NotFoundError
from winereview.core.logging_config import LoggerMixin
from winereview.database.connection import DatabaseConnection
from winereview.database.models import Comment, Review, User
from winereview.models.catalog import UserResponse
from winereview.services.authorization import require_owner
from winereview.services.lifecycle import DeletionReport, ResourceLifecycleManager, get_lifecycle_manager


class UserService(LoggerMixin):
    """Business logic for user accounts."""

    def __init__(self, database: DatabaseConnection, lifecycle: Optional[ResourceLifecycleManager] = None):
        self.database = database
        self.lifecycle = lifecycle or get_lifecycle_manager()

    def get_profile(self, user_id: UUID) -> UserResponse:
        with self.database.get_session() as session:
            user = session.get(User, user_id)
            if user is None:
                raise NotFoundError("User", user_id)

            review_count = session.scalar(
                select(func.count(Review.id)).where(Review.user_id == user_id)
            ) or 0
            comment_count = session.scalar(
                select(func.count(Comment.id)).where(Comment.author_id == user_id)
            ) or 0

            return UserResponse(
                id=user.id,
                display_name=user.display_name,
                email=user.email,
                avatar_url=user.avatar_url,
                created_at=user.created_at,
                review_count=review_count,
                comment_count=comment_count,
            )

    def delete_user(self, user_id: UUID, requester_id: UUID) -> DeletionReport:
        """
        Delete an account and everything it owns. Users may only delete themselves.

        Raises:
            NotFoundError: User does not exist
            ForbiddenError: requester_id is a different user
        """
        with self.database.get_session() as session:
            user = session.get(User, user_id, with_for_update=True)
            if user is None:
                raise NotFoundError("User", user_id)

            require_owner(requester_id, user)
            report = self.lifecycle.delete(session, User, user_id)

        self.logger.info(f"Account {user_id} closed: {report.summary()}")
        return report
