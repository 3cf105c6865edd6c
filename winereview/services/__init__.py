"""
Services module - Business logic and orchestration.

Services contain the core application logic:
- No HTTP concerns (those belong in api/)
- Each public operation is one transaction (database.get_session())
- Ownership is enforced here, after the API layer has checked the session
"""
from winereview.services.authorization import Forbidden, Proceed, authorize, require_owner
from winereview.services.comment_service import CommentService
from winereview.services.files import FileIngestionService, FileIngestionValidator, S3FileStorage
from winereview.services.identity import GoogleTokenVerifier, IdentityExchangeService
from winereview.services.lifecycle import DeletionReport, ResourceLifecycleManager, get_lifecycle_manager
from winereview.services.pagination import PageRequest, PageResult, paginate
from winereview.services.review_service import ReviewService
from winereview.services.user_service import UserService
from winereview.services.wine_service import WineService

__all__ = [
    "Forbidden",
    "Proceed",
    "authorize",
    "require_owner",
    "CommentService",
    "FileIngestionService",
    "FileIngestionValidator",
    "S3FileStorage",
    "GoogleTokenVerifier",
    "IdentityExchangeService",
    "DeletionReport",
    "ResourceLifecycleManager",
    "get_lifecycle_manager",
    "PageRequest",
    "PageResult",
    "paginate",
    "ReviewService",
    "UserService",
    "WineService",
]
