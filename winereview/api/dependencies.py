"""
Route dependencies - service wiring and the session check.

Every collaborator a route needs is provided through a FastAPI
dependency, so tests can swap any of them via app.dependency_overrides
(an in-memory database, a fake identity provider, a fake file store).
"""
from typing import Optional
from uuid import UUID

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from winereview.core.exceptions import UnauthenticatedError
from winereview.core.logging_config import get_logger
from winereview.core.security import SessionTokenService
from winereview.core.security import get_token_service as _get_token_service
from winereview.database.connection import DatabaseConnection
from winereview.database.connection import get_database as _get_database
from winereview.database.models import User
from winereview.services.comment_service import CommentService
from winereview.services.files import FileIngestionService, FileStorage, S3FileStorage
from winereview.services.identity import GoogleTokenVerifier, IdentityExchangeService, IdentityProvider
from winereview.services.review_service import ReviewService
from winereview.services.user_service import UserService
from winereview.services.wine_service import WineService

logger = get_logger(__name__)

# auto_error=False: a missing header is reported as our own 403 body
_bearer = HTTPBearer(auto_error=False)

_identity_provider: Optional[GoogleTokenVerifier] = None
_file_storage: Optional[S3FileStorage] = None


def get_database() -> DatabaseConnection:
    return _get_database()


def get_token_service() -> SessionTokenService:
    return _get_token_service()


def get_identity_provider() -> IdentityProvider:
    """Google verifier, created on first use (it fetches signing keys lazily)."""
    global _identity_provider
    if _identity_provider is None:
        _identity_provider = GoogleTokenVerifier()
    return _identity_provider


def get_file_storage() -> FileStorage:
    global _file_storage
    if _file_storage is None:
        _file_storage = S3FileStorage()
    return _file_storage


def get_identity_service(
    database: DatabaseConnection = Depends(get_database),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
    token_service: SessionTokenService = Depends(get_token_service),
) -> IdentityExchangeService:
    return IdentityExchangeService(database, identity_provider, token_service)


def get_review_service(database: DatabaseConnection = Depends(get_database)) -> ReviewService:
    return ReviewService(database)


def get_comment_service(database: DatabaseConnection = Depends(get_database)) -> CommentService:
    return CommentService(database)


def get_user_service(database: DatabaseConnection = Depends(get_database)) -> UserService:
    return UserService(database)


def get_wine_service(database: DatabaseConnection = Depends(get_database)) -> WineService:
    return WineService(database)


def get_file_service(storage: FileStorage = Depends(get_file_storage)) -> FileIngestionService:
    return FileIngestionService(storage)


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    token_service: SessionTokenService = Depends(get_token_service),
    database: DatabaseConnection = Depends(get_database),
) -> UUID:
    """
    Resolve the session credential to an existing user's id.

    Runs before any ownership check, so a request without a valid
    session never reaches a service.

    Raises:
        UnauthenticatedError: No bearer token, invalid/expired token, or
            the user it names no longer exists
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError()

    user_id = token_service.decode(credentials.credentials)

    with database.get_session() as session:
        if session.get(User, user_id) is None:
            logger.warning(f"Session for deleted or unknown user {user_id}")
            raise UnauthenticatedError("Session refers to an unknown user")

    request.state.user_id = user_id
    return user_id
