"""
Session credentials - signed tokens proving a user's identity.

Issued by the identity exchange after a successful login and presented
as "Authorization: Bearer <token>" on protected routes. The token is an
HS256 JWT whose subject is the internal user id.
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID

import jwt

from winereview.core.config import get_settings
from winereview.core.exceptions import UnauthenticatedError
from winereview.core.logging_config import get_logger

logger = get_logger(__name__)

JWT_ALGORITHM = "HS256"


class SessionTokenService:
    """
    Issues and verifies session credentials.

    Example:
        >>> tokens = SessionTokenService(secret="s3cret", expiration_seconds=3600)
        >>> token = tokens.issue(user_id)
        >>> tokens.decode(token) == user_id
        True
    """

    def __init__(self, secret: Optional[str] = None, expiration_seconds: Optional[int] = None):
        settings = get_settings() if secret is None or expiration_seconds is None else None
        self.secret = secret if secret is not None else settings.jwt_secret
        self.expiration = timedelta(
            seconds=expiration_seconds if expiration_seconds is not None else settings.jwt_expiration_seconds
        )
        logger.debug(f"SessionTokenService initialized (expiration={self.expiration})")

    def issue(self, user_id: UUID) -> str:
        """Create a signed session credential bound to the user id."""
        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user_id),
            "iat": now,
            "exp": now + self.expiration,
        }
        return jwt.encode(payload, self.secret, algorithm=JWT_ALGORITHM)

    def decode(self, token: str) -> UUID:
        """
        Verify a session credential and return the user id it is bound to.

        Raises:
            UnauthenticatedError: Expired, tampered or malformed token
        """
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[JWT_ALGORITHM],
                options={"require": ["sub", "exp"]},
            )
        except jwt.ExpiredSignatureError:
            logger.warning("Session token expired")
            raise UnauthenticatedError("Session expired, please sign in again")
        except jwt.InvalidTokenError as e:
            logger.warning(f"Invalid session token: {e}")
            raise UnauthenticatedError("Invalid session token")

        try:
            return UUID(claims["sub"])
        except (TypeError, ValueError):
            logger.warning("Session token subject is not a user id")
            raise UnauthenticatedError("Invalid session token")


_token_service: Optional[SessionTokenService] = None


def get_token_service() -> SessionTokenService:
    """Get or create the session token service singleton."""
    global _token_service
    if _token_service is None:
        _token_service = SessionTokenService()
    return _token_service
