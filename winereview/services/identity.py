"""
Identity Exchange Service - external identity token -> session credential.

Flow for POST /auth/google:
1. The mobile app signs in with Google and receives an ID token
2. The token is verified against Google's published signing keys
3. The local user is created or refreshed (keyed by Google's subject id)
4. A signed session credential bound to the internal user id is returned

A failed verification never touches the users table. The identity
provider is injected, so the service can be exercised without network.
"""
from dataclasses import dataclass
from typing import Optional, Protocol

import jwt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from winereview.core.config import get_settings
from winereview.core.exceptions import AuthenticationError, InternalError, UserLookupError, ValidationError
from winereview.core.logging_config import LoggerMixin
from winereview.core.security import SessionTokenService
from winereview.core.validators import require_email, sanitize_text
from winereview.database.connection import DatabaseConnection
from winereview.database.models import User
from winereview.models.auth import AuthResponse, LoginResponse

GOOGLE_CERTS_URL = "https://www.googleapis.com/oauth2/v3/certs"
GOOGLE_ISSUERS = ("accounts.google.com", "https://accounts.google.com")


@dataclass(frozen=True)
class ExternalIdentity:
    """A verified identity as asserted by the external provider."""
    provider_id: str
    email: str
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class IdentityProvider(Protocol):
    def verify(self, token: str) -> ExternalIdentity:
        """Return the verified identity or raise AuthenticationError."""
        ...


class GoogleTokenVerifier(LoggerMixin):
    """
    Verifies Google ID tokens locally with PyJWT.

    Checks the RS256 signature against Google's JWKS (fetched with a
    timeout and cached), the audience (our OAuth client id), the issuer
    and expiry. Every failure, including an unreachable key endpoint,
    surfaces as AuthenticationError.
    """

    def __init__(
        self,
        client_id: Optional[str] = None,
        timeout_seconds: Optional[int] = None,
        jwks_client: Optional[jwt.PyJWKClient] = None,
    ):
        settings = get_settings()
        self.client_id = client_id if client_id is not None else settings.google_client_id
        timeout = timeout_seconds if timeout_seconds is not None else settings.google_timeout_seconds
        self.jwks_client = jwks_client or jwt.PyJWKClient(GOOGLE_CERTS_URL, cache_keys=True, timeout=timeout)
        self.logger.info(f"GoogleTokenVerifier initialized with clientId: {self._mask(self.client_id)}")

    def verify(self, token: str) -> ExternalIdentity:
        if not self.client_id:
            raise InternalError("Google sign-in is not configured", details="GOOGLE_CLIENT_ID is empty")

        try:
            signing_key = self.jwks_client.get_signing_key_from_jwt(token)
            claims = jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                audience=self.client_id,
                options={"require": ["exp", "iat", "iss", "sub"]},
            )
        except jwt.ExpiredSignatureError:
            self.logger.warning("Google ID token expired")
            raise AuthenticationError("Google ID token has expired")
        except jwt.PyJWKClientError as e:
            self.logger.error(f"Could not fetch Google signing keys: {e}")
            raise AuthenticationError("Could not verify Google ID token", details=str(e))
        except jwt.PyJWTError as e:
            self.logger.warning(f"Invalid Google ID token: {e}")
            raise AuthenticationError("Invalid Google ID token", details=str(e))

        if claims.get("iss") not in GOOGLE_ISSUERS:
            raise AuthenticationError("Invalid Google ID token", details=f"unexpected issuer {claims.get('iss')}")
        if not claims.get("email"):
            raise AuthenticationError("Google ID token has no email claim")
        if claims.get("email_verified") is False:
            raise AuthenticationError("Google account email is not verified")

        return ExternalIdentity(
            provider_id=str(claims["sub"]),
            email=claims["email"],
            display_name=claims.get("name"),
            avatar_url=claims.get("picture"),
        )

    @staticmethod
    def _mask(client_id: Optional[str]) -> str:
        if not client_id or len(client_id) < 16:
            return "***"
        return f"{client_id[:8]}...{client_id[-8:]}"


class IdentityExchangeService(LoggerMixin):
    """
    Exchanges external identity tokens for session credentials.

    Example:
        >>> service = IdentityExchangeService(db, GoogleTokenVerifier(), SessionTokenService())
        >>> response = service.exchange(google_id_token)
        >>> response.token
        'eyJhbGciOiJIUzI1NiIs...'
    """

    def __init__(
        self,
        database: DatabaseConnection,
        identity_provider: IdentityProvider,
        token_service: SessionTokenService,
    ):
        self.database = database
        self.identity_provider = identity_provider
        self.token_service = token_service

    def exchange(self, external_token: Optional[str]) -> AuthResponse:
        """
        Verify an external token, upsert the user and issue a session.

        Raises:
            ValidationError: Blank token
            AuthenticationError: Token rejected by the identity provider
            InternalError: Lost a race with a concurrent first sign-in
        """
        if external_token is None or not external_token.strip():
            raise ValidationError("googleIdToken must not be blank", field="googleIdToken")

        identity = self.identity_provider.verify(external_token.strip())
        self.logger.info(f"Identity verified: providerId={identity.provider_id} email={identity.email}")

        try:
            return self._sign_in(identity)
        except IntegrityError as e:
            # A concurrent first login inserted the same user; the client may simply retry
            self.logger.warning(f"Concurrent sign-in for providerId={identity.provider_id}: {e.orig}")
            raise InternalError(
                "Sign-in conflicted with a concurrent sign-in, please retry",
                details=f"providerId={identity.provider_id}"
            )

    def login_by_email(self, email: Optional[str]) -> LoginResponse:
        """
        Issue a session for an existing user by email alone.

        Development shortcut: no password or token is checked, and no
        user is ever created.

        Raises:
            ValidationError: Malformed email
            UserLookupError: No user with this email
        """
        normalized = require_email(email)

        with self.database.get_session() as session:
            user = session.scalar(select(User).where(User.email == normalized))
            if user is None:
                self.logger.warning(f"Email login for unknown user: {normalized}")
                raise UserLookupError(normalized)

            token = self.token_service.issue(user.id)
            self.logger.info(f"Email login for user {user.id}")
            return LoginResponse(token=token, user_id=user.id, email=user.email, display_name=user.display_name)

    def _sign_in(self, identity: ExternalIdentity) -> AuthResponse:
        with self.database.get_session() as session:
            user = self._upsert_user(session, identity)
            session.flush()
            token = self.token_service.issue(user.id)
            return AuthResponse(
                token=token,
                user_id=user.id,
                email=user.email,
                display_name=user.display_name,
                avatar_url=user.avatar_url,
            )

    def _upsert_user(self, session: Session, identity: ExternalIdentity) -> User:
        display_name = sanitize_text(identity.display_name) or identity.email.split("@")[0]

        user = session.scalar(
            select(User).where(User.google_id == identity.provider_id).with_for_update()
        )

        if user is None:
            by_email = session.scalar(select(User).where(User.email == identity.email).with_for_update())
            if by_email is not None and by_email.google_id is not None:
                raise AuthenticationError(
                    "This email is already linked to another Google account",
                    details=f"email={identity.email}"
                )
            if by_email is not None:
                # Pre-existing account (seeded/dev) signing in with Google for the first time
                self.logger.info(f"Linking user {by_email.id} to providerId={identity.provider_id}")
                by_email.google_id = identity.provider_id
                self._refresh(session, by_email, identity, display_name)
                return by_email

            user = User(
                google_id=identity.provider_id,
                email=identity.email,
                display_name=display_name,
                avatar_url=identity.avatar_url,
            )
            session.add(user)
            self.logger.info(f"Creating user for providerId={identity.provider_id} email={identity.email}")
            return user

        self._refresh(session, user, identity, display_name)
        return user

    def _refresh(self, session: Session, user: User, identity: ExternalIdentity, display_name: str) -> None:
        changed = False

        if user.display_name != display_name:
            user.display_name = display_name
            changed = True

        if user.email != identity.email:
            taken = session.scalar(select(User.id).where(User.email == identity.email, User.id != user.id))
            if taken is not None:
                raise AuthenticationError(
                    "This email is already linked to another account",
                    details=f"email={identity.email}"
                )
            user.email = identity.email
            changed = True

        # A missing picture never clears an existing avatar
        if identity.avatar_url and identity.avatar_url != user.avatar_url:
            user.avatar_url = identity.avatar_url
            changed = True

        if changed:
            self.logger.info(f"Updated profile of user {user.id}")
        else:
            self.logger.debug(f"No profile changes for user {user.id}")
