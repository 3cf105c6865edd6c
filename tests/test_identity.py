"""Tests for session tokens, Google token verification and the identity exchange."""
import time
import uuid
from types import SimpleNamespace

import jwt
import pytest
from cryptography.hazmat.primitives.asymmetric import rsa
from sqlalchemy import select

from winereview.core.exceptions import (
    AuthenticationError,
    InternalError,
    UnauthenticatedError,
    UserLookupError,
    ValidationError,
)
from winereview.core.security import SessionTokenService
from winereview.database.models import User
from winereview.services.identity import ExternalIdentity, GoogleTokenVerifier, IdentityExchangeService

CLIENT_ID = "test-client-id.apps.googleusercontent.com"


class TestSessionTokens:
    def test_issue_and_decode(self, tokens):
        user_id = uuid.uuid4()
        assert tokens.decode(tokens.issue(user_id)) == user_id

    def test_expired_token_is_rejected(self):
        tokens = SessionTokenService(secret="another-secret-key-for-session-tokens", expiration_seconds=-1)
        with pytest.raises(UnauthenticatedError, match="expired"):
            tokens.decode(tokens.issue(uuid.uuid4()))

    def test_token_signed_with_other_secret_is_rejected(self, tokens):
        other = SessionTokenService(secret="forged-secret-key-for-session-tokens", expiration_seconds=60)
        forged = other.issue(uuid.uuid4())
        with pytest.raises(UnauthenticatedError):
            tokens.decode(forged)

    def test_garbage_is_rejected(self, tokens):
        with pytest.raises(UnauthenticatedError):
            tokens.decode("not-a-jwt")

    def test_subject_must_be_a_user_id(self, tokens):
        claims = {"sub": "alice", "exp": int(time.time()) + 60}
        token = jwt.encode(claims, "test-secret-key-for-session-tokens-0001", algorithm="HS256")
        with pytest.raises(UnauthenticatedError):
            tokens.decode(token)


@pytest.fixture(scope="module")
def google_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def verifier(google_key):
    jwks = SimpleNamespace(get_signing_key_from_jwt=lambda token: SimpleNamespace(key=google_key.public_key()))
    return GoogleTokenVerifier(client_id=CLIENT_ID, timeout_seconds=1, jwks_client=jwks)


def google_token(key, **overrides):
    now = int(time.time())
    claims = {
        "iss": "https://accounts.google.com",
        "aud": CLIENT_ID,
        "sub": "google-123",
        "email": "ana@example.com",
        "email_verified": True,
        "name": "Ana Vinho",
        "picture": "https://lh3.googleusercontent.com/ana.png",
        "iat": now,
        "exp": now + 600,
    }
    claims.update(overrides)
    return jwt.encode(claims, key, algorithm="RS256")


class TestGoogleTokenVerifier:
    def test_valid_token(self, verifier, google_key):
        identity = verifier.verify(google_token(google_key))

        assert identity == ExternalIdentity(
            provider_id="google-123",
            email="ana@example.com",
            display_name="Ana Vinho",
            avatar_url="https://lh3.googleusercontent.com/ana.png",
        )

    def test_expired_token(self, verifier, google_key):
        token = google_token(google_key, iat=int(time.time()) - 7200, exp=int(time.time()) - 3600)
        with pytest.raises(AuthenticationError, match="expired"):
            verifier.verify(token)

    def test_wrong_audience(self, verifier, google_key):
        with pytest.raises(AuthenticationError):
            verifier.verify(google_token(google_key, aud="someone-else"))

    def test_wrong_issuer(self, verifier, google_key):
        with pytest.raises(AuthenticationError):
            verifier.verify(google_token(google_key, iss="https://evil.example"))

    def test_signed_by_other_key(self, verifier):
        other = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        with pytest.raises(AuthenticationError):
            verifier.verify(google_token(other))

    def test_unverified_email(self, verifier, google_key):
        with pytest.raises(AuthenticationError, match="not verified"):
            verifier.verify(google_token(google_key, email_verified=False))

    def test_unreachable_key_endpoint(self, google_key):
        def fail(token):
            raise jwt.PyJWKClientError("Fail to fetch data from the url")

        verifier = GoogleTokenVerifier(
            client_id=CLIENT_ID, timeout_seconds=1, jwks_client=SimpleNamespace(get_signing_key_from_jwt=fail)
        )
        with pytest.raises(AuthenticationError):
            verifier.verify(google_token(google_key))

    def test_missing_client_id_is_a_server_error(self, google_key):
        verifier = GoogleTokenVerifier(client_id="", timeout_seconds=1, jwks_client=SimpleNamespace())
        with pytest.raises(InternalError):
            verifier.verify(google_token(google_key))


@pytest.fixture
def exchange(db, identity_provider, tokens):
    return IdentityExchangeService(db, identity_provider, tokens)


ANA = ExternalIdentity(provider_id="google-123", email="ana@example.com", display_name="Ana", avatar_url="a.png")


class TestIdentityExchange:
    def test_first_sign_in_creates_user(self, exchange, identity_provider, tokens, row_count):
        identity_provider.register("tok", ANA)

        response = exchange.exchange("tok")

        assert row_count(User) == 1
        assert tokens.decode(response.token) == response.user_id
        assert response.email == "ana@example.com"
        assert response.display_name == "Ana"
        assert response.avatar_url == "a.png"

    def test_repeat_sign_in_updates_profile_without_duplicates(self, db, exchange, identity_provider, row_count):
        identity_provider.register("tok1", ANA)
        identity_provider.register("tok2", ExternalIdentity(
            provider_id="google-123", email="ana@vinho.pt", display_name="Ana V", avatar_url=None,
        ))

        first = exchange.exchange("tok1")
        second = exchange.exchange("tok2")

        assert first.user_id == second.user_id
        assert row_count(User) == 1
        with db.get_session() as session:
            user = session.get(User, first.user_id)
            assert user.email == "ana@vinho.pt"
            assert user.display_name == "Ana V"
            assert user.avatar_url == "a.png"

    def test_missing_name_falls_back_to_email_local_part(self, exchange, identity_provider):
        identity_provider.register("tok", ExternalIdentity(provider_id="g-9", email="bruno@example.com"))
        assert exchange.exchange("tok").display_name == "bruno"

    def test_rejected_token_touches_nothing(self, exchange, row_count):
        with pytest.raises(AuthenticationError):
            exchange.exchange("forged")
        assert row_count(User) == 0

    @pytest.mark.parametrize("token", [None, "", "   "])
    def test_blank_token(self, exchange, identity_provider, token):
        with pytest.raises(ValidationError):
            exchange.exchange(token)
        assert identity_provider.calls == []

    def test_existing_email_account_is_linked(self, db, exchange, identity_provider, make_user, row_count):
        seeded = make_user(email="ana@example.com", display_name="Dev")
        identity_provider.register("tok", ANA)

        response = exchange.exchange("tok")

        assert response.user_id == seeded.id
        assert row_count(User) == 1
        with db.get_session() as session:
            assert session.get(User, seeded.id).google_id == "google-123"

    def test_email_owned_by_other_google_account_is_rejected(self, exchange, identity_provider, make_user):
        make_user(email="ana@example.com", google_id="google-999")
        identity_provider.register("tok", ANA)

        with pytest.raises(AuthenticationError):
            exchange.exchange("tok")


class TestEmailLogin:
    def test_known_user(self, exchange, make_user, tokens):
        user = make_user(email="dev@winereviewer.local", display_name="Dev Sommelier")

        response = exchange.login_by_email("  DEV@winereviewer.local ")

        assert response.user_id == user.id
        assert tokens.decode(response.token) == user.id

    def test_unknown_user_is_a_server_error(self, db, exchange):
        with pytest.raises(UserLookupError) as excinfo:
            exchange.login_by_email("nobody@example.com")
        assert excinfo.value.status_code == 500

        with db.get_session() as session:
            assert session.scalar(select(User)) is None

    def test_malformed_email(self, exchange):
        with pytest.raises(ValidationError):
            exchange.login_by_email("not-an-email")
