"""
Pytest configuration and shared fixtures.

Environment variables are set before anything from winereview is
imported, because settings are read once and cached.

Fixtures:
    - db: Fresh in-memory SQLite database with all tables
    - tokens: Session token service with a fixed test secret
    - identity_provider: Fake Google verifier (token string -> identity)
    - storage: Fake file store recording every put
    - client: TestClient whose dependencies point at the fixtures above
    - make_user / make_wine / make_review / make_comment: Row factories
    - auth_headers: Bearer header for a user id
    - row_count: Number of rows in a table
"""
import os
from typing import Dict, List, Optional

os.environ.setdefault("JWT_SECRET", "test-secret-key-for-session-tokens-0001")
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENABLE_EMAIL_LOGIN", "true")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id.apps.googleusercontent.com")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select

from winereview.api import dependencies
from winereview.api.main import create_app
from winereview.core.config import get_settings
from winereview.core.exceptions import AuthenticationError, StorageError
from winereview.core.security import SessionTokenService
from winereview.database import DatabaseConnection, init_tables
from winereview.database.models import Comment, Review, User, Wine
from winereview.services.files import StorageLocation
from winereview.services.identity import ExternalIdentity


class FakeIdentityProvider:
    """Accepts only the tokens registered in `identities`."""

    def __init__(self):
        self.identities: Dict[str, ExternalIdentity] = {}
        self.calls: List[str] = []

    def register(self, token: str, identity: ExternalIdentity) -> None:
        self.identities[token] = identity

    def verify(self, token: str) -> ExternalIdentity:
        self.calls.append(token)
        if token not in self.identities:
            raise AuthenticationError("Invalid Google ID token")
        return self.identities[token]


class FakeStorage:
    """Records writes; set `fail` to make every put raise StorageError."""

    def __init__(self):
        self.puts: List[tuple] = []
        self.fail = False

    def put(self, key: str, data: bytes, content_type: str) -> StorageLocation:
        if self.fail:
            raise StorageError("Failed to upload file to storage", details="bucket unavailable")
        self.puts.append((key, data, content_type))
        return StorageLocation(key=key, url=f"https://test-bucket.s3.amazonaws.com/{key}")


@pytest.fixture
def db():
    database = DatabaseConnection("sqlite://")
    init_tables(database)
    yield database
    database.close()


@pytest.fixture
def tokens():
    return SessionTokenService(secret="test-secret-key-for-session-tokens-0001", expiration_seconds=3600)


@pytest.fixture
def identity_provider():
    return FakeIdentityProvider()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def app(db, tokens, identity_provider, storage):
    get_settings.cache_clear()
    application = create_app(get_settings())
    application.dependency_overrides[dependencies.get_database] = lambda: db
    application.dependency_overrides[dependencies.get_token_service] = lambda: tokens
    application.dependency_overrides[dependencies.get_identity_provider] = lambda: identity_provider
    application.dependency_overrides[dependencies.get_file_storage] = lambda: storage
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    # No context manager: the lifespan (schema creation on the global
    # database) is not needed, the db fixture already created the tables
    return TestClient(app)


@pytest.fixture
def auth_headers(tokens):
    def _headers(user_id) -> Dict[str, str]:
        return {"Authorization": f"Bearer {tokens.issue(user_id)}"}
    return _headers


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(email: Optional[str] = None, display_name: str = "Taster", google_id: Optional[str] = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"taster{counter['n']}@example.com",
            display_name=display_name,
            google_id=google_id,
        )
        with db.get_session() as session:
            session.add(user)
        return user
    return _make


@pytest.fixture
def make_wine(db):
    def _make(name: str = "Barolo", **fields) -> Wine:
        wine = Wine(name=name, **fields)
        with db.get_session() as session:
            session.add(wine)
        return wine
    return _make


@pytest.fixture
def make_review(db):
    def _make(user: User, wine: Wine, rating: int = 4, notes: Optional[str] = None) -> Review:
        review = Review(user_id=user.id, wine_id=wine.id, rating=rating, notes=notes)
        with db.get_session() as session:
            session.add(review)
        return review
    return _make


@pytest.fixture
def make_comment(db):
    def _make(review: Review, author: User, text: str = "Nice pick") -> Comment:
        comment = Comment(review_id=review.id, author_id=author.id, text=text)
        with db.get_session() as session:
            session.add(comment)
        return comment
    return _make


@pytest.fixture
def row_count(db):
    def _count(model) -> int:
        with db.get_session() as session:
            return session.scalar(select(func.count()).select_from(model))
    return _count
