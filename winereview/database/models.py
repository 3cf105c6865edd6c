"""
Database Models - SQLAlchemy ORM models for persistent storage.

Ownership and referential rules live in the schema itself:
- Review.user_id, Review.wine_id, Comment.review_id and Comment.author_id
  are NOT NULL foreign keys declared ON DELETE CASCADE
- rating is constrained to 1..5 and comment text to non-empty
- User.google_id and User.email are unique

Relationships use passive_deletes=True so the ORM never tries to null out
or load children on delete; removal of dependents is the job of the
lifecycle manager and, underneath it, of the database constraints.
"""
import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import relationship, declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)


class User(TimestampMixin, Base):
    """An account, created on first successful identity exchange."""
    __tablename__ = "app_user"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    google_id = Column(String(255), unique=True, nullable=True)
    email = Column(String(180), unique=True, nullable=False)
    display_name = Column(String(120), nullable=False)
    avatar_url = Column(Text, nullable=True)

    reviews = relationship("Review", back_populates="user", passive_deletes=True)
    comments = relationship("Comment", back_populates="author", passive_deletes=True)

    @property
    def owner_id(self) -> uuid.UUID:
        # An account is owned by itself
        return self.id

    def __repr__(self) -> str:
        return f"<User {self.id} {self.email}>"


class Wine(TimestampMixin, Base):
    """Catalog entry. Independent lifecycle; its reviews die with it."""
    __tablename__ = "wine"
    __table_args__ = (
        CheckConstraint("year IS NULL OR (year >= 1900 AND year <= 2100)", name="ck_wine_year"),
        Index("idx_wine_name", "name"),
        Index("idx_wine_country", "country"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(160), nullable=False)
    winery = Column(String(160), nullable=True)
    country = Column(String(80), nullable=True)
    grape = Column(String(80), nullable=True)
    year = Column(Integer, nullable=True)
    image_url = Column(Text, nullable=True)

    reviews = relationship("Review", back_populates="wine", passive_deletes=True)

    def __repr__(self) -> str:
        return f"<Wine {self.id} {self.name!r}>"


class Review(TimestampMixin, Base):
    """A user's rating of a wine. Only the owning user may change it."""
    __tablename__ = "review"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating"),
        Index("idx_review_wine_created", "wine_id", "created_at"),
        Index("idx_review_user_created", "user_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    wine_id = Column(Uuid, ForeignKey("wine.id", ondelete="CASCADE"), nullable=False)
    rating = Column(Integer, nullable=False)
    notes = Column(Text, nullable=True)
    image_url = Column(Text, nullable=True)

    user = relationship("User", back_populates="reviews")
    wine = relationship("Wine", back_populates="reviews")
    comments = relationship("Comment", back_populates="review", passive_deletes=True)

    @property
    def owner_id(self) -> uuid.UUID:
        return self.user_id

    def __repr__(self) -> str:
        return f"<Review {self.id} rating={self.rating}>"


class Comment(TimestampMixin, Base):
    """Text attached to a review. Only its author may change or delete it."""
    __tablename__ = "comment"
    __table_args__ = (
        CheckConstraint("length(text) > 0", name="ck_comment_text"),
        Index("idx_comment_review_created", "review_id", "created_at"),
        Index("idx_comment_author", "author_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    review_id = Column(Uuid, ForeignKey("review.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(Uuid, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False)
    text = Column(Text, nullable=False)

    review = relationship("Review", back_populates="comments")
    author = relationship("User", back_populates="comments")

    @property
    def owner_id(self) -> uuid.UUID:
        return self.author_id

    def __repr__(self) -> str:
        return f"<Comment {self.id} review={self.review_id}>"
