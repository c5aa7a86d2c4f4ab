"""
Review Model

Represents a visitor's review of a book.

Business Rules:
- Rating must be 1-5
- New reviews are unverified; only verified, non-deleted reviews are
  public and count towards rating statistics
- book_id is a plain back-reference: deleting a book never cascades here
- ip_address is captured for abuse control and never exposed publicly
"""

from datetime import UTC, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


class Review(Base):
    """
    Review model for book reviews.

    Attributes:
        id: Primary key
        book_id: Reviewed book
        name, email: Reviewer identity as submitted
        content: Review text
        rating: 1-5 star rating
        verified: Moderation flag (approved by an operator)
        deleted: Logical delete flag
        ip_address: Submitter address
        created_at, updated_at: Timestamps
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)

    book_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("books.id"),
        nullable=False,
        index=True,
    )

    # Reviewer
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(254), nullable=False)

    # Review content
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Review text content",
    )
    rating: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Rating from 1-5 stars",
    )

    # Moderation fields
    verified: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Approved by a moderator",
    )
    deleted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Logical delete flag",
    )
    ip_address: Mapped[str | None] = mapped_column(
        String(45),
        nullable=True,
        comment="Submitter IP address",
    )

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_review_rating_range"),
        # Covers the grouped rating aggregation
        Index("ix_reviews_book_visible", "book_id", "verified", "deleted"),
    )

    def __repr__(self) -> str:
        return (
            f"<Review(id={self.id}, book_id={self.book_id}, rating={self.rating}, "
            f"verified={self.verified})>"
        )
