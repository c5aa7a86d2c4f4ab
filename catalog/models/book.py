"""
Book Model

The central model of the catalog.

Books are never physically removed: `deleted` is a logical-delete flag,
and a later submission with the same ISBN reactivates the record.

Featured state lives on the book itself:
- featured: whether the book is in the featured set
- featured_at: when it was promoted (None whenever featured is False)

Rating statistics are NOT stored here. They are recomputed from reviews
on every read (see catalog.services.ratings).
"""

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from catalog.database import Base


def utcnow() -> datetime:
    return datetime.now(UTC)


class Book(Base):
    """
    Book model representing a catalog entry.

    Table: books

    Fields:
    - title, author: Stored trimmed and case folded (see normalizer.fold_text)
    - isbn: ISBN-10 or ISBN-13 without hyphens (unique when present)
    - synopsis: Book summary
    - cover_url: Cover image reference
    - featured / featured_at: Featured set membership
    - deleted: Logical delete flag

    Example:
        book = Book(
            title="josé y el mar",
            author="ana pérez",
            isbn="9780451524935",
        )
    """

    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(500),
        index=True,
        nullable=False,
        comment="Book title (case folded)"
    )

    author: Mapped[str] = mapped_column(
        String(300),
        index=True,
        nullable=False,
        comment="Author name (case folded)"
    )

    isbn: Mapped[str | None] = mapped_column(
        String(20),
        unique=True,
        index=True,
        nullable=True,
        comment="International Standard Book Number"
    )

    synopsis: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        comment="Book synopsis"
    )

    cover_url: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
        comment="Cover image URL"
    )

    # -------------------------------------------------------------------------
    # Featured Set
    # -------------------------------------------------------------------------
    featured: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        comment="Member of the featured set"
    )

    # Oldest featured_at is the next eviction candidate
    featured_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="When the book was promoted to the featured set"
    )

    # -------------------------------------------------------------------------
    # Logical Delete
    # -------------------------------------------------------------------------
    deleted: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
        index=True,
        comment="Logical delete flag"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        onupdate=utcnow,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_books_featured_featured_at", "featured", "featured_at"),
    )

    def __repr__(self) -> str:
        return (
            f"Book(id={self.id}, title='{self.title}', isbn='{self.isbn}', "
            f"featured={self.featured})"
        )
