"""
Featured Rotation Service

Maintains the bounded "featured books" set.

Each book is either NOT_FEATURED or FEATURED; it only moves between the
two through set_featured(). The set never holds more than
`featured_capacity` books (default 8). When a promotion arrives while the
set is full, the book featured longest ago (smallest featured_at) is
demoted to make room, first in first out.

Rotation Writes
===============
A full-set promotion touches two rows: demote the oldest, promote the new
one. Both writes go into one database transaction, with the demotion
flushed first. If the commit fails the transaction is rolled back and
the ids involved are logged so an operator can reconcile by hand.

Concurrency
===========
"Count featured books, pick the oldest, rotate" is a read-then-write
sequence. Two requests interleaving could both evict the same book and
overfill the set, so the whole sequence runs under a process-wide lock.
That serializes writers within one service instance only; several
instances sharing a database need a database-level lock instead.
"""

import logging
import threading
from datetime import UTC, datetime

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.config import get_settings
from catalog.exceptions import NotFoundError, StorageFailureError
from catalog.models.book import Book

logger = logging.getLogger(__name__)
settings = get_settings()

_rotation_lock = threading.Lock()


def _featured_filter():
    return (
        Book.featured == True,  # noqa: E712
        Book.deleted == False,  # noqa: E712
    )


def clear_featured(book: Book) -> None:
    """Move a book to NOT_FEATURED (does not commit)."""
    book.featured = False
    book.featured_at = None


def _promote(book: Book, promoted_at: datetime) -> None:
    book.featured = True
    book.featured_at = promoted_at


def count_featured(db: Session) -> int:
    stmt = select(func.count()).select_from(Book).where(*_featured_filter())
    return db.execute(stmt).scalar() or 0


def oldest_featured(db: Session, limit: int = 1) -> list[Book]:
    """Featured books ordered by promotion time, oldest first."""
    stmt = (
        select(Book)
        .where(*_featured_filter())
        .order_by(Book.featured_at.asc(), Book.id.asc())
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all())


def _load_live_book(db: Session, book_id: int) -> Book:
    stmt = select(Book).where(Book.id == book_id, Book.deleted == False)  # noqa: E712
    book = db.execute(stmt).scalar_one_or_none()
    if book is None:
        raise NotFoundError("Book", book_id)
    return book


def _commit(db: Session, book_id: int, evicted_ids: list[int]) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(
            f"Featured rotation failed for book {book_id} "
            f"(evicting {evicted_ids}); manual reconciliation may be needed: {exc}"
        )
        raise StorageFailureError("Could not update the featured set") from exc


def set_featured(
    db: Session,
    book_id: int,
    want_featured: bool,
    *,
    capacity: int | None = None,
    now: datetime | None = None,
) -> Book:
    """
    Add a book to, or remove it from, the featured set.

    Idempotent: asking for the state a book is already in changes nothing
    (featured_at is kept).

    Args:
        db: Database session
        book_id: Book to toggle
        want_featured: Target state
        capacity: Featured set bound (defaults to settings.featured_capacity)
        now: Promotion timestamp (defaults to the current UTC time)

    Returns:
        The book in its resulting state

    Raises:
        NotFoundError: Unknown or logically deleted book
        StorageFailureError: The rotation could not be committed
    """
    capacity = capacity or settings.featured_capacity

    with _rotation_lock:
        book = _load_live_book(db, book_id)

        if not want_featured:
            if not book.featured:
                return book
            clear_featured(book)
            _commit(db, book_id, [])
            db.refresh(book)
            logger.info(f"Book {book_id} removed from featured set")
            return book

        if book.featured:
            return book

        evicted_ids: list[int] = []
        featured_count = count_featured(db)
        if featured_count >= capacity:
            # Normally one book; more if capacity was lowered since
            evicted = oldest_featured(db, limit=featured_count - capacity + 1)
            evicted_ids = [old.id for old in evicted]
            if book_id in evicted_ids:
                return book
            for old in evicted:
                clear_featured(old)

        try:
            # Demotions reach the database before the promotion
            db.flush()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.error(f"Could not demote books {evicted_ids}: {exc}")
            raise StorageFailureError("Could not update the featured set") from exc

        _promote(book, now or datetime.now(UTC))
        _commit(db, book_id, evicted_ids)
        db.refresh(book)

        if evicted_ids:
            logger.info(
                f"Book {book_id} featured; evicted {evicted_ids} (capacity {capacity})"
            )
        else:
            logger.info(f"Book {book_id} featured ({featured_count + 1}/{capacity})")
        return book
