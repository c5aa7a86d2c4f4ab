"""
Catalog Service

Listing, search and administration of books.

Read operations:
- list_books: every live book, oldest first, paginated
- search_books: ISBN / accent-insensitive title or author match, paginated
- list_featured: the featured set, most recently promoted first
- list_popular: books ranked by average verified rating
- list_new_books: most recently added books

Each page is enriched with rating statistics through a single
ratings.aggregate() call.

Write operations (admin):
- create_book: insert, or reactivate a logically deleted book with the
  same ISBN
- update_book: partial update
- delete_book: logical delete

Logically deleted books are invisible to every read here.
"""

import logging
import math
from dataclasses import dataclass, field

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.config import get_settings
from catalog.exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    StorageFailureError,
)
from catalog.models.book import Book
from catalog.schemas.book import BookCreate, BookUpdate
from catalog.services.featured import clear_featured
from catalog.services.normalizer import (
    clean_isbn,
    fold_text,
    normalize,
    query_pattern,
)
from catalog.services.ratings import (
    RatingSummary,
    aggregate,
    empty_summary,
    rating_distribution,
    rating_subquery,
    round_rating,
)

logger = logging.getLogger(__name__)
settings = get_settings()


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True)
class PageRequest:
    """Validated 1-indexed pagination parameters."""

    page: int
    page_size: int

    @property
    def skip(self) -> int:
        """Rows to skip: page 1 → 0, page 2 → page_size, ..."""
        return (self.page - 1) * self.page_size


@dataclass
class BookWithRating:
    book: Book
    rating: RatingSummary


@dataclass
class BookPage:
    items: list[BookWithRating]
    total: int
    page: int
    page_size: int
    total_pages: int


@dataclass
class BookDetail:
    book: Book
    rating: RatingSummary
    distribution: dict[int, int] = field(default_factory=dict)


# =============================================================================
# Pagination
# =============================================================================


def _positive_or_default(value, name: str, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgumentError(f"{name} must be an integer, got {value!r}")
    return value if value > 0 else default


def resolve_pagination(page=None, page_size=None) -> PageRequest:
    """
    Turn optional page/page_size input into a PageRequest.

    Missing or non-positive values fall back to the configured defaults.

    Raises:
        InvalidArgumentError: Non-integer input, or a page size above
            settings.max_page_size
    """
    resolved_page = _positive_or_default(page, "page", settings.default_page)
    resolved_size = _positive_or_default(page_size, "page_size", settings.default_page_size)
    if resolved_size > settings.max_page_size:
        raise InvalidArgumentError(
            f"page_size must be at most {settings.max_page_size}, got {resolved_size}"
        )
    return PageRequest(page=resolved_page, page_size=resolved_size)


def _positive_limit(limit, default: int) -> int:
    return _positive_or_default(limit, "limit", default)


# =============================================================================
# Helpers
# =============================================================================


def _live_books():
    return select(Book).where(Book.deleted == False)  # noqa: E712


def with_ratings(db: Session, books: list[Book]) -> list[BookWithRating]:
    """Attach rating summaries to books using one aggregate() call."""
    summaries = aggregate(db, [book.id for book in books])
    return [
        BookWithRating(book=book, rating=summaries.get(book.id) or empty_summary(book.id))
        for book in books
    ]


def _paginate(db: Session, stmt, request: PageRequest) -> BookPage:
    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = db.execute(count_stmt).scalar() or 0

    total_pages = math.ceil(total / request.page_size) if total > 0 else 0

    page_stmt = (
        stmt
        .order_by(Book.created_at.asc(), Book.id.asc())
        .offset(request.skip)
        .limit(request.page_size)
    )
    books = list(db.execute(page_stmt).scalars().all())

    return BookPage(
        items=with_ratings(db, books),
        total=total,
        page=request.page,
        page_size=request.page_size,
        total_pages=total_pages,
    )


def _commit_write(db: Session, action: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(f"Uniqueness conflict on book {action}: {exc.orig}")
        raise ConflictError("Book with this ISBN already exists") from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Database error on book {action}: {exc}")
        raise StorageFailureError(f"Could not {action} book") from exc


# =============================================================================
# Listing and Search
# =============================================================================


def list_books(db: Session, page=None, page_size=None) -> BookPage:
    """
    Paginated list of live books in creation order.

    Raises:
        InvalidArgumentError: Malformed pagination parameters
    """
    request = resolve_pagination(page, page_size)
    return _paginate(db, _live_books(), request)


def search_books(db: Session, query: str | None, page=None, page_size=None) -> BookPage:
    """
    Search live books by ISBN, title or author.

    A book matches when its ISBN equals the cleaned query, or when its
    title or author contains the query ignoring accents and case. A blank
    query returns the plain listing.

    Examples:
        search_books(db, "jose")   # finds "José y el mar"
        search_books(db, "José")   # same results
        search_books(db, "978-0451524935")
    """
    normalized = normalize(query)
    if not normalized:
        return list_books(db, page, page_size)

    request = resolve_pagination(page, page_size)
    pattern = query_pattern(query)

    stmt = _live_books().where(
        or_(
            Book.isbn == clean_isbn(query.strip()),
            Book.title.regexp_match(pattern),
            Book.author.regexp_match(pattern),
        )
    )
    return _paginate(db, stmt, request)


def list_featured(db: Session) -> list[BookWithRating]:
    """
    The featured set, most recently promoted first.

    An empty featured set is an empty list, not an error.
    """
    stmt = (
        _live_books()
        .where(Book.featured == True)  # noqa: E712
        .order_by(Book.featured_at.desc(), Book.id.desc())
    )
    books = list(db.execute(stmt).scalars().all())
    return with_ratings(db, books)


def list_popular(db: Session, limit=None) -> list[BookWithRating]:
    """
    Live books ranked by average verified rating.

    Books without reviews rank with an average of 0. Ties go to the newest
    book. Statistics come from the same grouped query used for ranking.
    """
    limit = _positive_limit(limit, settings.popular_limit)
    stats = rating_subquery()
    average = func.coalesce(stats.c.average_rating, 0)

    stmt = (
        select(Book, stats.c.average_rating, stats.c.total_reviews)
        .outerjoin(stats, stats.c.book_id == Book.id)
        .where(Book.deleted == False)  # noqa: E712
        .order_by(
            func.round(average, 1).desc(),
            Book.created_at.desc(),
            Book.id.desc(),
        )
        .limit(limit)
    )

    return [
        BookWithRating(
            book=book,
            rating=RatingSummary(
                book_id=book.id,
                average_rating=round_rating(avg_rating),
                total_reviews=total or 0,
            ),
        )
        for book, avg_rating, total in db.execute(stmt).all()
    ]


def list_new_books(db: Session, limit=None) -> list[BookWithRating]:
    """Most recently added live books."""
    limit = _positive_limit(limit, settings.new_books_limit)
    stmt = _live_books().order_by(Book.created_at.desc(), Book.id.desc()).limit(limit)
    books = list(db.execute(stmt).scalars().all())
    return with_ratings(db, books)


# =============================================================================
# Single Book
# =============================================================================


def get_book(db: Session, book_id: int) -> Book:
    """
    Get a live book by ID.

    Raises:
        NotFoundError: Unknown or logically deleted book
    """
    book = db.execute(_live_books().where(Book.id == book_id)).scalar_one_or_none()
    if book is None:
        raise NotFoundError("Book", book_id)
    return book


def get_book_detail(db: Session, book_id: int) -> BookDetail:
    """A live book with its rating summary and star distribution."""
    book = get_book(db, book_id)
    summary = aggregate(db, {book_id}).get(book_id) or empty_summary(book_id)
    return BookDetail(
        book=book,
        rating=summary,
        distribution=rating_distribution(db, book_id),
    )


# =============================================================================
# Administration
# =============================================================================


_NULLABLE_FIELDS = {"isbn", "synopsis", "cover_url"}


def _stored_values(data: dict) -> dict:
    """Fold title/author into their stored form."""
    for key in ("title", "author"):
        if data.get(key) is not None:
            data[key] = fold_text(data[key])
    return data


def create_book(db: Session, book_data: BookCreate) -> Book:
    """
    Create a book, or reactivate a logically deleted one.

    If a deleted book already carries the submitted ISBN, that record is
    overwritten with the new values and undeleted (it comes back out of
    the featured set). A live book with the ISBN is a conflict.

    Raises:
        ConflictError: ISBN belongs to a live book
        StorageFailureError: The write was rejected
    """
    values = _stored_values(book_data.model_dump())

    existing = None
    if values["isbn"]:
        existing = db.execute(
            select(Book).where(Book.isbn == values["isbn"])
        ).scalar_one_or_none()

    if existing is not None and not existing.deleted:
        raise ConflictError(f"Book with ISBN {values['isbn']} already exists")

    if existing is not None:
        for key, value in values.items():
            setattr(existing, key, value)
        existing.deleted = False
        clear_featured(existing)
        book = existing
        logger.info(f"Reactivated deleted book {book.id} (ISBN {book.isbn})")
    else:
        book = Book(**values)
        db.add(book)

    _commit_write(db, "create")
    db.refresh(book)
    return book


def update_book(db: Session, book_id: int, book_data: BookUpdate) -> Book:
    """
    Update only the provided fields of a live book.

    Raises:
        NotFoundError: Unknown or logically deleted book
        ConflictError: New ISBN already used by another record
    """
    book = get_book(db, book_id)
    update_data = {
        key: value
        for key, value in book_data.model_dump(exclude_unset=True).items()
        if value is not None or key in _NULLABLE_FIELDS
    }
    update_data = _stored_values(update_data)

    new_isbn = update_data.get("isbn")
    if new_isbn and new_isbn != book.isbn:
        clash = db.execute(
            select(Book.id).where(Book.isbn == new_isbn, Book.id != book_id)
        ).scalar_one_or_none()
        if clash is not None:
            raise ConflictError(f"Book with ISBN {new_isbn} already exists")

    for key, value in update_data.items():
        setattr(book, key, value)

    _commit_write(db, "update")
    db.refresh(book)
    return book


def delete_book(db: Session, book_id: int) -> Book:
    """
    Logically delete a live book.

    The row stays for audit and ISBN reactivation; it also leaves the
    featured set.

    Raises:
        NotFoundError: Unknown or already deleted book
    """
    book = get_book(db, book_id)
    book.deleted = True
    clear_featured(book)

    _commit_write(db, "delete")
    db.refresh(book)
    logger.info(f"Book {book_id} logically deleted")
    return book
