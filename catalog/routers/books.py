"""
Books Router

Endpoints:
- GET /books/ - Paginated catalog
- GET /books/search - Accent-insensitive search by title, author or ISBN
- GET /books/featured - Featured set, most recently promoted first
- GET /books/popular - Books ranked by average rating
- GET /books/new - Most recently added books
- GET /books/{book_id} - Book detail with rating distribution
- GET /books/{book_id}/rating - Rating statistics
- POST /books/ - Create (or reactivate) a book (admin)
- PATCH /books/{book_id} - Update a book (admin)
- PATCH /books/{book_id}/featured - Add to / remove from featured set (admin)
- DELETE /books/{book_id} - Logically delete a book (admin)

The routes only translate HTTP to service calls; catalog errors are
mapped to status codes by the handlers registered in catalog.main.
"""

from fastapi import APIRouter, Query, Request, status

from catalog.config import get_settings
from catalog.dependencies import DbSession, Pagination, RequireAdmin
from catalog.models import Book
from catalog.schemas import (
    BookCreate,
    BookDetailResponse,
    BookListResponse,
    BookRatingStats,
    BookResponse,
    BookUpdate,
    FeaturedUpdate,
)
from catalog.services import catalog as catalog_service
from catalog.services.catalog import BookPage, BookWithRating
from catalog.services.featured import set_featured
from catalog.services.rate_limiter import limiter
from catalog.services.ratings import aggregate_one, rating_distribution

settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


# =============================================================================
# Response Helpers
# =============================================================================
def book_response(entry: BookWithRating) -> BookResponse:
    """Build a BookResponse from a book and its rating summary."""
    return BookResponse.model_validate(entry.book).model_copy(
        update={
            "average_rating": entry.rating.average_rating,
            "total_reviews": entry.rating.total_reviews,
        }
    )


def page_response(page: BookPage) -> BookListResponse:
    return BookListResponse(
        items=[book_response(entry) for entry in page.items],
        total=page.total,
        page=page.page,
        per_page=page.page_size,
        pages=page.total_pages,
    )


def _rated(db: DbSession, book: Book) -> BookResponse:
    return book_response(BookWithRating(book=book, rating=aggregate_one(db, book.id)))


# =============================================================================
# Listing Endpoints
# =============================================================================
@router.get(
    "/",
    response_model=BookListResponse,
    summary="List all books",
    description="Get a paginated list of all books in creation order.",
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
) -> BookListResponse:
    page = catalog_service.list_books(db, pagination.page, pagination.per_page)
    return page_response(page)


@router.get(
    "/search",
    response_model=BookListResponse,
    summary="Search books",
    description="Search by ISBN, or by title/author ignoring accents and case.",
)
@limiter.limit(settings.rate_limit_search)
def search_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    q: str | None = Query(
        default=None,
        max_length=100,
        description="Search text (blank returns the full listing)",
        examples=["jose", "garcía márquez", "9780451524935"],
    ),
) -> BookListResponse:
    """
    Examples:
        GET /api/v1/books/search?q=jose
        GET /api/v1/books/search?q=978-0451524935&per_page=5
    """
    page = catalog_service.search_books(db, q, pagination.page, pagination.per_page)
    return page_response(page)


@router.get(
    "/featured",
    response_model=list[BookResponse],
    summary="Featured books",
    description="Featured books, most recently featured first. Empty list when none.",
)
@limiter.limit(settings.rate_limit_default)
def list_featured(request: Request, db: DbSession) -> list[BookResponse]:
    return [book_response(entry) for entry in catalog_service.list_featured(db)]


@router.get(
    "/popular",
    response_model=list[BookResponse],
    summary="Popular books",
    description="Books ranked by average verified rating, newest first on ties.",
)
@limiter.limit(settings.rate_limit_default)
def list_popular(
    request: Request,
    db: DbSession,
    limit: int | None = Query(default=None, description="Number of books"),
) -> list[BookResponse]:
    return [book_response(entry) for entry in catalog_service.list_popular(db, limit)]


@router.get(
    "/new",
    response_model=list[BookResponse],
    summary="Newest books",
    description="Most recently added books.",
)
@limiter.limit(settings.rate_limit_default)
def list_new_books(
    request: Request,
    db: DbSession,
    limit: int | None = Query(default=None, description="Number of books"),
) -> list[BookResponse]:
    return [book_response(entry) for entry in catalog_service.list_new_books(db, limit)]


# =============================================================================
# Single Book Endpoints
# =============================================================================
@router.get(
    "/{book_id}",
    response_model=BookDetailResponse,
    summary="Get a book by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_book(request: Request, book_id: int, db: DbSession) -> BookDetailResponse:
    detail = catalog_service.get_book_detail(db, book_id)
    return BookDetailResponse.model_validate(detail.book).model_copy(
        update={
            "average_rating": detail.rating.average_rating,
            "total_reviews": detail.rating.total_reviews,
            "rating_distribution": detail.distribution,
        }
    )


@router.get(
    "/{book_id}/rating",
    response_model=BookRatingStats,
    summary="Get book rating statistics",
    description="Average and count of verified reviews, with star distribution.",
)
@limiter.limit(settings.rate_limit_default)
def get_book_rating_stats(request: Request, book_id: int, db: DbSession) -> BookRatingStats:
    catalog_service.get_book(db, book_id)
    summary = aggregate_one(db, book_id)
    return BookRatingStats(
        book_id=book_id,
        average_rating=summary.average_rating,
        total_reviews=summary.total_reviews,
        rating_distribution=rating_distribution(db, book_id),
    )


# =============================================================================
# Admin Endpoints
# =============================================================================
@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a book",
    description=(
        "Create a book. A logically deleted book with the same ISBN is "
        "reactivated instead. Requires API key."
    ),
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    _: RequireAdmin,
) -> BookResponse:
    book = catalog_service.create_book(db, book_data)
    return _rated(db, book)


@router.patch(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book",
    description="Update only the provided fields. Requires API key.",
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    book_id: int,
    book_data: BookUpdate,
    db: DbSession,
    _: RequireAdmin,
) -> BookResponse:
    book = catalog_service.update_book(db, book_id, book_data)
    return _rated(db, book)


@router.patch(
    "/{book_id}/featured",
    response_model=BookResponse,
    summary="Feature or unfeature a book",
    description=(
        "Add a book to the featured set (evicting the oldest featured book "
        "when full) or remove it. Requires API key."
    ),
)
@limiter.limit(settings.rate_limit_write)
def toggle_featured(
    request: Request,
    book_id: int,
    payload: FeaturedUpdate,
    db: DbSession,
    _: RequireAdmin,
) -> BookResponse:
    book = set_featured(db, book_id, payload.featured)
    return _rated(db, book)


@router.delete(
    "/{book_id}",
    response_model=BookResponse,
    summary="Delete a book",
    description="Logically delete a book; it can be reactivated by ISBN. Requires API key.",
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    book_id: int,
    db: DbSession,
    _: RequireAdmin,
) -> BookResponse:
    book = catalog_service.delete_book(db, book_id)
    return _rated(db, book)
