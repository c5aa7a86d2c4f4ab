"""
Reviews Router

Endpoints:
- GET /books/{book_id}/reviews - Verified reviews of a book (public)
- POST /reviews/ - Submit a review (public, rate limited per IP)
- GET /reviews/ - All reviews, optionally by moderation state (admin)
- GET /reviews/count - Number of reviews (admin)
- GET /reviews/pending - Number of reviews awaiting verification (admin)
- GET /reviews/{review_id} - Review with moderation fields (admin)
- PATCH /reviews/{review_id} - Verify or correct a review (admin)
- DELETE /reviews/{review_id} - Logically delete a review (admin)
"""

from fastapi import APIRouter, Query, Request, status

from catalog.config import get_settings
from catalog.dependencies import ClientIP, DbSession, Pagination, RequireAdmin
from catalog.schemas.review import (
    ReviewCountResponse,
    ReviewCreate,
    ReviewListResponse,
    ReviewModerate,
    ReviewPublicListResponse,
    ReviewPublicResponse,
    ReviewResponse,
)
from catalog.services import reviews as review_service
from catalog.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    tags=["Reviews"],
    responses={
        404: {"description": "Review or book not found"},
    },
)


# =============================================================================
# Public Endpoints
# =============================================================================
@router.get(
    "/books/{book_id}/reviews",
    response_model=ReviewPublicListResponse,
    summary="List reviews for a book",
    description="Verified reviews of a book, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def list_book_reviews(
    request: Request,
    book_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewPublicListResponse:
    page = review_service.list_book_reviews(db, book_id, pagination.page, pagination.per_page)
    return ReviewPublicListResponse(
        items=[ReviewPublicResponse.model_validate(r) for r in page.items],
        total=page.total,
        page=page.page,
        per_page=page.page_size,
        pages=page.total_pages,
    )


@router.post(
    "/reviews/",
    response_model=ReviewPublicResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit a review",
    description="Submit a review. It becomes public once a moderator verifies it.",
)
@limiter.limit(settings.rate_limit_review_submit)
def submit_review(
    request: Request,
    review_data: ReviewCreate,
    db: DbSession,
    ip_address: ClientIP,
) -> ReviewPublicResponse:
    review = review_service.submit_review(db, review_data, ip_address)
    return ReviewPublicResponse.model_validate(review)


# =============================================================================
# Moderation Endpoints
# (fixed paths come before /reviews/{review_id} for route matching)
# =============================================================================
@router.get(
    "/reviews/",
    response_model=ReviewListResponse,
    summary="List reviews for moderation",
)
@limiter.limit(settings.rate_limit_default)
def list_reviews(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    _: RequireAdmin,
    verified: bool | None = Query(default=None, description="Filter by moderation state"),
) -> ReviewListResponse:
    page = review_service.list_reviews(
        db, pagination.page, pagination.per_page, verified=verified
    )
    return ReviewListResponse(
        items=[ReviewResponse.model_validate(r) for r in page.items],
        total=page.total,
        page=page.page,
        per_page=page.page_size,
        pages=page.total_pages,
    )


@router.get(
    "/reviews/count",
    response_model=ReviewCountResponse,
    summary="Count reviews",
)
@limiter.limit(settings.rate_limit_default)
def count_reviews(request: Request, db: DbSession, _: RequireAdmin) -> ReviewCountResponse:
    return ReviewCountResponse(count=review_service.count_reviews(db))


@router.get(
    "/reviews/pending",
    response_model=ReviewCountResponse,
    summary="Count reviews awaiting verification",
)
@limiter.limit(settings.rate_limit_default)
def count_pending_reviews(
    request: Request,
    db: DbSession,
    _: RequireAdmin,
) -> ReviewCountResponse:
    return ReviewCountResponse(count=review_service.count_pending_reviews(db))


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review by ID",
)
@limiter.limit(settings.rate_limit_default)
def get_review(
    request: Request,
    review_id: int,
    db: DbSession,
    _: RequireAdmin,
) -> ReviewResponse:
    return ReviewResponse.model_validate(review_service.get_review(db, review_id))


@router.patch(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Moderate a review",
    description="Verify, hide or correct a review.",
)
@limiter.limit(settings.rate_limit_write)
def moderate_review(
    request: Request,
    review_id: int,
    review_data: ReviewModerate,
    db: DbSession,
    _: RequireAdmin,
) -> ReviewResponse:
    review = review_service.moderate_review(db, review_id, review_data)
    return ReviewResponse.model_validate(review)


@router.delete(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Delete a review",
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    _: RequireAdmin,
) -> ReviewResponse:
    return ReviewResponse.model_validate(review_service.delete_review(db, review_id))
