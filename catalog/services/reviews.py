"""
Reviews Service

Submission and moderation of book reviews.

Lifecycle:
1. A visitor submits a review (rate limited per IP at the router); it is
   stored unverified with the submitter's IP address
2. An operator verifies, corrects or logically deletes it
3. Only verified, non-deleted reviews are listed publicly and counted
   in rating statistics

Rating statistics are recomputed on read (catalog.services.ratings), so
nothing here needs to touch the Book row after a moderation change.
"""

import logging
import math
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from catalog.exceptions import NotFoundError, StorageFailureError
from catalog.models.review import Review
from catalog.schemas.review import ReviewCreate, ReviewModerate
from catalog.services.catalog import get_book, resolve_pagination
from catalog.services.ratings import visible_review_filter

logger = logging.getLogger(__name__)


@dataclass
class ReviewPage:
    items: list[Review]
    total: int
    page: int
    page_size: int
    total_pages: int


def _live_reviews():
    return select(Review).where(Review.deleted == False)  # noqa: E712


def _paginate(db: Session, stmt, page, page_size) -> ReviewPage:
    request = resolve_pagination(page, page_size)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = db.execute(count_stmt).scalar() or 0
    total_pages = math.ceil(total / request.page_size) if total > 0 else 0

    page_stmt = (
        stmt
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset(request.skip)
        .limit(request.page_size)
    )
    reviews = list(db.execute(page_stmt).scalars().all())

    return ReviewPage(
        items=reviews,
        total=total,
        page=request.page,
        page_size=request.page_size,
        total_pages=total_pages,
    )


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Database error on review {action}: {exc}")
        raise StorageFailureError(f"Could not {action} review") from exc


# =============================================================================
# Public Operations
# =============================================================================


def submit_review(db: Session, review_data: ReviewCreate, ip_address: str | None) -> Review:
    """
    Store a visitor review pending moderation.

    Raises:
        NotFoundError: The book does not exist or is deleted
    """
    get_book(db, review_data.book_id)

    review = Review(
        book_id=review_data.book_id,
        name=review_data.name,
        email=review_data.email,
        content=review_data.content,
        rating=review_data.rating,
        verified=False,
        ip_address=ip_address,
    )
    db.add(review)
    _commit(db, "create")
    db.refresh(review)

    logger.info(f"Review {review.id} submitted for book {review.book_id}, pending moderation")
    return review


def list_book_reviews(db: Session, book_id: int, page=None, page_size=None) -> ReviewPage:
    """
    Verified, non-deleted reviews of a live book, newest first.

    Raises:
        NotFoundError: The book does not exist or is deleted
    """
    get_book(db, book_id)
    stmt = select(Review).where(Review.book_id == book_id, *visible_review_filter())
    return _paginate(db, stmt, page, page_size)


# =============================================================================
# Moderation
# =============================================================================


def list_reviews(
    db: Session,
    page=None,
    page_size=None,
    verified: bool | None = None,
) -> ReviewPage:
    """All non-deleted reviews, optionally filtered by moderation state."""
    stmt = _live_reviews()
    if verified is not None:
        stmt = stmt.where(Review.verified == verified)
    return _paginate(db, stmt, page, page_size)


def count_reviews(db: Session) -> int:
    stmt = select(func.count()).select_from(Review).where(Review.deleted == False)  # noqa: E712
    return db.execute(stmt).scalar() or 0


def count_pending_reviews(db: Session) -> int:
    """Non-deleted reviews still waiting for verification."""
    stmt = (
        select(func.count())
        .select_from(Review)
        .where(Review.deleted == False, Review.verified == False)  # noqa: E712
    )
    return db.execute(stmt).scalar() or 0


def get_review(db: Session, review_id: int) -> Review:
    """
    Get a non-deleted review by ID.

    Raises:
        NotFoundError: Unknown or logically deleted review
    """
    review = db.execute(_live_reviews().where(Review.id == review_id)).scalar_one_or_none()
    if review is None:
        raise NotFoundError("Review", review_id)
    return review


def moderate_review(db: Session, review_id: int, review_data: ReviewModerate) -> Review:
    """
    Apply operator changes (verification, corrections) to a review.

    Only the provided fields are changed.
    """
    review = get_review(db, review_id)

    update_data = {
        key: value
        for key, value in review_data.model_dump(exclude_unset=True).items()
        if value is not None
    }
    for key, value in update_data.items():
        setattr(review, key, value)

    _commit(db, "update")
    db.refresh(review)

    if "verified" in update_data:
        state = "verified" if review.verified else "unverified"
        logger.info(f"Review {review_id} marked {state}")
    return review


def delete_review(db: Session, review_id: int) -> Review:
    """
    Logically delete a review.

    Raises:
        NotFoundError: Unknown or already deleted review
    """
    review = get_review(db, review_id)
    review.deleted = True
    _commit(db, "delete")
    db.refresh(review)
    logger.info(f"Review {review_id} deleted by moderation")
    return review
