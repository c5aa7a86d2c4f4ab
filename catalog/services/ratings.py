"""
Ratings Service

Computes per-book rating statistics from the reviews table.

Statistics are derived on every read and never stored on the Book row:
a review being verified, corrected or deleted is reflected by the very
next request, with no cache to invalidate.

Only verified, non-deleted reviews count. A book with no such reviews
is absent from aggregate() results; callers substitute EMPTY-style zero
summaries (aggregate_one does this for them).

Listing endpoints call aggregate() once per page with all the page's
book ids, so a page of N books costs one grouped query, not N.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from catalog.models.review import Review

logger = logging.getLogger(__name__)

_ONE_DECIMAL = Decimal("0.1")


@dataclass(frozen=True)
class RatingSummary:
    """Average rating (one decimal) and review count for a book."""

    book_id: int
    average_rating: float = 0.0
    total_reviews: int = 0


def empty_summary(book_id: int) -> RatingSummary:
    return RatingSummary(book_id=book_id)


def round_rating(value) -> float:
    """
    Round an average to one decimal place, halves away from zero.

    Goes through str() so binary float noise (e.g. 4.25 stored as
    4.2499999...) does not flip the result.
    """
    if value is None:
        return 0.0
    return float(Decimal(str(value)).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))


def visible_review_filter():
    """WHERE clauses selecting reviews that count towards statistics."""
    return (
        Review.verified == True,  # noqa: E712
        Review.deleted == False,  # noqa: E712
    )


def rating_subquery():
    """
    Grouped (book_id, average_rating, total_reviews) subquery.

    Used by ranking queries that need to join statistics onto books.
    """
    return (
        select(
            Review.book_id.label("book_id"),
            func.avg(Review.rating).label("average_rating"),
            func.count(Review.id).label("total_reviews"),
        )
        .where(*visible_review_filter())
        .group_by(Review.book_id)
        .subquery("rating_stats")
    )


def aggregate(db: Session, book_ids: Iterable[int]) -> dict[int, RatingSummary]:
    """
    Compute rating summaries for a batch of books in one grouped query.

    Args:
        db: Database session
        book_ids: IDs of the books to summarize

    Returns:
        Mapping of book id to RatingSummary. Books without verified,
        non-deleted reviews are not in the mapping.
    """
    ids = set(book_ids)
    if not ids:
        return {}

    stmt = (
        select(
            Review.book_id,
            func.avg(Review.rating),
            func.count(Review.id),
        )
        .where(Review.book_id.in_(ids), *visible_review_filter())
        .group_by(Review.book_id)
    )

    summaries = {
        book_id: RatingSummary(
            book_id=book_id,
            average_rating=round_rating(avg_rating),
            total_reviews=count,
        )
        for book_id, avg_rating, count in db.execute(stmt).all()
    }
    logger.debug(f"Aggregated ratings for {len(summaries)}/{len(ids)} books")
    return summaries


def aggregate_one(db: Session, book_id: int) -> RatingSummary:
    """
    Rating summary for a single book.

    Unknown ids and books without reviews both yield the zero summary.
    """
    return aggregate(db, {book_id}).get(book_id) or empty_summary(book_id)


def rating_distribution(db: Session, book_id: int) -> dict[int, int]:
    """Count verified, non-deleted reviews per star value (1-5)."""
    distribution = {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    stmt = (
        select(Review.rating, func.count(Review.id))
        .where(Review.book_id == book_id, *visible_review_filter())
        .group_by(Review.rating)
    )
    for rating, count in db.execute(stmt).all():
        distribution[rating] = count
    return distribution
