"""
Pydantic Schemas Package

Request/response validation, kept separate from the SQLAlchemy models so
the API can evolve independently of the database schema (and so review
IP addresses never leak into public responses).

Schema Naming Convention:
- XxxCreate: Fields required when creating a new record
- XxxUpdate / XxxModerate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
"""

from catalog.schemas.book import (
    BookBase,
    BookCreate,
    BookDetailResponse,
    BookListResponse,
    BookResponse,
    BookUpdate,
    FeaturedUpdate,
)
from catalog.schemas.review import (
    BookRatingStats,
    ReviewCountResponse,
    ReviewCreate,
    ReviewListResponse,
    ReviewModerate,
    ReviewPublicListResponse,
    ReviewPublicResponse,
    ReviewResponse,
)

__all__ = [
    # Book schemas
    "BookBase",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookDetailResponse",
    "BookListResponse",
    "FeaturedUpdate",
    # Review schemas
    "ReviewCreate",
    "ReviewModerate",
    "ReviewPublicResponse",
    "ReviewResponse",
    "ReviewPublicListResponse",
    "ReviewListResponse",
    "ReviewCountResponse",
    "BookRatingStats",
]
