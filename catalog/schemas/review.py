"""
Review Pydantic Schemas

Schemas:
- ReviewCreate: Public review submission
- ReviewModerate: Operator corrections and verification
- ReviewPublicResponse: Review as shown to visitors (no email, no IP)
- ReviewResponse: Full review data for moderators
- ReviewListResponse / ReviewPublicListResponse: Paginated lists
- BookRatingStats: Aggregated rating statistics

Business Rules:
- Rating must be 1-5 (validated at schema level)
- Submissions start unverified
"""
# ruff: noqa: I001
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class ReviewCreate(BaseModel):
    """
    Schema for submitting a review.

    Example request body:
    {
        "book_id": 42,
        "name": "Lucía",
        "email": "lucia@example.com",
        "content": "Una historia preciosa sobre el mar.",
        "rating": 5
    }
    """

    book_id: int = Field(..., ge=1, description="ID of the reviewed book")

    name: str = Field(
        ...,
        min_length=2,
        max_length=50,
        description="Reviewer name",
    )

    email: EmailStr = Field(..., description="Reviewer email")

    content: str = Field(
        ...,
        min_length=10,
        max_length=1000,
        description="Review text",
    )

    rating: int = Field(
        ...,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    @field_validator("name", "content", mode="before")
    @classmethod
    def strip_text(cls, v):
        """Trim surrounding whitespace before length checks."""
        return v.strip() if isinstance(v, str) else v

    @field_validator("email", mode="before")
    @classmethod
    def lower_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class ReviewModerate(BaseModel):
    """
    Schema for moderating a review.

    All fields are optional for PATCH-style updates.
    """

    verified: bool | None = Field(default=None, description="Approve or hide")
    rating: int | None = Field(default=None, ge=1, le=5)
    content: str | None = Field(default=None, min_length=10, max_length=1000)
    name: str | None = Field(default=None, min_length=2, max_length=50)


class ReviewPublicResponse(BaseModel):
    """Review as shown on a book page."""

    id: int
    book_id: int
    name: str
    content: str
    rating: int
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewResponse(ReviewPublicResponse):
    """Full review record for moderators."""

    email: str
    verified: bool
    ip_address: str | None = None
    updated_at: datetime


class ReviewPublicListResponse(BaseModel):
    """Paginated verified reviews of one book."""

    items: list[ReviewPublicResponse]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)
    pages: int = Field(..., ge=0)


class ReviewListResponse(BaseModel):
    """Paginated reviews for moderators."""

    items: list[ReviewResponse]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    per_page: int = Field(..., ge=1)
    pages: int = Field(..., ge=0)


class ReviewCountResponse(BaseModel):
    count: int = Field(..., ge=0)


# =============================================================================
# Aggregation Schemas
# =============================================================================


class BookRatingStats(BaseModel):
    """
    Aggregated rating statistics for a book.

    Only verified, non-deleted reviews are counted.
    """

    book_id: int = Field(..., description="Book ID")
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Average rating, one decimal (0 means no reviews)"
    )
    total_reviews: int = Field(..., ge=0, description="Total number of reviews")
    rating_distribution: dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0},
        description="Count of each rating (1-5)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "book_id": 42,
                "average_rating": 4.2,
                "total_reviews": 125,
                "rating_distribution": {"1": 5, "2": 10, "3": 20, "4": 40, "5": 50},
            }
        },
    )
