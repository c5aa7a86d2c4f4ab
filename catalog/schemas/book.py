"""
Book Pydantic Schemas

Handles:
- ISBN validation and cleaning
- Title/author trimming
- Rating-enriched responses
- Pagination for list responses
"""

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from catalog.services.normalizer import clean_isbn

_ISBN10_RE = re.compile(r"^\d{9}[\dX]$")


def validate_isbn_value(v: str | None) -> str | None:
    """
    Validate ISBN format.

    Accepts ISBN-10 (9 digits + digit or X) and ISBN-13 (13 digits).
    Hyphens and spaces are stripped for storage.
    """
    if v is None:
        return v

    cleaned = clean_isbn(v)

    if len(cleaned) == 10:
        if not _ISBN10_RE.match(cleaned):
            raise ValueError(
                "Invalid ISBN-10 format. Must be 10 characters: "
                "9 digits followed by a digit or 'X'"
            )
    elif len(cleaned) == 13:
        if not cleaned.isdigit():
            raise ValueError("Invalid ISBN-13 format. Must be exactly 13 digits")
    else:
        raise ValueError("ISBN must be either 10 or 13 characters (excluding hyphens)")

    return cleaned


def _strip_required(v: str, field: str) -> str:
    if not v.strip():
        raise ValueError(f"{field} cannot be empty or whitespace")
    return v.strip()


class BookBase(BaseModel):
    """
    Base schema with shared book fields.

    Title and author are trimmed here; case folding happens when the
    service stores them.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Book title",
        examples=["José y el mar", "Cien años de soledad"],
    )

    author: str = Field(
        ...,
        min_length=1,
        max_length=150,
        description="Author name",
        examples=["Gabriel García Márquez"],
    )

    isbn: str | None = Field(
        default=None,
        max_length=20,
        description="ISBN-10 or ISBN-13",
        examples=["978-0451524935", "0-06-112008-1"],
    )

    synopsis: str | None = Field(
        default=None,
        max_length=4000,
        description="Book synopsis",
    )

    cover_url: str | None = Field(
        default=None,
        max_length=1000,
        description="Cover image URL",
    )

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        return validate_isbn_value(v)

    @field_validator("title")
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        return _strip_required(v, "Title")

    @field_validator("author")
    @classmethod
    def author_must_not_be_empty(cls, v: str) -> str:
        return _strip_required(v, "Author")


class BookCreate(BookBase):
    """
    Schema for creating a new book.

    If the ISBN belongs to a logically deleted book, that record is
    reactivated with these values instead of inserting a new one.

    Example request body:
    {
        "title": "José y el mar",
        "author": "Ana Pérez",
        "isbn": "978-0451524935"
    }
    """

    pass


class BookUpdate(BaseModel):
    """
    Schema for updating an existing book.

    All fields are optional for PATCH-style updates. Featured state is not
    editable here; use the featured toggle endpoint.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    author: str | None = Field(default=None, min_length=1, max_length=150)
    isbn: str | None = Field(default=None, max_length=20)
    synopsis: str | None = Field(default=None, max_length=4000)
    cover_url: str | None = Field(default=None, max_length=1000)

    @field_validator("isbn")
    @classmethod
    def validate_isbn(cls, v: str | None) -> str | None:
        return validate_isbn_value(v)

    @field_validator("title", "author")
    @classmethod
    def must_not_be_blank(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            raise ValueError("Value cannot be empty or whitespace")
        return v.strip() if v else v


class FeaturedUpdate(BaseModel):
    """Body of the featured toggle endpoint."""

    featured: bool = Field(..., description="Whether the book should be featured")


class BookResponse(BaseModel):
    """
    Schema for book responses.

    average_rating and total_reviews come from verified, non-deleted
    reviews at read time (0 / 0 when there are none).
    """

    id: int = Field(..., description="Unique identifier")
    title: str
    author: str
    isbn: str | None = None
    synopsis: str | None = None
    cover_url: str | None = None
    featured: bool = False
    featured_at: datetime | None = None
    created_at: datetime = Field(..., description="When the book was created")
    updated_at: datetime = Field(..., description="When the book was last updated")

    average_rating: float = Field(
        default=0.0,
        ge=0,
        le=5,
        description="Average verified rating, one decimal (0 when no reviews)",
    )
    total_reviews: int = Field(
        default=0,
        ge=0,
        description="Number of verified reviews",
    )

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "josé y el mar",
                "author": "ana pérez",
                "isbn": "9780451524935",
                "synopsis": "Un pescador y su última travesía.",
                "cover_url": "https://covers.example.com/1.jpg",
                "featured": True,
                "featured_at": "2024-01-15T10:30:00Z",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
                "average_rating": 4.3,
                "total_reviews": 12,
            }
        },
    )


class BookDetailResponse(BookResponse):
    """Single book view with the star distribution of its verified reviews."""

    rating_distribution: dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0},
        description="Count of verified reviews per rating (1-5)",
    )


class BookListResponse(BaseModel):
    """
    Schema for paginated book list responses.

    - total: Total number of books matching the query
    - page: Current page number
    - per_page: Number of items per page
    - pages: Total number of pages
    """

    items: list[BookResponse] = Field(..., description="Books for this page")
    total: int = Field(..., ge=0, description="Total number of books")
    page: int = Field(..., ge=1, description="Current page number")
    per_page: int = Field(..., ge=1, description="Number of items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [],
                "total": 100,
                "page": 1,
                "per_page": 10,
                "pages": 10,
            }
        },
    )
