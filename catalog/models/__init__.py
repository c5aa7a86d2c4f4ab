"""
SQLAlchemy Models Package

Model Relationships:
- Review -> Book: Many-to-One back-reference (looked up, never cascaded)

Import all models here to:
1. Make them available as: from catalog.models import Book, Review
2. Ensure Alembic discovers them for migrations
"""

from catalog.models.book import Book
from catalog.models.review import Review

__all__ = [
    "Book",
    "Review",
]
