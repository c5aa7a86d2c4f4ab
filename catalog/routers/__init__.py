"""
API Routers Package

Router Structure:
- books.py: /api/v1/books/* endpoints
- reviews.py: /api/v1/reviews/* and /api/v1/books/{id}/reviews endpoints

Each router is imported and registered in main.py.
"""

from catalog.routers.books import router as books_router
from catalog.routers.reviews import router as reviews_router

__all__ = [
    "books_router",
    "reviews_router",
]
