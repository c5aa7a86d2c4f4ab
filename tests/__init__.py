"""
Test Suite for the Book Catalog API

Test Organization:
- conftest.py: Shared fixtures (test database, client, sample data)
- test_books.py: Listing, detail, admin and ranking endpoints
- test_search.py: Accent-insensitive and ISBN search
- test_featured.py: Featured set rotation
- test_ratings.py: Rating aggregation
- test_reviews.py: Submission and moderation
- test_normalizer.py: Text folding helpers

Running Tests:
    pytest
    pytest --cov=catalog --cov-report=html
    pytest tests/test_featured.py -v
"""
