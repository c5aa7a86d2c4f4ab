"""
Services Package

Business logic kept separate from HTTP handling (routers), reusable and
testable in isolation. Services raise catalog.exceptions errors, never
HTTP errors.

Current services:
- normalizer.py: Accent/case folding and fuzzy search patterns
- ratings.py: Rating aggregation over verified reviews
- featured.py: Bounded featured set with FIFO rotation
- catalog.py: Book listing, search and administration
- reviews.py: Review submission and moderation
- rate_limiter.py: Rate limiting with slowapi
- security.py: Admin API key verification
"""
