"""
pytest Fixtures for Catalog API Tests

Shared fixtures used across all test files.

For database tests, we use:
- session scope for the engine (SQLite in memory, created once)
- function scope for sessions (each test runs in a transaction that is
  rolled back afterwards)
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# Environment variables must be set BEFORE importing the app
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ADMIN_API_KEY"] = "test-admin-key-for-unit-tests-0123456789abcdef"
os.environ["API_KEY_ENABLED"] = "true"

from collections.abc import Callable, Generator
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.database import Base, get_db
from catalog.main import app
from catalog.models import Book, Review

ADMIN_KEY = os.environ["ADMIN_API_KEY"]

# Fixed origin for timestamps so ordering never depends on clock speed
BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the single connection alive for the whole session;
    without it the in-memory database would vanish between connections.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Fresh database session for each test.

    The session is bound to a connection whose transaction is rolled back
    after the test, so tests don't affect each other.
    """
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )

    connection = engine.connect()
    transaction = connection.begin()
    session = TestSessionLocal(bind=connection)

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Test client using the test database.

    The get_db dependency is overridden to hand out the test session.
    """

    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Session cleanup handled by db_session fixture

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers() -> dict:
    return {"X-API-Key": ADMIN_KEY}


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================
@pytest.fixture
def make_book(db_session: Session) -> Callable[..., Book]:
    """
    Factory creating books with increasing created_at timestamps.

    Titles and authors are given in their stored (folded) form.
    """
    counter = {"n": 0}

    def _make_book(title: str | None = None, **fields) -> Book:
        counter["n"] += 1
        n = counter["n"]
        book = Book(
            title=title or f"test book {n}",
            author=fields.pop("author", "test author"),
            created_at=fields.pop("created_at", BASE_TIME + timedelta(minutes=n)),
            **fields,
        )
        db_session.add(book)
        db_session.commit()
        db_session.refresh(book)
        return book

    return _make_book


@pytest.fixture
def make_review(db_session: Session) -> Callable[..., Review]:
    """Factory creating reviews; verified by default."""

    def _make_review(book: Book, rating: int, **fields) -> Review:
        review = Review(
            book_id=book.id,
            name=fields.pop("name", "lucía"),
            email=fields.pop("email", "lucia@example.com"),
            content=fields.pop("content", "A thoughtful review of this book."),
            rating=rating,
            verified=fields.pop("verified", True),
            **fields,
        )
        db_session.add(review)
        db_session.commit()
        db_session.refresh(review)
        return review

    return _make_review


@pytest.fixture
def sample_book(make_book) -> Book:
    """A single book with an ISBN."""
    return make_book(
        "josé y el mar",
        author="ana pérez",
        isbn="9780451524935",
        synopsis="Un pescador y su última travesía.",
    )


@pytest.fixture
def multiple_books(make_book) -> list[Book]:
    """25 books for pagination testing (more than two default pages)."""
    return [make_book(f"test book {i + 1:02d}") for i in range(25)]
