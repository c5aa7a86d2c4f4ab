"""
Tests for Books API Endpoints

This module tests listing, detail and admin operations on /api/v1/books.

TEST NAMING CONVENTION:
- test_<action>_<scenario>
- Examples: test_create_book_success, test_get_book_not_found
"""

import logging
from datetime import UTC, datetime, timedelta

import pytest
from fastapi import status

from catalog.config import get_settings

settings = get_settings()

BASE_TIME = datetime(2024, 1, 1, tzinfo=UTC)


class TestListBooks:
    """Tests for GET /api/v1/books/ endpoint."""

    def test_list_books_empty(self, client):
        """Test listing books when database is empty."""
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0
        assert data["page"] == 1
        assert data["pages"] == 0

    def test_list_books_with_data(self, client, sample_book):
        """Test listing books returns them with pagination metadata."""
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        item = data["items"][0]
        assert item["title"] == "josé y el mar"
        assert item["average_rating"] == 0.0
        assert item["total_reviews"] == 0

    def test_list_books_default_page_size(self, client, multiple_books):
        """Test the listing falls back to the default page size."""
        response = client.get("/api/v1/books/")

        data = response.json()
        assert len(data["items"]) == 10
        assert data["per_page"] == 10
        assert data["total"] == 25
        assert data["pages"] == 3

    def test_list_books_second_page(self, client, multiple_books):
        """Page 2 of 10 starts right after the first ten, oldest first."""
        response = client.get("/api/v1/books/?page=2&per_page=10")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [item["title"] for item in data["items"]] == [
            f"test book {i:02d}" for i in range(11, 21)
        ]
        assert data["page"] == 2
        assert data["pages"] == 3

    def test_list_books_last_partial_page(self, client, multiple_books):
        """Test the last page holds only the remaining books."""
        response = client.get("/api/v1/books/?page=3&per_page=10")

        assert len(response.json()["items"]) == 5

    def test_list_books_page_past_end(self, client, multiple_books):
        """Test a page beyond the last one is empty, not an error."""
        response = client.get("/api/v1/books/?page=9&per_page=10")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 25

    @pytest.mark.parametrize("query", ["page=0", "page=-3", "per_page=0", "per_page=-1"])
    def test_list_books_non_positive_uses_defaults(self, client, multiple_books, query):
        """Test zero or negative paging values fall back to defaults."""
        response = client.get(f"/api/v1/books/?{query}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["page"] == 1
        assert data["per_page"] == 10

    def test_list_books_page_size_over_max(self, client):
        """Test a page size above the maximum is rejected."""
        response = client.get("/api/v1/books/?per_page=101")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_list_books_non_integer_page(self, client):
        """Test a non-numeric page is rejected."""
        response = client.get("/api/v1/books/?page=two")

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_list_books_includes_ratings(self, client, sample_book, make_review):
        """Test listed books carry their rating summary."""
        for rating in (5, 4, 3):
            make_review(sample_book, rating)
        make_review(sample_book, 1, verified=False)

        item = client.get("/api/v1/books/").json()["items"][0]

        assert item["average_rating"] == 4.0
        assert item["total_reviews"] == 3


class TestGetBook:
    """Tests for GET /api/v1/books/{book_id} endpoint."""

    def test_get_book_success(self, client, sample_book, make_review):
        """Test getting a book by ID."""
        make_review(sample_book, 5)
        make_review(sample_book, 4)

        response = client.get(f"/api/v1/books/{sample_book.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == sample_book.id
        assert data["isbn"] == "9780451524935"
        assert data["average_rating"] == 4.5
        assert data["total_reviews"] == 2
        assert data["rating_distribution"] == {"1": 0, "2": 0, "3": 0, "4": 1, "5": 1}

    def test_get_book_not_found(self, client):
        """Test getting a non-existent book returns 404."""
        response = client.get("/api/v1/books/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert "not found" in response.json()["detail"].lower()


class TestCreateBook:
    """Tests for POST /api/v1/books/ endpoint."""

    def test_create_book_minimal(self, client, admin_headers):
        """Test creating a book with only the required fields."""
        book_data = {"title": "Rayuela", "author": "Julio Cortázar"}

        response = client.post("/api/v1/books/", json=book_data, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["id"] is not None
        assert data["title"] == "rayuela"
        assert data["author"] == "julio cortázar"
        assert data["featured"] is False
        assert data["total_reviews"] == 0

    def test_create_book_cleans_isbn(self, client, admin_headers):
        """Test the stored ISBN has hyphens and spaces removed."""
        book_data = {
            "title": "  Cien Años de Soledad ",
            "author": "Gabriel García Márquez",
            "isbn": "978-0307474728",
            "synopsis": "Siete generaciones de la familia Buendía.",
        }

        response = client.post("/api/v1/books/", json=book_data, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["title"] == "cien años de soledad"
        assert data["isbn"] == "9780307474728"

    def test_create_book_duplicate_isbn(self, client, sample_book, admin_headers):
        """Test creating a book with an existing ISBN fails."""
        book_data = {"title": "Other", "author": "Someone", "isbn": "9780451524935"}

        response = client.post("/api/v1/books/", json=book_data, headers=admin_headers)

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_create_book_reactivates_deleted_isbn(self, client, sample_book, admin_headers):
        """Test reusing the ISBN of a deleted book brings it back."""
        book_id = sample_book.id
        client.delete(f"/api/v1/books/{book_id}", headers=admin_headers)

        book_data = {"title": "José y el Mar (2a ed.)", "author": "Ana Pérez", "isbn": "9780451524935"}
        response = client.post("/api/v1/books/", json=book_data, headers=admin_headers)

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["id"] == book_id
        assert data["title"] == "josé y el mar (2a ed.)"
        assert data["featured"] is False
        assert client.get(f"/api/v1/books/{book_id}").status_code == status.HTTP_200_OK

    @pytest.mark.parametrize(
        "book_data",
        [
            {"title": "   ", "author": "Someone"},
            {"title": "Valid", "author": ""},
            {"title": "Valid", "author": "Someone", "isbn": "12345"},
            {"title": "Valid", "author": "Someone", "isbn": "97804515249AB"},
            {"author": "Someone"},
        ],
    )
    def test_create_book_validation(self, client, admin_headers, book_data):
        """Test invalid book payloads are rejected."""
        response = client.post("/api/v1/books/", json=book_data, headers=admin_headers)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_book_requires_api_key(self, client):
        """Test creating a book without an API key fails."""
        response = client.post("/api/v1/books/", json={"title": "T", "author": "A"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert "X-API-Key" in response.json()["detail"]

    def test_create_book_wrong_api_key(self, client):
        """Test creating a book with the wrong API key fails."""
        response = client.post(
            "/api/v1/books/",
            json={"title": "T", "author": "A"},
            headers={"X-API-Key": "not-the-admin-key"},
        )

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["detail"] == "Invalid API key."

    def test_admin_header_name_from_settings(self, client):
        """Test admin routes read the key from the configured header name."""
        operation = client.get("/openapi.json").json()["paths"]["/api/v1/books/"]["post"]

        headers = [p["name"] for p in operation["parameters"] if p["in"] == "header"]
        assert headers == [settings.api_key_header]

    def test_rejected_key_is_not_logged(self, client, caplog):
        """Test a rejected key is logged without any of its characters."""
        caplog.set_level(logging.WARNING, logger="catalog.services.security")

        client.post(
            "/api/v1/books/",
            json={"title": "T", "author": "A"},
            headers={settings.api_key_header: "guessed-key-0123"},
        )

        assert "Rejected an invalid admin API key" in caplog.text
        assert "gues" not in caplog.text


class TestUpdateBook:
    """Tests for PATCH /api/v1/books/{book_id} endpoint."""

    def test_update_book_partial(self, client, sample_book, admin_headers):
        """Test a partial update changes only the given fields."""
        response = client.patch(
            f"/api/v1/books/{sample_book.id}",
            json={"synopsis": "Nueva sinopsis."},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["synopsis"] == "Nueva sinopsis."
        assert data["title"] == "josé y el mar"

    def test_update_book_folds_title(self, client, sample_book, admin_headers):
        """Test an updated title is stored folded."""
        response = client.patch(
            f"/api/v1/books/{sample_book.id}",
            json={"title": "  El Viejo y el Mar "},
            headers=admin_headers,
        )

        assert response.json()["title"] == "el viejo y el mar"

    def test_update_book_null_title_is_ignored(self, client, sample_book, admin_headers):
        """Test a null title leaves the stored title alone."""
        response = client.patch(
            f"/api/v1/books/{sample_book.id}",
            json={"title": None, "cover_url": None},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["title"] == "josé y el mar"

    def test_update_book_isbn_conflict(self, client, sample_book, make_book, admin_headers):
        """Test updating to another book's ISBN fails."""
        other = make_book("otro libro", isbn="9780307474728")

        response = client.patch(
            f"/api/v1/books/{other.id}",
            json={"isbn": "978-0451524935"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_409_CONFLICT

    def test_update_book_not_found(self, client, admin_headers):
        """Test updating a non-existent book returns 404."""
        response = client.patch(
            "/api/v1/books/99999", json={"title": "X"}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_update_book_requires_api_key(self, client, sample_book):
        """Test updating a book without an API key fails."""
        response = client.patch(f"/api/v1/books/{sample_book.id}", json={"title": "X"})

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestDeleteBook:
    """Tests for DELETE /api/v1/books/{book_id} endpoint."""

    def test_delete_book_success(self, client, sample_book, admin_headers):
        """Test deleting a book hides it from reads."""
        book_id = sample_book.id

        response = client.delete(f"/api/v1/books/{book_id}", headers=admin_headers)

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["id"] == book_id

        assert client.get(f"/api/v1/books/{book_id}").status_code == status.HTTP_404_NOT_FOUND
        assert client.get("/api/v1/books/").json()["total"] == 0

    def test_delete_book_twice(self, client, sample_book, admin_headers):
        """Test deleting an already deleted book returns 404."""
        book_id = sample_book.id
        client.delete(f"/api/v1/books/{book_id}", headers=admin_headers)

        response = client.delete(f"/api/v1/books/{book_id}", headers=admin_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_delete_book_requires_api_key(self, client, sample_book):
        """Test deleting a book without an API key fails."""
        response = client.delete(f"/api/v1/books/{sample_book.id}")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED


class TestPopularBooks:
    """Tests for GET /api/v1/books/popular endpoint."""

    def test_popular_ranked_by_average(self, client, make_book, make_review):
        """Test popular books are ordered by average rating."""
        low = make_book("low")
        high = make_book("high")
        unrated = make_book("unrated")
        make_review(low, 2)
        make_review(high, 5)
        make_review(high, 4)

        response = client.get("/api/v1/books/popular")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [item["title"] for item in data] == ["high", "low", "unrated"]
        assert data[0]["average_rating"] == 4.5
        assert data[0]["total_reviews"] == 2
        assert data[2]["average_rating"] == 0.0
        assert unrated.id == data[2]["id"]

    def test_popular_ties_go_to_newest(self, client, make_book, make_review):
        """Test books with equal averages are ordered newest first."""
        older = make_book("older", created_at=BASE_TIME)
        newer = make_book("newer", created_at=BASE_TIME + timedelta(days=1))
        make_review(older, 4)
        make_review(newer, 4)

        titles = [item["title"] for item in client.get("/api/v1/books/popular").json()]

        assert titles == ["newer", "older"]

    def test_popular_ties_on_rounded_average(self, client, make_book, make_review):
        """Test ties are decided on the rounded average."""
        # 4.333... and 4.25 both display as 4.3
        newer = make_book("four point two five", created_at=BASE_TIME + timedelta(days=1))
        older = make_book("four point three", created_at=BASE_TIME)
        for rating in (4, 4, 5):
            make_review(older, rating)
        for rating in (4, 4, 4, 5):
            make_review(newer, rating)

        data = client.get("/api/v1/books/popular").json()

        assert [item["title"] for item in data] == ["four point two five", "four point three"]
        assert [item["average_rating"] for item in data] == [4.3, 4.3]

    def test_popular_ignores_unverified_reviews(self, client, make_book, make_review):
        """Test unverified reviews do not affect the ranking."""
        honest = make_book("honest")
        stuffed = make_book("stuffed")
        make_review(honest, 3)
        for _ in range(3):
            make_review(stuffed, 5, verified=False)

        titles = [item["title"] for item in client.get("/api/v1/books/popular").json()]

        assert titles == ["honest", "stuffed"]

    def test_popular_limit(self, client, multiple_books):
        """Test the popular list honours the limit."""
        response = client.get("/api/v1/books/popular?limit=3")

        assert len(response.json()) == 3

    def test_popular_excludes_deleted(self, client, sample_book, make_review, admin_headers):
        """Test deleted books never appear as popular."""
        make_review(sample_book, 5)
        client.delete(f"/api/v1/books/{sample_book.id}", headers=admin_headers)

        assert client.get("/api/v1/books/popular").json() == []


class TestNewBooks:
    """Tests for GET /api/v1/books/new endpoint."""

    def test_new_books_newest_first(self, client, multiple_books):
        """Test new books are ordered by creation time."""
        response = client.get("/api/v1/books/new?limit=3")

        assert response.status_code == status.HTTP_200_OK
        assert [item["title"] for item in response.json()] == [
            "test book 25",
            "test book 24",
            "test book 23",
        ]

    def test_new_books_default_limit(self, client, multiple_books):
        """Test the new books list uses the default limit."""
        assert len(client.get("/api/v1/books/new").json()) == 10


class TestHealth:
    def test_health(self, client):
        """Test the health endpoint reports the service status."""
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "healthy"
        assert data["featured_capacity"] == 8
