#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample books and reviews for development.

USAGE:
    python scripts/seed_data.py            # add sample data
    python scripts/seed_data.py --clear    # wipe books/reviews first

This script:
1. Connects to the database using catalog settings
2. Optionally clears existing data
3. Creates sample books through the catalog service (so titles are folded)
4. Adds reviews, verifying most of them
5. Features a few books through the rotation service
"""

import argparse
import random
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy.orm import Session

from catalog.database import SessionLocal, create_tables
from catalog.models import Book, Review
from catalog.schemas import BookCreate
from catalog.services.catalog import create_book
from catalog.services.featured import set_featured

BOOKS = [
    {
        "title": "Cien años de soledad",
        "author": "Gabriel García Márquez",
        "isbn": "9780307474728",
        "synopsis": "La historia de la familia Buendía a lo largo de siete generaciones.",
    },
    {
        "title": "José y el mar",
        "author": "Ana Pérez",
        "isbn": "9780451524935",
        "synopsis": "Un pescador y su última travesía.",
    },
    {
        "title": "Rayuela",
        "author": "Julio Cortázar",
        "isbn": "9788437604572",
        "synopsis": "Una novela que puede leerse en más de un orden.",
    },
    {
        "title": "La casa de los espíritus",
        "author": "Isabel Allende",
        "isbn": "9781501117015",
        "synopsis": "Saga familiar entre lo político y lo sobrenatural.",
    },
    {
        "title": "Ficciones",
        "author": "Jorge Luis Borges",
        "isbn": "9780802130303",
        "synopsis": "Cuentos sobre laberintos, espejos y bibliotecas infinitas.",
    },
    {
        "title": "Pedro Páramo",
        "author": "Juan Rulfo",
        "isbn": "9780802133908",
        "synopsis": "Un hombre busca a su padre en un pueblo de fantasmas.",
    },
]

REVIEWERS = [
    ("Lucía", "lucia@example.com"),
    ("Martín", "martin@example.com"),
    ("Sofía", "sofia@example.com"),
    ("Andrés", "andres@example.com"),
]


def clear_data(db: Session) -> None:
    """Clear all existing data from the database."""
    print("Clearing existing data...")
    db.query(Review).delete()
    db.query(Book).delete()
    db.commit()
    print("Data cleared.")


def create_books(db: Session) -> list[Book]:
    print("Creating books...")
    books = [create_book(db, BookCreate(**data)) for data in BOOKS]
    print(f"Created {len(books)} books.")
    return books


def create_reviews(db: Session, books: list[Book]) -> None:
    print("Creating reviews...")
    rng = random.Random(42)
    count = 0
    for book in books:
        for name, email in REVIEWERS:
            db.add(
                Review(
                    book_id=book.id,
                    name=name,
                    email=email,
                    content=f"Opinión de {name} sobre {book.title}.",
                    rating=rng.randint(2, 5),
                    verified=rng.random() < 0.8,
                    ip_address="127.0.0.1",
                )
            )
            count += 1
    db.commit()
    print(f"Created {count} reviews.")


def feature_books(db: Session, books: list[Book]) -> None:
    print("Featuring books...")
    for book in books[:3]:
        set_featured(db, book.id, True)
    print("Featured 3 books.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the catalog database")
    parser.add_argument("--clear", action="store_true", help="Delete existing data first")
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        if args.clear:
            clear_data(db)
        books = create_books(db)
        create_reviews(db, books)
        feature_books(db, books)
        print("Seeding complete!")
    finally:
        db.close()


if __name__ == "__main__":
    main()
