"""create_catalog_tables

Revision ID: 3f2a9c1d7e44
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f2a9c1d7e44'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'books',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('title', sa.String(length=500), nullable=False, comment='Book title (case folded)'),
        sa.Column('author', sa.String(length=300), nullable=False, comment='Author name (case folded)'),
        sa.Column('isbn', sa.String(length=20), nullable=True, comment='International Standard Book Number'),
        sa.Column('synopsis', sa.Text(), nullable=True, comment='Book synopsis'),
        sa.Column('cover_url', sa.String(length=1000), nullable=True, comment='Cover image URL'),
        sa.Column('featured', sa.Boolean(), nullable=False, server_default=sa.false(),
                  comment='Member of the featured set'),
        sa.Column('featured_at', sa.DateTime(timezone=True), nullable=True,
                  comment='When the book was promoted to the featured set'),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false(),
                  comment='Logical delete flag'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_books_title'), 'books', ['title'], unique=False)
    op.create_index(op.f('ix_books_author'), 'books', ['author'], unique=False)
    op.create_index(op.f('ix_books_isbn'), 'books', ['isbn'], unique=True)
    op.create_index(op.f('ix_books_deleted'), 'books', ['deleted'], unique=False)
    op.create_index('ix_books_featured_featured_at', 'books', ['featured', 'featured_at'], unique=False)

    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('book_id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=254), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, comment='Review text content'),
        sa.Column('rating', sa.Integer(), nullable=False, comment='Rating from 1-5 stars'),
        sa.Column('verified', sa.Boolean(), nullable=False, server_default=sa.false(),
                  comment='Approved by a moderator'),
        sa.Column('deleted', sa.Boolean(), nullable=False, server_default=sa.false(),
                  comment='Logical delete flag'),
        sa.Column('ip_address', sa.String(length=45), nullable=True, comment='Submitter IP address'),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_review_rating_range'),
        sa.ForeignKeyConstraint(['book_id'], ['books.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_reviews_id'), 'reviews', ['id'], unique=False)
    op.create_index(op.f('ix_reviews_book_id'), 'reviews', ['book_id'], unique=False)
    op.create_index('ix_reviews_book_visible', 'reviews', ['book_id', 'verified', 'deleted'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_reviews_book_visible', table_name='reviews')
    op.drop_index(op.f('ix_reviews_book_id'), table_name='reviews')
    op.drop_index(op.f('ix_reviews_id'), table_name='reviews')
    op.drop_table('reviews')
    op.drop_index('ix_books_featured_featured_at', table_name='books')
    op.drop_index(op.f('ix_books_deleted'), table_name='books')
    op.drop_index(op.f('ix_books_isbn'), table_name='books')
    op.drop_index(op.f('ix_books_author'), table_name='books')
    op.drop_index(op.f('ix_books_title'), table_name='books')
    op.drop_table('books')
