from __future__ import annotations
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from bookstore.errors import DuplicateError, NotFoundError
from bookstore.models import Book
from bookstore.schemas import BookIn
from bookstore.services.authors import get_author
from bookstore.services.categories import get_category
from bookstore.services.paging import apply_paging


def book_to_dict(b: Book) -> dict:
    """API shape of a book. The raw vector is never exposed."""
    return {
        "id": b.id,
        "title": b.title,
        "isbn": b.isbn,
        "description": b.description,
        "price": float(b.price) if b.price is not None else None,
        "stock_quantity": b.stock_quantity,
        "publication_year": b.publication_year,
        "pages": b.pages,
        "language": b.language,
        "created_at": b.created_at,
        "updated_at": b.updated_at,
        "author_id": b.author_id,
        "author_name": b.author.name if b.author else None,
        "category_id": b.category_id,
        "category_name": b.category.name if b.category else None,
        "has_embedding": b.embedding is not None,
        "embedding_dimensions": len(b.embedding) if b.embedding is not None else None,
        "embedding_updated_at": b.embedding_updated_at,
    }


def _with_refs():
    return select(Book).options(selectinload(Book.author), selectinload(Book.category))


# Lookups
def get_book(db: Session, book_id: int) -> Book:
    book = db.get(Book, book_id)
    if book is None:
        raise NotFoundError(f"Book not found with id: {book_id}")
    return book


def get_book_by_isbn(db: Session, isbn: str) -> Book:
    book = db.scalars(_with_refs().where(Book.isbn == isbn)).first()
    if book is None:
        raise NotFoundError(f"Book not found with ISBN: {isbn}")
    return book


def isbn_exists(db: Session, isbn: str) -> bool:
    return db.scalar(select(Book.id).where(Book.isbn == isbn).limit(1)) is not None


def all_books(db: Session) -> List[Book]:
    return list(db.scalars(_with_refs().order_by(Book.id)))


def books_with_embeddings(db: Session, exclude_id: Optional[int] = None) -> List[Book]:
    """
    Candidate set for similarity ranking. Filtered client-side: the vector
    column has no portable "is set" predicate across pgvector and JSON.
    """
    return [
        b for b in db.scalars(select(Book).order_by(Book.id))
        if b.embedding is not None and b.id != exclude_id
    ]


# Writes
def _apply(db: Session, book: Book, data: BookIn) -> None:
    book.author = get_author(db, data.author_id)
    book.category = get_category(db, data.category_id)
    book.title = data.title
    book.isbn = data.isbn
    book.description = data.description
    book.price = data.price
    book.stock_quantity = data.stock_quantity
    book.publication_year = data.publication_year
    book.pages = data.pages
    book.language = data.language


def create_book(db: Session, data: BookIn) -> Book:
    if isbn_exists(db, data.isbn):
        raise DuplicateError(f"Book with ISBN {data.isbn} already exists.")
    book = Book()
    _apply(db, book, data)
    db.add(book)
    db.commit()
    db.refresh(book)
    return book


def update_book(db: Session, book_id: int, data: BookIn) -> Book:
    book = get_book(db, book_id)
    if book.isbn != data.isbn and isbn_exists(db, data.isbn):
        raise DuplicateError(f"Book with ISBN '{data.isbn}' already exists")
    _apply(db, book, data)
    db.commit()
    db.refresh(book)
    return book


def update_stock(db: Session, book_id: int, stock_quantity: int) -> Book:
    book = get_book(db, book_id)
    book.stock_quantity = stock_quantity
    db.commit()
    db.refresh(book)
    return book


def delete_book(db: Session, book_id: int) -> None:
    db.delete(get_book(db, book_id))
    db.commit()


def save_embedding(db: Session, book: Book, vector: Sequence[float]) -> Book:
    book.embedding = [float(v) for v in vector]
    book.embedding_updated_at = datetime.now(timezone.utc)
    db.commit()
    return book


# Queries
def search_books(
    db: Session,
    *,
    title: Optional[str] = None,
    author_id: Optional[int] = None,
    category_id: Optional[int] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    page: int = 0,
    size: int = 10,
    sort_by: str = "id",
    sort_dir: str = "asc",
) -> List[Book]:
    """Complex search; every filter left as None is ignored."""
    stmt = _with_refs()
    if title:
        stmt = stmt.where(Book.title.ilike(f"%{title}%"))
    if author_id is not None:
        stmt = stmt.where(Book.author_id == author_id)
    if category_id is not None:
        stmt = stmt.where(Book.category_id == category_id)
    if min_price is not None:
        stmt = stmt.where(Book.price >= min_price)
    if max_price is not None:
        stmt = stmt.where(Book.price <= max_price)
    stmt = apply_paging(stmt, Book, page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
    return list(db.scalars(stmt))


def search_by_title(db: Session, title: str) -> List[Book]:
    return list(db.scalars(_with_refs().where(Book.title.ilike(f"%{title}%")).order_by(Book.id)))


def books_by_author(db: Session, author_id: int) -> List[Book]:
    get_author(db, author_id)
    return list(db.scalars(_with_refs().where(Book.author_id == author_id).order_by(Book.id)))


def books_by_category(db: Session, category_id: int) -> List[Book]:
    get_category(db, category_id)
    return list(db.scalars(_with_refs().where(Book.category_id == category_id).order_by(Book.id)))


def books_by_price_range(db: Session, min_price: Decimal, max_price: Decimal) -> List[Book]:
    stmt = _with_refs().where(Book.price >= min_price, Book.price <= max_price).order_by(Book.price, Book.id)
    return list(db.scalars(stmt))


def low_stock(db: Session, threshold: int) -> List[Book]:
    stmt = _with_refs().where(Book.stock_quantity <= threshold).order_by(Book.stock_quantity, Book.id)
    return list(db.scalars(stmt))
