from __future__ import annotations
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.db import normalize_name
from bookstore.errors import DuplicateError, InvalidRequestError, NotFoundError
from bookstore.models import Author, Book
from bookstore.schemas import AuthorIn
from bookstore.services.paging import apply_paging


def author_to_dict(a: Author) -> dict:
    return {"id": a.id, "name": a.name, "bio": a.bio, "nationality": a.nationality}


def find_by_name(db: Session, name: str) -> Optional[Author]:
    return db.scalars(
        select(Author).where(Author.name_key == normalize_name(name)).limit(1)
    ).first()


def _commit_unique(db: Session, name: str) -> None:
    # name_key is unique; a concurrent insert of the same name loses here
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError(f"Author with name {name} already exists") from e


def get_author(db: Session, author_id: int) -> Author:
    author = db.get(Author, author_id)
    if author is None:
        raise NotFoundError(f"Author with id {author_id} not found")
    return author


def create_author(db: Session, data: AuthorIn) -> Author:
    if find_by_name(db, data.name) is not None:
        raise DuplicateError(f"Author with name {data.name} already exists")
    author = Author(**data.model_dump())
    db.add(author)
    _commit_unique(db, data.name)
    db.refresh(author)
    return author


def list_authors(db: Session, *, search: Optional[str] = None, nationality: Optional[str] = None,
                 page: int = 0, size: int = 10, sort_by: str = "id", sort_dir: str = "asc") -> List[Author]:
    stmt = select(Author)
    if search:
        stmt = stmt.where(Author.name.ilike(f"%{search}%"))
    if nationality:
        stmt = stmt.where(func.lower(Author.nationality) == nationality.lower())
    stmt = apply_paging(stmt, Author, page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
    return list(db.scalars(stmt))


def search_authors(db: Session, name: str) -> List[Author]:
    return list(db.scalars(select(Author).where(Author.name.ilike(f"%{name}%")).order_by(Author.name)))


def update_author(db: Session, author_id: int, data: AuthorIn) -> Author:
    author = get_author(db, author_id)
    other = find_by_name(db, data.name)
    if other is not None and other.id != author.id:
        raise DuplicateError(f"Author with name {data.name} already exists")
    for k, v in data.model_dump().items():
        setattr(author, k, v)
    _commit_unique(db, data.name)
    db.refresh(author)
    return author


def delete_author(db: Session, author_id: int) -> None:
    author = get_author(db, author_id)
    n_books = db.scalar(select(func.count()).select_from(Book).where(Book.author_id == author.id))
    if n_books:
        raise InvalidRequestError(f"Author {author_id} still has {n_books} book(s); delete them first")
    db.delete(author)
    db.commit()


def list_nationalities(db: Session) -> List[str]:
    rows = db.scalars(
        select(Author.nationality).where(Author.nationality.is_not(None)).distinct().order_by(Author.nationality)
    )
    return list(rows)
