from __future__ import annotations
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.db import normalize_name
from bookstore.errors import DuplicateError, InvalidRequestError, NotFoundError
from bookstore.models import Book, Category
from bookstore.schemas import CategoryIn
from bookstore.services.paging import apply_paging


def category_to_dict(c: Category) -> dict:
    return {"id": c.id, "name": c.name, "description": c.description}


def find_by_name(db: Session, name: str) -> Optional[Category]:
    return db.scalars(
        select(Category).where(Category.name_key == normalize_name(name)).limit(1)
    ).first()


def _commit_unique(db: Session, name: str) -> None:
    # name_key is unique; a concurrent insert of the same name loses here
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateError(f"Category with name {name} already exists") from e


def get_category(db: Session, category_id: int) -> Category:
    category = db.get(Category, category_id)
    if category is None:
        raise NotFoundError(f"Category not found with id {category_id}")
    return category


def create_category(db: Session, data: CategoryIn) -> Category:
    if find_by_name(db, data.name) is not None:
        raise DuplicateError(f"Category with name {data.name} already exists")
    category = Category(**data.model_dump())
    db.add(category)
    _commit_unique(db, data.name)
    db.refresh(category)
    return category


def list_categories(db: Session, *, search: Optional[str] = None, page: int = 0, size: int = 10,
                    sort_by: str = "name", sort_dir: str = "asc") -> List[Category]:
    stmt = select(Category)
    if search:
        stmt = stmt.where(Category.name.ilike(f"%{search}%"))
    stmt = apply_paging(stmt, Category, page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
    return list(db.scalars(stmt))


def search_categories(db: Session, name: str) -> List[Category]:
    return list(db.scalars(select(Category).where(Category.name.ilike(f"%{name}%")).order_by(Category.name)))


def update_category(db: Session, category_id: int, data: CategoryIn) -> Category:
    category = get_category(db, category_id)
    other = find_by_name(db, data.name)
    if other is not None and other.id != category.id:
        raise DuplicateError(f"Category with name {data.name} already exists")
    for k, v in data.model_dump().items():
        setattr(category, k, v)
    _commit_unique(db, data.name)
    db.refresh(category)
    return category


def delete_category(db: Session, category_id: int) -> None:
    category = get_category(db, category_id)
    n_books = db.scalar(select(func.count()).select_from(Book).where(Book.category_id == category.id))
    if n_books:
        raise InvalidRequestError(f"Category {category_id} still has {n_books} book(s); delete them first")
    db.delete(category)
    db.commit()
