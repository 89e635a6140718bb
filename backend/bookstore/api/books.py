from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from bookstore.db import get_db
from bookstore.schemas import BookIn, StockUpdate
from bookstore.services import books as svc

router = APIRouter(prefix="/api/books", tags=["books"])


def _out(rows):
    return [svc.book_to_dict(b) for b in rows]


@router.post("", status_code=201)
def create_book(body: BookIn, db: Session = Depends(get_db)):
    return svc.book_to_dict(svc.create_book(db, body))


@router.get("")
def list_books(
    title: Optional[str] = None,
    author_id: Optional[int] = None,
    category_id: Optional[int] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    sort_by: str = "id",
    sort_dir: str = "asc",
    db: Session = Depends(get_db),
):
    """
    Paged book listing. Any combination of title substring, author, category
    and price bounds narrows it; filters left out are ignored.
    """
    return _out(svc.search_books(
        db, title=title, author_id=author_id, category_id=category_id,
        min_price=min_price, max_price=max_price,
        page=page, size=size, sort_by=sort_by, sort_dir=sort_dir,
    ))


@router.get("/search")
def search_books(title: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return _out(svc.search_by_title(db, title))


@router.get("/isbn/{isbn}")
def get_book_by_isbn(isbn: str, db: Session = Depends(get_db)):
    return svc.book_to_dict(svc.get_book_by_isbn(db, isbn))


@router.get("/author/{author_id}")
def books_by_author(author_id: int, db: Session = Depends(get_db)):
    return _out(svc.books_by_author(db, author_id))


@router.get("/category/{category_id}")
def books_by_category(category_id: int, db: Session = Depends(get_db)):
    return _out(svc.books_by_category(db, category_id))


@router.get("/price-range")
def books_by_price_range(min_price: Decimal, max_price: Decimal, db: Session = Depends(get_db)):
    return _out(svc.books_by_price_range(db, min_price, max_price))


@router.get("/low-stock")
def low_stock(threshold: int = Query(..., ge=0), db: Session = Depends(get_db)):
    return _out(svc.low_stock(db, threshold))


@router.get("/{book_id}")
def get_book(book_id: int, db: Session = Depends(get_db)):
    return svc.book_to_dict(svc.get_book(db, book_id))


@router.put("/{book_id}")
def update_book(book_id: int, body: BookIn, db: Session = Depends(get_db)):
    return svc.book_to_dict(svc.update_book(db, book_id, body))


@router.patch("/{book_id}/stock")
def update_stock(book_id: int, body: StockUpdate, db: Session = Depends(get_db)):
    return svc.book_to_dict(svc.update_stock(db, book_id, body.stock_quantity))


@router.delete("/{book_id}", status_code=204)
def delete_book(book_id: int, db: Session = Depends(get_db)):
    svc.delete_book(db, book_id)
    return Response(status_code=204)
