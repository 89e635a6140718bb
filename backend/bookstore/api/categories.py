from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from bookstore.db import get_db
from bookstore.schemas import CategoryIn
from bookstore.services import categories as svc

router = APIRouter(prefix="/api/categories", tags=["categories"])


@router.post("", status_code=201)
def create_category(body: CategoryIn, db: Session = Depends(get_db)):
    return svc.category_to_dict(svc.create_category(db, body))


@router.get("")
def list_categories(
    search: Optional[str] = None,
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    sort_by: str = "name",
    sort_dir: str = "asc",
    db: Session = Depends(get_db),
):
    rows = svc.list_categories(db, search=search, page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
    return [svc.category_to_dict(c) for c in rows]


@router.get("/search")
def search_categories(name: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return [svc.category_to_dict(c) for c in svc.search_categories(db, name)]


@router.get("/{category_id}")
def get_category(category_id: int, db: Session = Depends(get_db)):
    return svc.category_to_dict(svc.get_category(db, category_id))


@router.put("/{category_id}")
def update_category(category_id: int, body: CategoryIn, db: Session = Depends(get_db)):
    return svc.category_to_dict(svc.update_category(db, category_id, body))


@router.delete("/{category_id}", status_code=204)
def delete_category(category_id: int, db: Session = Depends(get_db)):
    svc.delete_category(db, category_id)
    return Response(status_code=204)
