from typing import Optional

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from bookstore.db import get_db
from bookstore.schemas import AuthorIn
from bookstore.services import authors as svc

router = APIRouter(prefix="/api/authors", tags=["authors"])


@router.post("", status_code=201)
def create_author(body: AuthorIn, db: Session = Depends(get_db)):
    return svc.author_to_dict(svc.create_author(db, body))


@router.get("")
def list_authors(
    search: Optional[str] = None,
    nationality: Optional[str] = None,
    page: int = Query(0, ge=0),
    size: int = Query(10, ge=1, le=100),
    sort_by: str = "id",
    sort_dir: str = "asc",
    db: Session = Depends(get_db),
):
    rows = svc.list_authors(db, search=search, nationality=nationality,
                            page=page, size=size, sort_by=sort_by, sort_dir=sort_dir)
    return [svc.author_to_dict(a) for a in rows]


@router.get("/search")
def search_authors(name: str = Query(..., min_length=1), db: Session = Depends(get_db)):
    return [svc.author_to_dict(a) for a in svc.search_authors(db, name)]


@router.get("/nationalities")
def nationalities(db: Session = Depends(get_db)):
    return svc.list_nationalities(db)


@router.get("/{author_id}")
def get_author(author_id: int, db: Session = Depends(get_db)):
    return svc.author_to_dict(svc.get_author(db, author_id))


@router.put("/{author_id}")
def update_author(author_id: int, body: AuthorIn, db: Session = Depends(get_db)):
    return svc.author_to_dict(svc.update_author(db, author_id, body))


@router.delete("/{author_id}", status_code=204)
def delete_author(author_id: int, db: Session = Depends(get_db)):
    svc.delete_author(db, author_id)
    return Response(status_code=204)
