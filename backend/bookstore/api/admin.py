from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from bookstore.db import get_db
from bookstore.services.seed import seed_sample_books

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.post("/seed-ten-books")
def seed_ten_books(db: Session = Depends(get_db)):
    """Insert the 10 sample books; ISBNs already present are skipped."""
    return seed_sample_books(db)
