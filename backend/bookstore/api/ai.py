from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from bookstore.db import get_db
from bookstore.services import semantic
from bookstore.services.embeddings import EmbeddingProvider, get_provider

router = APIRouter(prefix="/api/ai", tags=["ai"])


@router.post("/embeddings/recompute")
def recompute_all_embeddings(
    force: bool = False,
    db: Session = Depends(get_db),
    provider: EmbeddingProvider = Depends(get_provider),
):
    """
    Synchronously (re)embed the catalog. Books already embedded are skipped
    unless force=true. Slow on large catalogs: one provider call per book.
    """
    result = semantic.recompute_embeddings(db, provider, force=force)
    return {**result, "message": f"Successfully computed embeddings for {result['updated']} books"}


@router.post("/embeddings/book/{book_id}")
def compute_embedding_for_book(
    book_id: int,
    db: Session = Depends(get_db),
    provider: EmbeddingProvider = Depends(get_provider),
):
    book = semantic.compute_book_embedding(db, provider, book_id)
    return {"book_id": book.id, "ok": True, "dimensions": len(book.embedding)}


@router.get("/recommendations/book/{book_id}")
def recommend_by_book(book_id: int, size: int = Query(6, ge=1), db: Session = Depends(get_db)):
    return [r.to_dict() for r in semantic.recommend_by_book(db, book_id, limit=size)]


@router.get("/semantic-search")
def semantic_search(
    q: str,
    size: int = Query(10, ge=1),
    db: Session = Depends(get_db),
    provider: EmbeddingProvider = Depends(get_provider),
):
    return [r.to_dict() for r in semantic.semantic_search(db, provider, q, limit=size)]
