from __future__ import annotations
import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from bookstore.errors import BookstoreError, InvalidRequestError, MissingEmbeddingError, RecomputeError
from bookstore.models import Book
from bookstore.services import books as catalog
from bookstore.services.embeddings import EmbeddingProvider
from bookstore.services.similarity import Candidate, ScoredBook, rank

log = logging.getLogger(__name__)


def build_embedding_text(b: Book) -> str:
    """
    Text sent to the embedding provider for a book:
      "<title>. <description>. Author: <name>. Category: <name>. "
    Segments whose source field is null are left out.
    """
    parts: List[str] = []
    if b.title is not None:
        parts.append(b.title)
    if b.description is not None:
        parts.append(b.description)
    if b.author is not None and b.author.name is not None:
        parts.append(f"Author: {b.author.name}")
    if b.category is not None and b.category.name is not None:
        parts.append(f"Category: {b.category.name}")
    return "".join(f"{p}. " for p in parts)


def _is_embedded(b: Book) -> bool:
    return b.embedding is not None and b.embedding_updated_at is not None


def recompute_embeddings(db: Session, provider: EmbeddingProvider, force: bool = False) -> Dict[str, int]:
    """
    Embed every book sequentially. Without ``force``, books that already have
    both a vector and a timestamp are skipped. The first provider failure
    aborts the run; books saved before it keep their new vectors.
    """
    books = catalog.all_books(db)
    total, updated, attempted = len(books), 0, 0
    for b in books:
        if not force and _is_embedded(b):
            continue
        attempted += 1
        try:
            vec = provider.embed(build_embedding_text(b))
        except BookstoreError as e:
            log.error("Recompute aborted at book %s (%d attempted, %d updated): %s", b.id, attempted, updated, e)
            raise RecomputeError(e, attempted=attempted, updated=updated, total=total) from e
        catalog.save_embedding(db, b, vec)
        updated += 1

    log.info("Embeddings recomputed: %d updated of %d books (force=%s)", updated, total, force)
    return {"updated": updated, "total": total}


def compute_book_embedding(db: Session, provider: EmbeddingProvider, book_id: int) -> Book:
    book = catalog.get_book(db, book_id)
    vec = provider.embed(build_embedding_text(book))
    return catalog.save_embedding(db, book, vec)


def _candidates(rows: List[Book]) -> List[Candidate]:
    return [Candidate(b.id, b.embedding, b.title) for b in rows]


def recommend_by_book(db: Session, book_id: int, limit: int = 6) -> List[ScoredBook]:
    """Books closest to ``book_id``'s stored vector, excluding the book itself."""
    book = catalog.get_book(db, book_id)
    if book.embedding is None:
        raise MissingEmbeddingError(f"Book {book_id} has no embedding yet")
    return rank(book.embedding, _candidates(catalog.books_with_embeddings(db, exclude_id=book.id)), limit)


def semantic_search(db: Session, provider: EmbeddingProvider, query: str, limit: int = 10) -> List[ScoredBook]:
    """Embed ``query`` fresh (never cached) and rank every embedded book against it."""
    query = (query or "").strip()
    if not query:
        raise InvalidRequestError("Query 'q' is required")
    qvec = provider.embed(query)
    return rank(qvec, _candidates(catalog.books_with_embeddings(db)), limit)
