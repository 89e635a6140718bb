from __future__ import annotations
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

from pgvector.sqlalchemy import Vector
from sqlalchemy import JSON, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookstore.db import Base, PK
from bookstore.models.author import Author
from bookstore.models.category import Category


def _now() -> datetime:
    return datetime.now(timezone.utc)


# Dimension depends on the configured provider (384 for bge-small, 1536 for OpenAI),
# so the column is declared without one. Dialects without pgvector store a JSON array.
EmbeddingVector = Vector().with_variant(
    JSON(none_as_null=True), "sqlite", "mysql", "mariadb", "mssql", "oracle"
)


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    isbn: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    description: Mapped[Optional[str]] = mapped_column(Text)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    stock_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    publication_year: Mapped[Optional[int]] = mapped_column(Integer)
    pages: Mapped[Optional[int]] = mapped_column(Integer)
    language: Mapped[Optional[str]] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    author_id: Mapped[int] = mapped_column(PK, ForeignKey("authors.id"), nullable=False)
    category_id: Mapped[int] = mapped_column(PK, ForeignKey("categories.id"), nullable=False)
    author: Mapped[Author] = relationship(back_populates="books")
    category: Mapped[Category] = relationship(back_populates="books")

    # Written only by the recompute operations; the ranker only reads it
    embedding: Mapped[Optional[List[float]]] = mapped_column(EmbeddingVector, nullable=True)
    embedding_updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
