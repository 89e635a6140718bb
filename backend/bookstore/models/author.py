from __future__ import annotations
from typing import List, Optional, TYPE_CHECKING

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from bookstore.db import Base, PK, normalize_name

if TYPE_CHECKING:
    from bookstore.models.book import Book


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(PK, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name_key: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    bio: Mapped[Optional[str]] = mapped_column(Text)
    nationality: Mapped[Optional[str]] = mapped_column(String(50))

    books: Mapped[List["Book"]] = relationship(back_populates="author")

    @validates("name")
    def _sync_name_key(self, key, value):
        self.name_key = normalize_name(value)
        return value
