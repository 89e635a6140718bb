from __future__ import annotations
from typing import Iterator

from sqlalchemy import BigInteger, Integer, create_engine, text
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from bookstore.config import DATABASE_URL


class Base(DeclarativeBase):
    pass


# BIGINT keys on PostgreSQL; SQLite only autoincrements INTEGER PRIMARY KEY
PK = BigInteger().with_variant(Integer(), "sqlite")


def normalize_name(name: str) -> str:
    """Case-insensitive lookup key. casefold() covers non-ASCII letters, which SQLite lower() does not."""
    return (name or "").strip().casefold()


def make_engine(url: str = DATABASE_URL):
    kwargs = {"future": True}
    if url.startswith("sqlite"):
        # FastAPI serves sync endpoints from a threadpool
        kwargs["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **kwargs)


engine = make_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def get_db() -> Iterator[Session]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None) -> None:
    """Create tables (simple MVP, no migrations). PostgreSQL needs the pgvector extension first."""
    from bookstore import models  # noqa: F401

    bind = bind or engine
    if bind.dialect.name == "postgresql":
        with bind.begin() as conn:
            conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
    Base.metadata.create_all(bind=bind)
