from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bookstore.db import Base, get_db
from bookstore.errors import ProviderError
from bookstore.main import app
from bookstore.models import Author, Book, Category
from bookstore.services.embeddings import EmbeddingProvider, get_provider

KEYWORDS = ["algorithm", "network", "learning", "database"]


class FakeProvider(EmbeddingProvider):
    """Keyword-count vectors; records every text it is asked to embed."""

    name = "fake"

    def __init__(self, fail_after=None):
        self.calls = []
        self.fail_after = fail_after

    def embed(self, text):
        if self.fail_after is not None and len(self.calls) >= self.fail_after:
            self.calls.append(text)
            raise ProviderError("fake provider HTTP 500", status=500)
        self.calls.append(text)
        low = text.lower()
        return [float(low.count(k)) for k in KEYWORDS] + [0.1]


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def db(session_factory):
    with session_factory() as s:
        yield s


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(session_factory, provider):
    def _get_db():
        s = session_factory()
        try:
            yield s
        finally:
            s.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_provider] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_book(db):
    """Insert a book (creating its author/category by name) and return it."""
    counter = {"n": 0}

    def _make(title, description=None, author="Ada Author", category="General", embedding=None,
              embedded_at=None, price="19.99", stock=5):
        counter["n"] += 1
        a = db.query(Author).filter_by(name=author).first() or Author(name=author)
        c = db.query(Category).filter_by(name=category).first() or Category(name=category)
        b = Book(
            title=title, isbn=f"isbn-{counter['n']}", description=description,
            price=Decimal(price), stock_quantity=stock, author=a, category=c,
            embedding=embedding, embedding_updated_at=embedded_at,
        )
        db.add(b)
        db.commit()
        return b

    return _make
