import pytest


def _author(client, name="Donald E. Knuth", nationality="USA"):
    r = client.post("/api/authors", json={"name": name, "bio": "TAOCP", "nationality": nationality})
    assert r.status_code == 201, r.text
    return r.json()


def _category(client, name="Algorithms"):
    r = client.post("/api/categories", json={"name": name, "description": f"{name} books"})
    assert r.status_code == 201, r.text
    return r.json()


def _book_body(author_id, category_id, **over):
    body = {
        "title": "The Art of Computer Programming",
        "isbn": "978-0-201-89683-1",
        "description": "Fundamental algorithms, volume one.",
        "price": "59.99",
        "stock_quantity": 4,
        "publication_year": 1968,
        "pages": 672,
        "language": "English",
        "author_id": author_id,
        "category_id": category_id,
    }
    body.update(over)
    return body


@pytest.fixture
def refs(client):
    return _author(client), _category(client)


def test_health_endpoints(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/db-ping").json()["db"] == "ok"
    assert "Bookstore API" in client.get("/").json()["message"]


# Authors
def test_author_crud(client):
    a = _author(client)
    assert client.get(f"/api/authors/{a['id']}").json()["name"] == "Donald E. Knuth"

    r = client.put(f"/api/authors/{a['id']}", json={"name": "Don Knuth", "nationality": "USA"})
    assert r.status_code == 200
    assert r.json()["name"] == "Don Knuth"

    assert client.delete(f"/api/authors/{a['id']}").status_code == 204
    r = client.get(f"/api/authors/{a['id']}")
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


def test_author_duplicate_name_is_case_insensitive(client):
    _author(client, "Alan Turing")
    r = client.post("/api/authors", json={"name": "alan turing"})
    assert r.status_code == 409
    assert r.json()["error"] == "duplicate"


def test_author_validation_errors_are_400_with_fields(client):
    r = client.post("/api/authors", json={"name": "X"})
    assert r.status_code == 400
    body = r.json()
    assert body["error"] == "Validation Failed"
    assert "name" in body["validation_errors"]


def test_author_listing_search_and_nationalities(client):
    _author(client, "Ada Lovelace", "UK")
    _author(client, "Alan Turing", "UK")
    _author(client, "Grace Hopper", "USA")

    names = [a["name"] for a in client.get("/api/authors", params={"sort_by": "name", "sort_dir": "desc"}).json()]
    assert names == ["Grace Hopper", "Alan Turing", "Ada Lovelace"]

    page = client.get("/api/authors", params={"size": 2, "page": 1, "sort_by": "name"}).json()
    assert [a["name"] for a in page] == ["Grace Hopper"]

    uk = client.get("/api/authors", params={"nationality": "uk"}).json()
    assert {a["name"] for a in uk} == {"Ada Lovelace", "Alan Turing"}

    found = client.get("/api/authors/search", params={"name": "turing"}).json()
    assert [a["name"] for a in found] == ["Alan Turing"]

    assert client.get("/api/authors/nationalities").json() == ["UK", "USA"]


def test_sort_by_unknown_column_is_400(client):
    r = client.get("/api/authors", params={"sort_by": "password"})
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_request"


# Categories
def test_category_crud_and_duplicate(client):
    c = _category(client, "Databases")
    assert client.post("/api/categories", json={"name": "DATABASES"}).status_code == 409
    r = client.put(f"/api/categories/{c['id']}", json={"name": "Database Systems"})
    assert r.json()["name"] == "Database Systems"
    assert [x["name"] for x in client.get("/api/categories/search", params={"name": "system"}).json()] == ["Database Systems"]
    assert client.delete(f"/api/categories/{c['id']}").status_code == 204
    assert client.get(f"/api/categories/{c['id']}").status_code == 404


def test_category_with_books_cannot_be_deleted(client, refs):
    a, c = refs
    client.post("/api/books", json=_book_body(a["id"], c["id"]))
    r = client.delete(f"/api/categories/{c['id']}")
    assert r.status_code == 400


# Books
def test_book_create_get_and_shape(client, refs):
    a, c = refs
    r = client.post("/api/books", json=_book_body(a["id"], c["id"]))
    assert r.status_code == 201, r.text
    book = r.json()
    assert book["author_name"] == "Donald E. Knuth"
    assert book["category_name"] == "Algorithms"
    assert book["price"] == 59.99
    assert book["has_embedding"] is False
    assert book["embedding_dimensions"] is None
    assert "embedding" not in book

    assert client.get(f"/api/books/{book['id']}").json()["isbn"] == "978-0-201-89683-1"
    assert client.get("/api/books/isbn/978-0-201-89683-1").json()["id"] == book["id"]


def test_book_duplicate_isbn_conflict(client, refs):
    a, c = refs
    client.post("/api/books", json=_book_body(a["id"], c["id"]))
    r = client.post("/api/books", json=_book_body(a["id"], c["id"], title="Another"))
    assert r.status_code == 409


def test_book_unknown_author_or_category_is_404(client, refs):
    a, c = refs
    assert client.post("/api/books", json=_book_body(999, c["id"])).status_code == 404
    assert client.post("/api/books", json=_book_body(a["id"], 999)).status_code == 404


@pytest.mark.parametrize(
    "field,value",
    [("price", "0"), ("stock_quantity", -1), ("description", "short"), ("title", "")],
)
def test_book_validation(client, refs, field, value):
    a, c = refs
    r = client.post("/api/books", json=_book_body(a["id"], c["id"], **{field: value}))
    assert r.status_code == 400
    assert field in r.json()["validation_errors"]


def test_book_update_stock_and_delete(client, refs):
    a, c = refs
    book = client.post("/api/books", json=_book_body(a["id"], c["id"])).json()

    r = client.put(f"/api/books/{book['id']}", json=_book_body(a["id"], c["id"], title="TAOCP Vol. 1", price="49.50"))
    assert r.status_code == 200
    assert r.json()["title"] == "TAOCP Vol. 1"
    assert r.json()["price"] == 49.5

    r = client.patch(f"/api/books/{book['id']}/stock", json={"stock_quantity": 0})
    assert r.json()["stock_quantity"] == 0

    assert client.delete(f"/api/books/{book['id']}").status_code == 204
    assert client.get(f"/api/books/{book['id']}").status_code == 404


def test_book_update_to_existing_isbn_conflicts(client, refs):
    a, c = refs
    client.post("/api/books", json=_book_body(a["id"], c["id"], isbn="111"))
    b2 = client.post("/api/books", json=_book_body(a["id"], c["id"], isbn="222")).json()
    r = client.put(f"/api/books/{b2['id']}", json=_book_body(a["id"], c["id"], isbn="111"))
    assert r.status_code == 409


def test_book_filters_and_queries(client):
    knuth = _author(client, "Donald E. Knuth")
    tanen = _author(client, "Andrew S. Tanenbaum", "Netherlands")
    algos = _category(client, "Algorithms")
    os_ = _category(client, "Operating Systems")

    def add(title, isbn, author, cat, price, stock):
        r = client.post("/api/books", json=_book_body(author["id"], cat["id"], title=title, isbn=isbn,
                                                      price=price, stock_quantity=stock))
        assert r.status_code == 201, r.text

    add("Art of Programming", "1", knuth, algos, "60.00", 3)
    add("Concrete Mathematics", "2", knuth, algos, "45.00", 12)
    add("Modern Operating Systems", "3", tanen, os_, "80.00", 1)

    def titles(path, **params):
        return [b["title"] for b in client.get(path, params=params).json()]

    assert titles("/api/books") == ["Art of Programming", "Concrete Mathematics", "Modern Operating Systems"]
    assert titles("/api/books", title="MATH") == ["Concrete Mathematics"]
    assert titles("/api/books", author_id=knuth["id"], max_price="50") == ["Concrete Mathematics"]
    assert titles("/api/books", category_id=os_["id"]) == ["Modern Operating Systems"]
    assert titles("/api/books", min_price="50", sort_by="price", sort_dir="desc") == [
        "Modern Operating Systems", "Art of Programming"]
    assert titles("/api/books", size=1, page=2) == ["Modern Operating Systems"]

    assert titles("/api/books/search", title="operating") == ["Modern Operating Systems"]
    assert titles(f"/api/books/author/{tanen['id']}") == ["Modern Operating Systems"]
    assert titles(f"/api/books/category/{algos['id']}") == ["Art of Programming", "Concrete Mathematics"]
    assert titles("/api/books/price-range", min_price="40", max_price="60") == [
        "Concrete Mathematics", "Art of Programming"]
    assert titles("/api/books/low-stock", threshold=3) == ["Modern Operating Systems", "Art of Programming"]

    assert client.get("/api/books/author/999").status_code == 404


@pytest.mark.parametrize("first,second", [("Émile Zola", "Émile Zola"), ("Émile Zola", "ÉMILE ZOLA"), ("Émile Zola", "émile zola")])
def test_author_duplicate_check_folds_non_ascii_case(client, first, second):
    _author(client, first, "France")
    r = client.post("/api/authors", json={"name": second})
    assert r.status_code == 409
    assert r.json()["error"] == "duplicate"


def test_category_duplicate_check_folds_non_ascii_case(client):
    _category(client, "Ético")
    assert client.post("/api/categories", json={"name": "Ético"}).status_code == 409
    assert client.post("/api/categories", json={"name": "ético"}).status_code == 409


def test_rename_onto_existing_non_ascii_name_conflicts(client):
    _author(client, "Émile Zola", "France")
    other = _author(client, "Victor Hugo", "France")
    r = client.put(f"/api/authors/{other['id']}", json={"name": "ÉMILE ZOLA"})
    assert r.status_code == 409
