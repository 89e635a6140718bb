from __future__ import annotations

from sqlalchemy import Select, inspect

from bookstore.errors import InvalidRequestError


def apply_paging(stmt: Select, model, *, page: int = 0, size: int = 10,
                 sort_by: str = "id", sort_dir: str = "asc") -> Select:
    """ORDER BY a real column of ``model``, then OFFSET/LIMIT one page (0-based)."""
    columns = inspect(model).columns
    if sort_by not in columns:
        raise InvalidRequestError(
            f"Cannot sort by '{sort_by}'",
            hint="sort_by must be one of: " + ", ".join(sorted(columns.keys())),
        )
    if sort_dir.lower() not in ("asc", "desc"):
        raise InvalidRequestError(f"sort_dir must be 'asc' or 'desc', got '{sort_dir}'")

    col = columns[sort_by]
    order = col.desc() if sort_dir.lower() == "desc" else col.asc()
    # id as a secondary key keeps pages stable when sort_by has duplicates
    stmt = stmt.order_by(order, model.id.asc())
    return stmt.offset(page * size).limit(size)
