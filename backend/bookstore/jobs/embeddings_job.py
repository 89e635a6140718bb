from __future__ import annotations
import argparse
import logging
import sys

from bookstore import config
from bookstore.db import SessionLocal, init_db
from bookstore.errors import BookstoreError
from bookstore.services.embeddings import get_embedding_provider
from bookstore.services.semantic import compute_book_embedding, recompute_embeddings


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description="Compute book embeddings outside the API.")
    ap.add_argument("--force", action="store_true", help="re-embed books that already have a vector")
    ap.add_argument("--book-id", type=int, help="embed a single book")
    ap.add_argument("--provider", default=None, help="override EMBED_PROVIDER")
    args = ap.parse_args(argv)

    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    init_db()

    try:
        provider = get_embedding_provider(args.provider)
        with SessionLocal() as db:
            if args.book_id is not None:
                book = compute_book_embedding(db, provider, args.book_id)
                print(f"Embedded book {book.id} ({len(book.embedding)} dims)")
            else:
                res = recompute_embeddings(db, provider, force=args.force)
                print(f"Embeddings recomputed: updated {res['updated']} of {res['total']} books")
    except BookstoreError as e:
        print(f"{e.kind}: {e.message}", file=sys.stderr)
        if e.hint:
            print(f"hint: {e.hint}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
