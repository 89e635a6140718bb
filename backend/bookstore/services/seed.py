"""
Sample catalog data.

``seed_catalog`` runs at startup and is gated on what's already in the
database (any author, category or book => skip), so calling it again after a
restart is a no-op. Two workers racing past the check collide on the unique
ISBN and name keys; the loser rolls back and reports a skip.
``seed_sample_books`` backs the admin endpoint and only adds ISBNs that
aren't there yet.
"""
from __future__ import annotations
import logging
from datetime import date
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from bookstore.models import Author, Book, Category
from bookstore.services import authors as author_svc
from bookstore.services import categories as category_svc
from bookstore.services.books import isbn_exists

log = logging.getLogger(__name__)

TARGET_BOOKS = 50

CATEGORIES = [
    "Algorithms", "Data Structures", "Operating Systems", "Computer Networks", "Databases",
    "Programming Languages", "Theory of Computation", "Computer Architecture", "Compilers",
    "Security", "Software Engineering", "Machine Learning", "Artificial Intelligence",
    "Natural Language Processing", "Distributed Systems", "Graphics", "Human-Computer Interaction",
    "Cloud Computing", "Testing", "DevOps",
]

# (name, bio, nationality)
AUTHORS = [
    ("Donald E. Knuth", "Author of The Art of Computer Programming", "USA"),
    ("Andrew S. Tanenbaum", "Operating systems and networking author", "Netherlands"),
    ("Brian W. Kernighan", "Co-author of The C Programming Language", "Canada"),
    ("Dennis M. Ritchie", "Co-creator of C and Unix", "USA"),
    ("Robert Sedgewick", "Algorithms and programming author", "USA"),
    ("Thomas H. Cormen", "Co-author of Introduction to Algorithms", "USA"),
    ("Charles E. Leiserson", "Co-author of Introduction to Algorithms", "USA"),
    ("Ronald L. Rivest", "Co-author of Introduction to Algorithms / RSA", "USA"),
    ("Clifford Stein", "Algorithms researcher", "USA"),
    ("Ian Goodfellow", "Machine learning researcher, GANs", "UK"),
    ("Yoshua Bengio", "Deep learning researcher", "Canada"),
    ("Geoffrey Hinton", "Pioneer in neural networks", "UK"),
    ("Stuart Russell", "AI researcher and textbook author", "UK"),
    ("Peter Norvig", "AI practitioner and author", "USA"),
    ("Edsger W. Dijkstra", "Pioneering CS scientist", "Netherlands"),
    ("Niklaus Wirth", "Pascal creator and CS educator", "Switzerland"),
    ("Michael Sipser", "Theoretical CS author", "USA"),
    ("Alfred Aho", "Compilers pioneer", "USA"),
    ("Jeffrey Ullman", "Databases and compilers", "USA"),
    ("Gerald Jay Sussman", "AI and Scheme author", "USA"),
    ("Ken Thompson", "Unix co-creator", "USA"),
    ("Martin Fowler", "Software engineering author", "UK"),
    ("Fred Brooks", "Software engineering pioneer", "USA"),
    ("Barbara Liskov", "Programming languages and systems", "USA"),
    ("David Patterson", "Computer architecture", "USA"),
    ("John Hennessy", "Computer architecture", "USA"),
    ("John McCarthy", "AI pioneer", "USA"),
    ("Marvin Minsky", "AI pioneer", "USA"),
    ("W. Richard Stevens", "UNIX and networking author", "USA"),
    ("Ravi Sethi", "Compilers and theory", "USA"),
    ("Sanjay Ghemawat", "Distributed systems engineer", "USA"),
    ("Leslie Lamport", "Distributed systems researcher", "USA"),
    ("Tim Berners-Lee", "Inventor of the World Wide Web", "UK"),
    ("Donald Norman", "HCI author", "USA"),
    ("Rachel Potvin", "Software engineering", "Canada"),
    ("Yann LeCun", "AI researcher", "France"),
    ("Christopher Bishop", "Pattern recognition and ML", "UK"),
    ("Judea Pearl", "Causality researcher", "USA"),
    ("Michael Stonebraker", "Databases researcher", "USA"),
    ("Eric Evans", "Domain-driven design", "USA"),
    ("Gayle Laakmann McDowell", "Career and interview books", "USA"),
    ("Jon Kleinberg", "Algorithms and networks", "USA"),
]

# (title, category, author, year)
BOOKS = [
    ("The Art of Computer Programming, Vol. 1", "Algorithms", "Donald E. Knuth", 1968),
    ("The Art of Computer Programming, Vol. 2", "Algorithms", "Donald E. Knuth", 1969),
    ("The Art of Computer Programming, Vol. 3", "Algorithms", "Donald E. Knuth", 1973),
    ("Introduction to Algorithms", "Algorithms", "Thomas H. Cormen", 2009),
    ("Algorithms (4th Edition)", "Algorithms", "Robert Sedgewick", 2011),
    ("Operating Systems: Design and Implementation", "Operating Systems", "Andrew S. Tanenbaum", 2006),
    ("Modern Operating Systems", "Operating Systems", "Andrew S. Tanenbaum", 2014),
    ("Computer Networks", "Computer Networks", "Andrew S. Tanenbaum", 2010),
    ("TCP/IP Illustrated", "Computer Networks", "W. Richard Stevens", 1994),
    ("The C Programming Language", "Programming Languages", "Brian W. Kernighan", 1988),
    ("The Unix Programming Environment", "Programming Languages", "Brian W. Kernighan", 1984),
    ("Compilers: Principles, Techniques, and Tools", "Compilers", "Alfred Aho", 2006),
    ("Compilers: Principles and Practice", "Compilers", "Ravi Sethi", 2000),
    ("Computer Architecture: A Quantitative Approach", "Computer Architecture", "John Hennessy", 2017),
    ("Computer Organization and Design", "Computer Architecture", "David Patterson", 2017),
    ("Database System Concepts", "Databases", "Jeffrey Ullman", 2016),
    ("Readings in Database Systems", "Databases", "Michael Stonebraker", 2011),
    ("Artificial Intelligence: A Modern Approach", "Artificial Intelligence", "Stuart Russell", 2010),
    ("Artificial Intelligence: Foundations", "Artificial Intelligence", "Peter Norvig", 2011),
    ("Deep Learning", "Machine Learning", "Ian Goodfellow", 2016),
    ("Pattern Recognition and Machine Learning", "Machine Learning", "Christopher Bishop", 2006),
    ("Probabilistic Graphical Models", "Machine Learning", "Judea Pearl", 2009),
    ("Distributed Systems: Concepts and Design", "Distributed Systems", "Leslie Lamport", 2014),
    ("Designing Data-Intensive Applications", "Distributed Systems", "Martin Fowler", 2016),
    ("Introduction to the Theory of Computation", "Theory of Computation", "Michael Sipser", 2012),
    ("Structure and Interpretation of Computer Programs", "Programming Languages", "Gerald Jay Sussman", 1996),
    ("Computer Graphics: Principles and Practice", "Graphics", "John Hennessy", 2015),
    ("Human-Computer Interaction", "Human-Computer Interaction", "Donald Norman", 2013),
    ("Designing Interfaces", "Human-Computer Interaction", "Donald Norman", 2014),
    ("Security Engineering", "Security", "Ross Anderson", 2008),
    ("Cryptography and Network Security", "Security", "Ronald L. Rivest", 2015),
    ("Algorithms in Bioinformatics", "Algorithms", "Jon Kleinberg", 2012),
    ("Programming Pearls", "Programming Languages", "Jon Bentley", 1999),
    ("Refactoring", "Software Engineering", "Martin Fowler", 2018),
    ("The Mythical Man-Month", "Software Engineering", "Fred Brooks", 1995),
    ("Domain-Driven Design", "Software Engineering", "Eric Evans", 2003),
    ("Clean Code", "Software Engineering", "Robert C. Martin", 2008),
    ("Design Patterns", "Software Engineering", "Erich Gamma", 1995),
    ("Database Internals", "Databases", "Alex Petrov", 2019),
    ("Introduction to Information Retrieval", "Databases", "Christopher Manning", 2008),
    ("Web Architecture 101", "Cloud Computing", "Tim Berners-Lee", 2010),
    ("Distributed Systems for Fun and Profit", "Distributed Systems", "Sanjay Ghemawat", 2013),
    ("Site Reliability Engineering", "DevOps", "Rachel Potvin", 2016),
    ("The Pragmatic Programmer", "Software Engineering", "Andy Hunt", 1999),
    ("Cracking the Coding Interview", "Programming Languages", "Gayle Laakmann McDowell", 2015),
    ("Algorithms Unlocked", "Algorithms", "Thomas H. Cormen", 2013),
]

# Admin "seed ten books" set: (title, category, author, year)
SAMPLE_BOOKS = [
    ("Intro to Algorithms - Pocket Edition", "Algorithms", "Thomas H. Cormen", 2009),
    ("Practical Machine Learning", "Machine Learning", "Ian Goodfellow", 2018),
    ("Networking Essentials", "Computer Networks", "W. Richard Stevens", 2012),
    ("Modern Databases", "Databases", "Michael Stonebraker", 2017),
    ("Operating Systems in Practice", "Operating Systems", "Andrew S. Tanenbaum", 2015),
    ("Clean Architecture", "Software Engineering", "Robert C. Martin", 2017),
    ("Hands-On Cloud", "Cloud Computing", "Tim Berners-Lee", 2020),
    ("Security Principles", "Security", "Ross Anderson", 2014),
    ("Compiler Construction Guide", "Compilers", "Alfred Aho", 2011),
    ("Design Patterns Explained", "Software Engineering", "Erich Gamma", 2002),
]


def catalog_is_empty(db: Session) -> bool:
    for model in (Author, Category, Book):
        if db.scalar(select(func.count()).select_from(model)):
            return False
    return True


def seed_catalog(db: Session) -> Dict[str, int]:
    if not catalog_is_empty(db):
        log.info("Seed: data already present, skipping seeding.")
        return {"skipped": 1, "authors": 0, "categories": 0, "books": 0}

    categories: Dict[str, Category] = {}
    for name in CATEGORIES:
        categories[name] = Category(name=name, description=f"{name} books and resources")
        db.add(categories[name])

    authors: Dict[str, Author] = {}
    for name, bio, nationality in AUTHORS:
        authors[name] = Author(name=name, bio=bio, nationality=nationality)
        db.add(authors[name])

    books: List[Book] = []
    isbn_counter = 1000
    for title, cat_name, author_name, year in BOOKS:
        isbn = f"978-0-{isbn_counter}"
        isbn_counter += 1
        author = authors.get(author_name)
        if author is None:
            author = authors[author_name] = Author(name=author_name, bio=f"Author of {title}", nationality="Unknown")
            db.add(author)
        category = categories.get(cat_name)
        if category is None:
            category = categories[cat_name] = Category(name=cat_name, description=f"{cat_name} resources")
            db.add(category)
        books.append(Book(
            title=title, isbn=isbn, description=f"A classic book: {title}",
            price=Decimal("39.99"), stock_quantity=10 + (isbn_counter % 20),
            publication_year=year, pages=200 + (isbn_counter % 300), language="English",
            author=author, category=category,
        ))

    # Pad with generated titles up to TARGET_BOOKS
    author_list = list(authors.values())
    this_year = date.today().year
    while len(books) < TARGET_BOOKS:
        n = len(books)
        title = f"Computer Science Essentials Vol. {n + 1}"
        books.append(Book(
            title=title, isbn=f"978-0-{isbn_counter}", description=f"Introductory text for {title}",
            price=Decimal("29.99"), stock_quantity=5 + (n % 30),
            publication_year=this_year - (n % 10), pages=150 + (n % 250), language="English",
            author=author_list[n % len(author_list)], category=categories[CATEGORIES[n % len(CATEGORIES)]],
        ))
        isbn_counter += 1

    db.add_all(books)
    try:
        db.commit()
    except IntegrityError:
        # Another worker passed the emptiness check first and committed its seed
        db.rollback()
        log.info("Seed: concurrent seed detected, skipping seeding.")
        return {"skipped": 1, "authors": 0, "categories": 0, "books": 0}
    summary = {"skipped": 0, "authors": len(authors), "categories": len(categories), "books": len(books)}
    log.info("Seed: seeded %(authors)d authors, %(categories)d categories and %(books)d books.", summary)
    return summary


def seed_sample_books(db: Session) -> Dict[str, object]:
    added: List[Book] = []
    for i, (title, cat_name, author_name, year) in enumerate(SAMPLE_BOOKS):
        isbn = f"978-1-{9000 + i}"
        if isbn_exists(db, isbn):
            continue

        author = author_svc.find_by_name(db, author_name)
        if author is None:
            author = Author(name=author_name, bio="Auto-seeded author", nationality="Unknown")
            db.add(author)
        category = category_svc.find_by_name(db, cat_name)
        if category is None:
            category = Category(name=cat_name, description=f"{cat_name} books")
            db.add(category)
        db.flush()

        book = Book(
            title=title, isbn=isbn, description=f"Seeded: {title}", price=Decimal("34.99"),
            stock_quantity=20, publication_year=year, pages=180, language="English",
            author=author, category=category,
        )
        db.add(book)
        added.append(book)

    db.commit()
    log.info("Seed: added %d sample books", len(added))
    return {"added": len(added), "titles": [b.title for b in added]}
