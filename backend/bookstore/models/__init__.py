from bookstore.models.author import Author
from bookstore.models.category import Category
from bookstore.models.book import Book

__all__ = ["Author", "Category", "Book"]
