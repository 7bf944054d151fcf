"""
Pytest configuration and fixtures.

Descriptors are executed against an in-memory mongomock collection seeded
with a small library of books.
"""

import mongomock
import pytest

from book_query_builder import Book, BookQueryBuilder
from book_query_builder.adapters.mongodb import MongoQueryExecutor

LIBRARY = [
    Book(title="To Kill a Mockingbird", author="Harper Lee", genre="Fiction", published_year=1960, price=12.99),
    Book(title="1984", author="George Orwell", genre="Dystopian", published_year=1949, price=10.99),
    Book(title="Animal Farm", author="George Orwell", genre="Political Satire", published_year=1945, price=8.50, in_stock=False),
    Book(title="The Great Gatsby", author="F. Scott Fitzgerald", genre="Fiction", published_year=1925, price=9.99),
    Book(title="Brave New World", author="Aldous Huxley", genre="Dystopian", published_year=1932, price=11.50, in_stock=False),
    Book(title="The Hobbit", author="J.R.R. Tolkien", genre="Fantasy", published_year=1937, price=14.99),
    Book(title="The Fellowship of the Ring", author="J.R.R. Tolkien", genre="Fantasy", published_year=1954, price=19.99),
    Book(title="The Two Towers", author="J.R.R. Tolkien", genre="Fantasy", published_year=1954, price=18.99),
    Book(title="Pride and Prejudice", author="Jane Austen", genre="Romance", published_year=1813, price=7.99),
    Book(title="The Alchemist", author="Paulo Coelho", genre="Fiction", published_year=1988, price=10.50),
    Book(title="Harry Potter and the Philosopher's Stone", author="J.K. Rowling", genre="Fantasy", published_year=1997, price=20.99),
    Book(title="A Game of Thrones", author="George R.R. Martin", genre="Fantasy", published_year=1996, price=22.50),
    Book(title="The Road", author="Cormac McCarthy", genre="Fiction", published_year=2006, price=13.25),
    Book(title="The Martian", author="Andy Weir", genre="Science Fiction", published_year=2011, price=15.75),
]


@pytest.fixture
def library():
    """The seeded books as plain models."""
    return list(LIBRARY)


@pytest.fixture
def builder():
    return BookQueryBuilder()


@pytest.fixture
def collection(library):
    """Fresh mongomock ``library.books`` collection seeded with the library."""
    client = mongomock.MongoClient()
    books = client["library"]["books"]
    books.insert_many([book.model_dump() for book in library])
    yield books
    client.close()


@pytest.fixture
def executor(collection):
    return MongoQueryExecutor(collection)
