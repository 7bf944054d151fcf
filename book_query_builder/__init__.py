"""
Book Query Builder - typed descriptors for querying a MongoDB books collection.

Main entry points are the builder, which only constructs descriptors, and the
orchestrator, which can also execute them.
"""

from book_query_builder.core.exceptions import InvalidFieldError, InvalidQueryError
from book_query_builder.core.models import Book, Page
from book_query_builder.orchestrator import BookQueryOrchestrator
from book_query_builder.query.builder import BookQueryBuilder

__all__ = [
    "BookQueryBuilder",
    "BookQueryOrchestrator",
    "Book",
    "Page",
    "InvalidQueryError",
    "InvalidFieldError",
]
