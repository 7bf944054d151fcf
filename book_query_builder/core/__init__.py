"""Core interfaces and models for the book query builder."""

from book_query_builder.core.exceptions import InvalidFieldError, InvalidQueryError
from book_query_builder.core.interfaces import IQueryExecutor
from book_query_builder.core.models import (
    BOOK_FIELDS,
    DEFAULT_COLLECTION,
    AggregateDescriptor,
    Book,
    DeleteDescriptor,
    ExplainDescriptor,
    FindDescriptor,
    IndexDescriptor,
    Page,
    QueryDescriptor,
    QueryResult,
    UpdateDescriptor,
    dump_descriptor,
    parse_descriptor,
)

__all__ = [
    "IQueryExecutor",
    "InvalidQueryError",
    "InvalidFieldError",
    "BOOK_FIELDS",
    "DEFAULT_COLLECTION",
    "Book",
    "Page",
    "FindDescriptor",
    "UpdateDescriptor",
    "DeleteDescriptor",
    "AggregateDescriptor",
    "IndexDescriptor",
    "ExplainDescriptor",
    "QueryDescriptor",
    "QueryResult",
    "parse_descriptor",
    "dump_descriptor",
]
