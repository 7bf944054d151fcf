"""
Abstract interfaces for database adapters.

These protocols define the contract an executor must implement to run
descriptors built by the query builder.
"""

from typing import Protocol

from book_query_builder.core.models import QueryDescriptor, QueryResult


class IQueryExecutor(Protocol):
    """
    Execute query descriptors against a document store.

    Implementations hand each descriptor to the store's driver unchanged and
    normalize whatever comes back into a ``QueryResult``. Driver errors are
    not caught.
    """

    def execute(self, descriptor: QueryDescriptor) -> QueryResult:
        """
        Execute one descriptor.

        Args:
            descriptor: Any descriptor variant produced by the query builder

        Returns:
            Normalized result for the descriptor's kind
        """
        ...
