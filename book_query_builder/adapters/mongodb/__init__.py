"""MongoDB adapter for the book query builder."""

from book_query_builder.adapters.mongodb.executor import MongoQueryExecutor

__all__ = ["MongoQueryExecutor"]
