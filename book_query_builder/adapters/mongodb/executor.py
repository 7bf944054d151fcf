"""
MongoDB query executor.

Hands descriptors to pymongo and returns normalized results.
"""

import logging

from pymongo import MongoClient
from pymongo.collection import Collection

from book_query_builder.core.models import (
    DEFAULT_COLLECTION,
    AggregateDescriptor,
    DeleteDescriptor,
    ExplainDescriptor,
    FindDescriptor,
    IndexDescriptor,
    QueryDescriptor,
    QueryResult,
    UpdateDescriptor,
    thaw,
)
from book_query_builder.execution.result_formatter import ResultFormatter

logger = logging.getLogger(__name__)


class MongoQueryExecutor:
    """
    Executes book query descriptors with pymongo.

    Implements the IQueryExecutor interface for MongoDB. There is no retry
    or recovery: any pymongo exception reaches the caller as raised.
    """

    def __init__(self, collection: Collection):
        """
        Initialize MongoDB query executor.

        Args:
            collection: Collection descriptors run against by default. Descriptors
                naming another collection use the sibling collection in the same database.
        """
        self.collection = collection

    @classmethod
    def from_uri(
        cls,
        mongo_uri: str,
        database_name: str,
        collection_name: str = DEFAULT_COLLECTION,
    ) -> "MongoQueryExecutor":
        """
        Connect to MongoDB and bind an executor to a collection.

        Args:
            mongo_uri: MongoDB connection URI
            database_name: Name of the database
            collection_name: Name of the collection
        """
        client: MongoClient = MongoClient(mongo_uri)
        return cls(client[database_name][collection_name])

    def execute(self, descriptor: QueryDescriptor) -> QueryResult:
        """
        Execute a single descriptor.

        Args:
            descriptor: Descriptor built by BookQueryBuilder

        Returns:
            QueryResult for the descriptor's kind
        """
        handlers = {
            "find": self._execute_find,
            "update": self._execute_update,
            "delete": self._execute_delete,
            "aggregate": self._execute_aggregate,
            "create_index": self._execute_create_index,
            "explain": self._execute_explain,
        }
        handler = handlers.get(descriptor.kind)
        if handler is None:
            raise ValueError(f"Unsupported descriptor kind: {descriptor.kind!r}")

        logger.debug("Executing %s on %s", descriptor.kind, descriptor.collection)
        return handler(descriptor)

    def _collection_for(self, descriptor: QueryDescriptor) -> Collection:
        if descriptor.collection == self.collection.name:
            return self.collection
        return self.collection.database[descriptor.collection]

    def _execute_find(self, descriptor: FindDescriptor) -> QueryResult:
        cursor = self._collection_for(descriptor).find(
            thaw(descriptor.criteria), descriptor.projection_document()
        )
        if descriptor.sort:
            cursor = cursor.sort(list(descriptor.sort))
        if descriptor.skip:
            cursor = cursor.skip(descriptor.skip)
        if descriptor.limit:
            cursor = cursor.limit(descriptor.limit)
        return ResultFormatter.format_documents("find", cursor)

    def _execute_update(self, descriptor: UpdateDescriptor) -> QueryResult:
        result = self._collection_for(descriptor).update_one(
            thaw(descriptor.criteria), thaw(descriptor.update)
        )
        return ResultFormatter.format_update(result)

    def _execute_delete(self, descriptor: DeleteDescriptor) -> QueryResult:
        result = self._collection_for(descriptor).delete_one(thaw(descriptor.criteria))
        return ResultFormatter.format_delete(result)

    def _execute_aggregate(self, descriptor: AggregateDescriptor) -> QueryResult:
        documents = self._collection_for(descriptor).aggregate(thaw(descriptor.pipeline))
        return ResultFormatter.format_documents("aggregate", documents)

    def _execute_create_index(self, descriptor: IndexDescriptor) -> QueryResult:
        index_name = self._collection_for(descriptor).create_index(
            list(descriptor.keys), **descriptor.index_options()
        )
        logger.info("Index %s ready on %s", index_name, descriptor.collection)
        return ResultFormatter.format_index(index_name)

    def _execute_explain(self, descriptor: ExplainDescriptor) -> QueryResult:
        collection = self._collection_for(descriptor)
        plan = collection.database.command(
            "explain",
            descriptor.query.find_command(),
            verbosity=descriptor.verbosity,
        )
        return ResultFormatter.format_plan(plan)
