"""
Query orchestrator - main entry point.

Pairs the book query builder with an executor so a caller can build a
descriptor and run it in one step.
"""

import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from book_query_builder.config import MongoSettings
from book_query_builder.core.interfaces import IQueryExecutor
from book_query_builder.core.models import (
    DEFAULT_COLLECTION,
    Page,
    QueryDescriptor,
    dump_descriptor,
)
from book_query_builder.query.builder import BookQueryBuilder, SortSpec

logger = logging.getLogger(__name__)


class BookQueryOrchestrator:
    """
    Coordinates descriptor construction and execution.

    Without an executor the orchestrator still builds descriptors; asking it
    to execute one then raises ``ValueError``.
    """

    def __init__(
        self,
        builder: Optional[BookQueryBuilder] = None,
        executor: Optional[IQueryExecutor] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            builder: Query builder; a default one for ``books`` is created if omitted
            executor: Database-specific executor, optional
        """
        self.builder = builder or BookQueryBuilder()
        self.executor = executor

    @classmethod
    def from_mongodb(
        cls,
        mongo_uri: str,
        database_name: str,
        collection_name: str = DEFAULT_COLLECTION,
    ) -> "BookQueryOrchestrator":
        """
        Create orchestrator for MongoDB.

        Args:
            mongo_uri: MongoDB connection URI
            database_name: Name of the database
            collection_name: Name of the books collection

        Returns:
            Configured BookQueryOrchestrator for MongoDB
        """
        from book_query_builder.adapters.mongodb import MongoQueryExecutor

        executor = MongoQueryExecutor.from_uri(
            mongo_uri=mongo_uri,
            database_name=database_name,
            collection_name=collection_name,
        )
        return cls(builder=BookQueryBuilder(collection_name), executor=executor)

    @classmethod
    def from_settings(cls, settings: Optional[MongoSettings] = None) -> "BookQueryOrchestrator":
        """Create orchestrator for MongoDB from settings, read from the environment by default."""
        settings = settings or MongoSettings.from_env()
        return cls.from_mongodb(
            mongo_uri=settings.mongo_uri,
            database_name=settings.database_name,
            collection_name=settings.collection_name,
        )

    def query(self, descriptor: QueryDescriptor, execute: bool = True) -> Dict[str, Any]:
        """
        Optionally execute a descriptor.

        Args:
            descriptor: Descriptor built by the builder
            execute: If True, execute it and include the result

        Returns:
            Dictionary with the serialized descriptor and, when executed, ``results``

        Raises:
            ValueError: If execution is requested but no executor is configured
        """
        response: Dict[str, Any] = {"descriptor": dump_descriptor(descriptor)}

        if execute:
            if self.executor is None:
                raise ValueError("No executor configured. Use from_mongodb() or pass an executor.")
            response["results"] = self.executor.execute(descriptor)
            logger.info(
                "%s on %s: %s",
                descriptor.kind,
                descriptor.collection,
                response["results"].summary(),
            )

        return response

    def find_by(
        self,
        criteria: Optional[Mapping[str, Any]] = None,
        projection: Optional[Iterable[str]] = None,
        sort: Optional[SortSpec] = None,
        page: Optional[Page] = None,
        execute: bool = True,
    ) -> Dict[str, Any]:
        descriptor = self.builder.find_by(criteria, projection=projection, sort=sort, page=page)
        return self.query(descriptor, execute=execute)

    def update_one_price(self, title: str, new_price: float, execute: bool = True) -> Dict[str, Any]:
        return self.query(self.builder.update_one_price(title, new_price), execute=execute)

    def delete_one_by_title(self, title: str, execute: bool = True) -> Dict[str, Any]:
        return self.query(self.builder.delete_one_by_title(title), execute=execute)

    def average_price_by_genre(self, execute: bool = True) -> Dict[str, Any]:
        return self.query(self.builder.average_price_by_genre(), execute=execute)

    def top_author_by_book_count(self, execute: bool = True) -> Dict[str, Any]:
        return self.query(self.builder.top_author_by_book_count(), execute=execute)

    def count_by_decade(self, execute: bool = True) -> Dict[str, Any]:
        return self.query(self.builder.count_by_decade(), execute=execute)

    def ensure_index(self, field_spec: SortSpec, execute: bool = True, **options: Any) -> Dict[str, Any]:
        return self.query(self.builder.ensure_index(field_spec, **options), execute=execute)

    def explain_find(
        self, criteria: Optional[Mapping[str, Any]] = None, execute: bool = True
    ) -> Dict[str, Any]:
        return self.query(self.builder.explain_find(criteria), execute=execute)
