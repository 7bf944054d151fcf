"""
Result formatting utilities.

Normalizes pymongo return values into ``QueryResult``.
"""

from typing import Any, Dict, Iterable, List

from bson import ObjectId
from pymongo.results import DeleteResult, UpdateResult

from book_query_builder.core.models import QueryResult


class ResultFormatter:
    """
    Formats driver results into a consistent structure.

    Documents get their ``ObjectId`` identifiers converted to strings so the
    result can be serialized as JSON; grouping keys are left untouched.
    """

    @staticmethod
    def format_document(document: Dict[str, Any]) -> Dict[str, Any]:
        if isinstance(document.get("_id"), ObjectId):
            document = dict(document)
            document["_id"] = str(document["_id"])
        return document

    @staticmethod
    def format_documents(kind: str, documents: Iterable[Dict[str, Any]]) -> QueryResult:
        """
        Format the documents returned by a find or an aggregation.

        Args:
            kind: Descriptor kind that produced the documents
            documents: Documents or cursor from the driver

        Returns:
            QueryResult with ``documents`` and ``total_hits`` set
        """
        formatted: List[Dict[str, Any]] = [
            ResultFormatter.format_document(document) for document in documents
        ]
        return QueryResult(kind=kind, total_hits=len(formatted), documents=formatted)

    @staticmethod
    def format_update(result: UpdateResult) -> QueryResult:
        return QueryResult(
            kind="update",
            matched_count=result.matched_count,
            modified_count=result.modified_count,
            acknowledged=result.acknowledged,
        )

    @staticmethod
    def format_delete(result: DeleteResult) -> QueryResult:
        return QueryResult(
            kind="delete",
            deleted_count=result.deleted_count,
            acknowledged=result.acknowledged,
        )

    @staticmethod
    def format_index(index_name: str) -> QueryResult:
        return QueryResult(kind="create_index", index_name=index_name)

    @staticmethod
    def format_plan(plan: Dict[str, Any]) -> QueryResult:
        """Keep the whole explain output and lift the headline execution stats."""
        stats = plan.get("executionStats", {})
        metadata = {
            key: stats[key]
            for key in ("nReturned", "totalKeysExamined", "totalDocsExamined", "executionTimeMillis")
            if key in stats
        }
        return QueryResult(kind="explain", plan=dict(plan), metadata=metadata)
