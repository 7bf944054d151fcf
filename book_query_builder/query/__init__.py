"""Query construction: criteria translation, pipeline stages and the builder."""

from book_query_builder.query.builder import BookQueryBuilder
from book_query_builder.query.criteria import build_match, eq, gt

__all__ = ["BookQueryBuilder", "build_match", "eq", "gt"]
