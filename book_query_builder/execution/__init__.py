"""Result formatting for executed descriptors."""

from book_query_builder.execution.result_formatter import ResultFormatter

__all__ = ["ResultFormatter"]
