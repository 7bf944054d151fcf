"""
Exceptions raised while building query descriptors.

Errors raised by the database itself (connection loss, duplicate keys, ...)
are pymongo exceptions and are never wrapped here.
"""

from typing import Iterable


class InvalidQueryError(ValueError):
    """A query intent cannot be translated into a descriptor."""


class InvalidFieldError(InvalidQueryError):
    """A query refers to a field that books do not have."""

    def __init__(self, field: str, known_fields: Iterable[str]):
        self.field = field
        self.known_fields = tuple(known_fields)
        super().__init__(
            f"Unknown book field {field!r}; expected one of: {', '.join(self.known_fields)}"
        )
