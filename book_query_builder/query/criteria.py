"""
Match criteria translation.

Turns a mapping of field names to conditions into a MongoDB filter document.
A plain value means equality; a mapping names an operator. Only equality and
greater-than are supported.
"""

from typing import Any, Dict, Iterable, Mapping, Optional

from book_query_builder.core.exceptions import InvalidFieldError, InvalidQueryError
from book_query_builder.core.models import BOOK_FIELDS

# Accepted spellings for each supported MongoDB comparison operator
OPERATORS: Dict[str, str] = {
    "$eq": "$eq",
    "is": "$eq",
    "=": "$eq",
    "$gt": "$gt",
    ">": "$gt",
}


def gt(value: Any) -> Dict[str, Any]:
    """Greater-than condition, e.g. ``{"published_year": gt(2010)}``."""
    return {"$gt": value}


def eq(value: Any) -> Dict[str, Any]:
    """Explicit equality condition."""
    return {"$eq": value}


def check_field(field: str, known_fields: Iterable[str] = BOOK_FIELDS) -> str:
    """
    Ensure a field name belongs to the book record.

    Raises:
        InvalidFieldError: If the field is unknown
    """
    known = tuple(known_fields)
    if field not in known:
        raise InvalidFieldError(field, known)
    return field


def translate_condition(
    field: str, condition: Any, known_fields: Iterable[str] = BOOK_FIELDS
) -> Dict[str, Any]:
    """
    Translate a single condition to a MongoDB query clause.

    Args:
        field: Book field the condition applies to
        condition: Plain value for equality, or a mapping of operator to operand
        known_fields: Field names accepted in criteria

    Returns:
        Clause such as ``{"genre": "Fiction"}`` or ``{"published_year": {"$gt": 2010}}``

    Raises:
        InvalidFieldError: If the field is unknown
        InvalidQueryError: If an operator other than equality or greater-than is used
    """
    check_field(field, known_fields)

    if not isinstance(condition, Mapping):
        return {field: condition}

    if not condition:
        raise InvalidQueryError(f"Empty condition for field {field!r}")

    clause: Dict[str, Any] = {}
    for operator, operand in condition.items():
        mongo_operator = OPERATORS.get(operator)
        if mongo_operator is None:
            raise InvalidQueryError(
                f"Unsupported operator {operator!r} for field {field!r}; "
                "only equality and greater-than are allowed"
            )
        clause[mongo_operator] = operand

    return {field: clause}


def build_match(
    criteria: Optional[Mapping[str, Any]], known_fields: Iterable[str] = BOOK_FIELDS
) -> Dict[str, Any]:
    """
    Build a filter document from criteria.

    Empty or missing criteria yield ``{}``, which matches every document.
    """
    known = tuple(known_fields)
    match: Dict[str, Any] = {}
    for field, condition in (criteria or {}).items():
        match.update(translate_condition(field, condition, known))
    return match
