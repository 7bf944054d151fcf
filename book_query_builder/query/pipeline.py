"""
Aggregation pipeline stage builders.

Each helper returns one stage (or expression) exactly as the aggregation
engine expects it. Nothing here talks to the database.
"""

from typing import Any, Dict, Tuple


def field_ref(field: str) -> str:
    """Reference a document field inside an expression (``"$price"``)."""
    return f"${field}"


def avg(field: str) -> Dict[str, Any]:
    return {"$avg": field_ref(field)}


def count() -> Dict[str, Any]:
    return {"$sum": 1}


def decade_of(field: str) -> Dict[str, Any]:
    """Expression for ``year - year % 10``."""
    ref = field_ref(field)
    return {"$subtract": [ref, {"$mod": [ref, 10]}]}


def group_stage(group_id: Any, **accumulators: Dict[str, Any]) -> Dict[str, Any]:
    """
    Build a ``$group`` stage.

    Args:
        group_id: Grouping key, usually a field reference
        **accumulators: Output field name to accumulator expression

    Returns:
        ``{"$group": {"_id": group_id, ...}}``
    """
    group: Dict[str, Any] = {"_id": group_id}
    group.update(accumulators)
    return {"$group": group}


def add_fields_stage(**fields: Any) -> Dict[str, Any]:
    return {"$addFields": dict(fields)}


def sort_stage(*keys: Tuple[str, int]) -> Dict[str, Any]:
    # Dict order is the sort priority
    return {"$sort": {field: direction for field, direction in keys}}


def limit_stage(limit: int) -> Dict[str, Any]:
    if limit < 1:
        raise ValueError(f"$limit must be positive, got {limit}")
    return {"$limit": limit}
