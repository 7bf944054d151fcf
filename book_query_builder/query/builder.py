"""
Book query builder.

Translates declarative intents (filter, project, sort, paginate, aggregate,
index, explain) into descriptors for the ``books`` collection. Building a
descriptor never touches the database.
"""

import logging
from numbers import Real
from typing import Any, Iterable, Mapping, Optional, Sequence, Tuple, Union

from pymongo import ASCENDING, DESCENDING

from book_query_builder.core.exceptions import InvalidQueryError
from book_query_builder.core.models import (
    BOOK_FIELDS,
    DEFAULT_COLLECTION,
    EXPLAIN_VERBOSITIES,
    AggregateDescriptor,
    DeleteDescriptor,
    ExplainDescriptor,
    FindDescriptor,
    IndexDescriptor,
    Page,
    UpdateDescriptor,
)
from book_query_builder.query import pipeline
from book_query_builder.query.criteria import build_match, check_field, gt

logger = logging.getLogger(__name__)

SortSpec = Union[Mapping[str, Any], Sequence[Tuple[str, Any]]]

# Fields returned by the in-stock listings
LISTING_PROJECTION = ("title", "author", "price")

_DIRECTIONS = {
    ASCENDING: ASCENDING,
    DESCENDING: DESCENDING,
    "asc": ASCENDING,
    "ascending": ASCENDING,
    "desc": DESCENDING,
    "descending": DESCENDING,
}


class BookQueryBuilder:
    """
    Builds request descriptors for a collection of books.

    Every method is a pure translation: it validates field names and returns
    an immutable descriptor. Execution, and behaviour when an update or
    delete matches zero or several documents, belong to the database.
    """

    def __init__(self, collection_name: str = DEFAULT_COLLECTION):
        """
        Initialize the query builder.

        Args:
            collection_name: Collection every descriptor targets
        """
        self.collection_name = collection_name

    # ------------------------------------------------------------------
    # find
    # ------------------------------------------------------------------

    def find_by(
        self,
        criteria: Optional[Mapping[str, Any]] = None,
        projection: Optional[Iterable[str]] = None,
        sort: Optional[SortSpec] = None,
        page: Optional[Page] = None,
        include_id: bool = False,
    ) -> FindDescriptor:
        """
        Build a find descriptor.

        Args:
            criteria: Field to value (equality) or to ``{"$gt": value}``.
                Empty or None matches every book.
            projection: Field names to return; ``_id`` is excluded unless
                ``include_id`` is set. None returns whole documents.
            sort: Ordered ``(field, direction)`` pairs, or a mapping in priority order
            page: Pagination window applied after sorting
            include_id: Keep ``_id`` in projected documents

        Returns:
            FindDescriptor

        Raises:
            InvalidQueryError: On unknown fields, operators or sort directions
        """
        descriptor = FindDescriptor(
            collection=self.collection_name,
            criteria=build_match(criteria, BOOK_FIELDS),
            projection=self._normalize_projection(projection),
            include_id=include_id,
            sort=self._normalize_keys(sort),
            limit=page.limit if page else None,
            skip=page.skip if page else 0,
        )
        logger.debug("Built find descriptor: %s", descriptor.criteria)
        return descriptor

    def find_by_genre(self, genre: str, **options: Any) -> FindDescriptor:
        return self.find_by({"genre": genre}, **options)

    def find_by_author(self, author: str, **options: Any) -> FindDescriptor:
        return self.find_by({"author": author}, **options)

    def find_published_after(self, year: int, **options: Any) -> FindDescriptor:
        return self.find_by({"published_year": gt(year)}, **options)

    def find_in_stock(
        self,
        published_after: Optional[int] = None,
        sort_direction: Optional[Union[int, str]] = None,
        page: Optional[Page] = None,
    ) -> FindDescriptor:
        """
        In-stock books listed by title, author and price.

        Args:
            published_after: Only books published strictly after this year
            sort_direction: Sort by price in this direction; unsorted if None
            page: Pagination window, e.g. ``Page.number(2)``
        """
        criteria: dict = {"in_stock": True}
        if published_after is not None:
            criteria["published_year"] = gt(published_after)
        sort = [("price", sort_direction)] if sort_direction is not None else None
        return self.find_by(criteria, projection=LISTING_PROJECTION, sort=sort, page=page)

    # ------------------------------------------------------------------
    # writes
    # ------------------------------------------------------------------

    def update_one_price(self, title: str, new_price: float) -> UpdateDescriptor:
        """Set the price of the first book with this title."""
        if isinstance(new_price, bool) or not isinstance(new_price, Real):
            raise InvalidQueryError(f"Price must be a number, got {new_price!r}")
        descriptor = UpdateDescriptor(
            collection=self.collection_name,
            criteria=build_match({"title": title}, BOOK_FIELDS),
            update={"$set": {"price": new_price}},
        )
        logger.debug("Built price update for %r -> %s", title, new_price)
        return descriptor

    def delete_one_by_title(self, title: str) -> DeleteDescriptor:
        """Delete the first book with this title."""
        descriptor = DeleteDescriptor(
            collection=self.collection_name,
            criteria=build_match({"title": title}, BOOK_FIELDS),
        )
        logger.debug("Built delete for %r", title)
        return descriptor

    # ------------------------------------------------------------------
    # aggregations
    # ------------------------------------------------------------------

    def average_price_by_genre(self) -> AggregateDescriptor:
        """Mean price per genre, as ``{"_id": genre, "averagePrice": ...}``."""
        return self._aggregate(
            pipeline.group_stage(
                pipeline.field_ref("genre"), averagePrice=pipeline.avg("price")
            ),
        )

    def top_author_by_book_count(self) -> AggregateDescriptor:
        """
        Author with the most books, as ``{"_id": author, "bookCount": n}``.

        Ties are broken by whatever order the database's grouping produces.
        """
        return self._aggregate(
            pipeline.group_stage(pipeline.field_ref("author"), bookCount=pipeline.count()),
            pipeline.sort_stage(("bookCount", DESCENDING)),
            pipeline.limit_stage(1),
        )

    def count_by_decade(self) -> AggregateDescriptor:
        """Number of books per publication decade, oldest decade first."""
        return self._aggregate(
            pipeline.add_fields_stage(decade=pipeline.decade_of("published_year")),
            pipeline.group_stage(pipeline.field_ref("decade"), bookCount=pipeline.count()),
            pipeline.sort_stage(("_id", ASCENDING)),
        )

    def _aggregate(self, *stages: dict) -> AggregateDescriptor:
        descriptor = AggregateDescriptor(collection=self.collection_name, pipeline=stages)
        logger.debug(
            "Built aggregation with stages %s",
            [next(iter(stage)) for stage in stages],
        )
        return descriptor

    # ------------------------------------------------------------------
    # indexes and plans
    # ------------------------------------------------------------------

    def ensure_index(
        self, field_spec: SortSpec, name: Optional[str] = None, unique: bool = False
    ) -> IndexDescriptor:
        """
        Build an index-creation descriptor.

        Args:
            field_spec: ``{"title": 1}`` or ``[("author", 1), ("published_year", 1)]``;
                more than one field makes a compound index
            name: Explicit index name; the database derives one if omitted
            unique: Create a unique index

        Raises:
            InvalidQueryError: If no field is given, or a field or direction is invalid
        """
        keys = self._normalize_keys(field_spec)
        if not keys:
            raise InvalidQueryError("An index needs at least one field")
        descriptor = IndexDescriptor(
            collection=self.collection_name, keys=keys, name=name, unique=unique
        )
        logger.debug("Built index descriptor on %s", keys)
        return descriptor

    def title_index(self) -> IndexDescriptor:
        return self.ensure_index({"title": ASCENDING})

    def author_year_index(self) -> IndexDescriptor:
        return self.ensure_index([("author", ASCENDING), ("published_year", ASCENDING)])

    def explain_find(
        self, criteria: Optional[Mapping[str, Any]] = None, verbosity: str = "executionStats"
    ) -> ExplainDescriptor:
        """
        Request the query plan and execution statistics of a find.

        Raises:
            InvalidQueryError: If verbosity is not one the explain command accepts
        """
        if verbosity not in EXPLAIN_VERBOSITIES:
            raise InvalidQueryError(
                f"Invalid explain verbosity {verbosity!r}; "
                f"expected one of {', '.join(EXPLAIN_VERBOSITIES)}"
            )
        return ExplainDescriptor(
            collection=self.collection_name,
            query=self.find_by(criteria),
            verbosity=verbosity,
        )

    # ------------------------------------------------------------------
    # helpers
    # ------------------------------------------------------------------

    def _normalize_projection(
        self, projection: Optional[Iterable[str]]
    ) -> Optional[Tuple[str, ...]]:
        if projection is None:
            return None
        if isinstance(projection, str):
            projection = [projection]
        return tuple(check_field(field, BOOK_FIELDS) for field in projection)

    def _normalize_keys(self, spec: Optional[SortSpec]) -> Tuple[Tuple[str, int], ...]:
        """Validate ``(field, direction)`` pairs for sorts and index keys."""
        if not spec:
            return ()
        pairs = spec.items() if isinstance(spec, Mapping) else spec

        keys = []
        for field, direction in pairs:
            check_field(field, BOOK_FIELDS)
            normalized = None
            if isinstance(direction, str):
                normalized = _DIRECTIONS.get(direction.lower())
            # bool is an int subclass; True must not pass as ascending
            elif isinstance(direction, int) and not isinstance(direction, bool):
                normalized = _DIRECTIONS.get(direction)
            if normalized is None:
                raise InvalidQueryError(
                    f"Invalid direction {direction!r} for field {field!r}; use 1/-1 or asc/desc"
                )
            keys.append((field, normalized))
        return tuple(keys)
