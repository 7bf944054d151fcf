"""
Shared data models for the book query builder.

Descriptors are immutable and form a closed set of variants tagged by
``kind``. Each one is shaped so its parts can be handed to pymongo as-is.
"""

from numbers import Real
from typing import Annotated, Any, Dict, List, Literal, Mapping, Optional, Tuple, Union, get_args

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from book_query_builder.core.exceptions import InvalidFieldError, InvalidQueryError

DEFAULT_COLLECTION = "books"
BOOKS_PER_PAGE = 5

Direction = Literal[1, -1]
SortKey = Tuple[str, Direction]
ExplainVerbosity = Literal["queryPlanner", "executionStats", "allPlansExecution"]
EXPLAIN_VERBOSITIES: Tuple[str, ...] = get_args(ExplainVerbosity)

# Stages the builder assembles into pipelines
PIPELINE_STAGES = ("$group", "$addFields", "$sort", "$limit")


class Book(BaseModel):
    """A single book document."""

    title: str
    author: str
    genre: str
    published_year: int
    price: float
    in_stock: bool = True


BOOK_FIELDS: Tuple[str, ...] = tuple(Book.model_fields)


class Page(BaseModel):
    """Pagination window applied after sorting."""

    model_config = ConfigDict(frozen=True)

    limit: int = Field(..., gt=0)
    skip: int = Field(default=0, ge=0)

    @classmethod
    def number(cls, page: int, per_page: int = BOOKS_PER_PAGE) -> "Page":
        """
        Build the window for a 1-based page number.

        Args:
            page: Page number, starting at 1
            per_page: Number of books on each page

        Returns:
            Page with ``limit=per_page`` and the matching ``skip``
        """
        if page < 1:
            raise ValueError(f"page numbers start at 1, got {page}")
        return cls(limit=per_page, skip=(page - 1) * per_page)


class FrozenDict(dict):
    """Read-only dict. Hashable when its values are."""

    def _read_only(self, *args, **kwargs):
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = __delitem__ = __ior__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only

    def __hash__(self):
        return hash(frozenset(self.items()))

    def __reduce__(self):
        return type(self), (dict(self),)


class FrozenList(list):
    """Read-only list. Hashable when its items are."""

    def _read_only(self, *args, **kwargs):
        raise TypeError(f"{type(self).__name__} is read-only")

    __setitem__ = __delitem__ = __iadd__ = __imul__ = _read_only
    append = extend = insert = pop = remove = clear = sort = reverse = _read_only

    def __hash__(self):
        return hash(tuple(self))

    def __reduce__(self):
        return type(self), (list(self),)


def freeze(value: Any) -> Any:
    """Recursively turn dicts and lists into their read-only counterparts."""
    if isinstance(value, Mapping):
        return FrozenDict({key: freeze(item) for key, item in value.items()})
    if isinstance(value, list):
        return FrozenList(freeze(item) for item in value)
    if isinstance(value, tuple):
        return tuple(freeze(item) for item in value)
    return value


def thaw(value: Any) -> Any:
    """Plain, mutable deep copy of a frozen value, for handing to the driver."""
    if isinstance(value, Mapping):
        return {key: thaw(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [thaw(item) for item in value]
    return value


def _known_field(field: str) -> str:
    if field not in BOOK_FIELDS:
        raise InvalidFieldError(field, BOOK_FIELDS)
    return field


def _checked_criteria(criteria: Dict[str, Any]) -> FrozenDict:
    # criteria imports this module
    from book_query_builder.query.criteria import build_match

    return freeze(build_match(criteria))


def _checked_keys(keys: Tuple[SortKey, ...]) -> Tuple[SortKey, ...]:
    for field, _ in keys:
        _known_field(field)
    return keys


class _Descriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    collection: str = DEFAULT_COLLECTION


class FindDescriptor(_Descriptor):
    """Filter, projection, sort and pagination for ``find``."""

    kind: Literal["find"] = "find"
    criteria: Dict[str, Any] = Field(default_factory=FrozenDict)
    projection: Optional[Tuple[str, ...]] = None
    include_id: bool = False
    sort: Tuple[SortKey, ...] = ()
    limit: Optional[int] = Field(default=None, gt=0)
    skip: int = Field(default=0, ge=0)

    @field_validator("criteria")
    @classmethod
    def _validate_criteria(cls, criteria: Dict[str, Any]) -> FrozenDict:
        return _checked_criteria(criteria)

    @field_validator("projection")
    @classmethod
    def _validate_projection(cls, projection: Optional[Tuple[str, ...]]) -> Optional[Tuple[str, ...]]:
        if projection is not None:
            for field in projection:
                _known_field(field)
        return projection

    @field_validator("sort")
    @classmethod
    def _validate_sort(cls, sort: Tuple[SortKey, ...]) -> Tuple[SortKey, ...]:
        return _checked_keys(sort)

    def projection_document(self) -> Optional[Dict[str, int]]:
        """Projection as pymongo expects it, or None to return whole documents."""
        if self.projection is None:
            return None
        document = {field: 1 for field in self.projection}
        if not self.include_id:
            document["_id"] = 0
        return document

    def find_command(self) -> Dict[str, Any]:
        """The equivalent ``find`` database command."""
        command: Dict[str, Any] = {"find": self.collection, "filter": thaw(self.criteria)}
        projection = self.projection_document()
        if projection is not None:
            command["projection"] = projection
        if self.sort:
            command["sort"] = dict(self.sort)
        if self.skip:
            command["skip"] = self.skip
        if self.limit:
            command["limit"] = self.limit
        return command


class UpdateDescriptor(_Descriptor):
    """Single-document price update."""

    kind: Literal["update"] = "update"
    criteria: Dict[str, Any]
    update: Dict[str, Any]

    @field_validator("criteria")
    @classmethod
    def _validate_criteria(cls, criteria: Dict[str, Any]) -> FrozenDict:
        return _checked_criteria(criteria)

    @field_validator("update")
    @classmethod
    def _validate_update(cls, update: Dict[str, Any]) -> FrozenDict:
        changes = update.get("$set")
        if (
            set(update) != {"$set"}
            or not isinstance(changes, Mapping)
            or set(changes) != {"price"}
            or isinstance(changes["price"], bool)
            or not isinstance(changes["price"], Real)
        ):
            raise InvalidQueryError(
                f"Only {{'$set': {{'price': <number>}}}} updates are supported, got {update!r}"
            )
        return freeze(update)


class DeleteDescriptor(_Descriptor):
    """Single-document delete."""

    kind: Literal["delete"] = "delete"
    criteria: Dict[str, Any]

    @field_validator("criteria")
    @classmethod
    def _validate_criteria(cls, criteria: Dict[str, Any]) -> FrozenDict:
        return _checked_criteria(criteria)


class AggregateDescriptor(_Descriptor):
    """Ordered aggregation pipeline."""

    kind: Literal["aggregate"] = "aggregate"
    pipeline: Tuple[Dict[str, Any], ...]

    @field_validator("pipeline")
    @classmethod
    def _validate_pipeline(cls, pipeline: Tuple[Dict[str, Any], ...]) -> Tuple[FrozenDict, ...]:
        for stage in pipeline:
            if len(stage) != 1 or next(iter(stage)) not in PIPELINE_STAGES:
                raise InvalidQueryError(
                    f"Each stage must be one of {', '.join(PIPELINE_STAGES)}, got {stage!r}"
                )
        return freeze(pipeline)


class IndexDescriptor(_Descriptor):
    """Index creation over one field or a compound key."""

    kind: Literal["create_index"] = "create_index"
    keys: Tuple[SortKey, ...] = Field(..., min_length=1)
    name: Optional[str] = None
    unique: bool = False

    @field_validator("keys")
    @classmethod
    def _validate_keys(cls, keys: Tuple[SortKey, ...]) -> Tuple[SortKey, ...]:
        return _checked_keys(keys)

    @property
    def is_compound(self) -> bool:
        return len(self.keys) > 1

    def index_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {}
        if self.name:
            options["name"] = self.name
        if self.unique:
            options["unique"] = True
        return options


class ExplainDescriptor(_Descriptor):
    """Query-plan report for a find instead of its documents."""

    kind: Literal["explain"] = "explain"
    query: FindDescriptor
    verbosity: ExplainVerbosity = "executionStats"


QueryDescriptor = Annotated[
    Union[
        FindDescriptor,
        UpdateDescriptor,
        DeleteDescriptor,
        AggregateDescriptor,
        IndexDescriptor,
        ExplainDescriptor,
    ],
    Field(discriminator="kind"),
]

_descriptor_adapter: TypeAdapter = TypeAdapter(QueryDescriptor)


def parse_descriptor(data: Dict[str, Any]) -> QueryDescriptor:
    """
    Rebuild a descriptor from its serialized form.

    Args:
        data: Dictionary produced by ``dump_descriptor`` (or equivalent JSON)

    Returns:
        The descriptor variant named by ``data["kind"]``

    Raises:
        pydantic.ValidationError: If the payload does not describe a known variant
    """
    return _descriptor_adapter.validate_python(data)


def dump_descriptor(descriptor: QueryDescriptor) -> Dict[str, Any]:
    """JSON-compatible form of a descriptor."""
    return descriptor.model_dump(mode="json")


class QueryResult(BaseModel):
    """Standardized result of executing one descriptor."""

    kind: str
    total_hits: int = 0
    documents: List[Dict[str, Any]] = Field(default_factory=list)
    matched_count: Optional[int] = None
    modified_count: Optional[int] = None
    deleted_count: Optional[int] = None
    index_name: Optional[str] = None
    plan: Optional[Dict[str, Any]] = None
    acknowledged: bool = True
    metadata: Dict[str, Any] = Field(default_factory=dict)

    def summary(self) -> str:
        """One-line outcome in the terms that fit this kind of request."""
        if self.kind == "update":
            return f"matched {self.matched_count or 0}, modified {self.modified_count or 0}"
        if self.kind == "delete":
            return f"deleted {self.deleted_count or 0}"
        if self.kind == "create_index":
            return f"index {self.index_name}"
        if self.kind == "explain":
            returned = self.metadata.get("nReturned")
            if returned is None:
                return "plan only"
            return f"plan, {returned} document(s) returned"
        return f"{self.total_hits} document(s)"
