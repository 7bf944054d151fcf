"""
FastAPI REST API for the Book Query Builder.

Builds MongoDB request descriptors for the books collection. Descriptors are
returned, never executed.
"""

import os
from typing import Any, Dict, List, Literal, Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from book_query_builder import BookQueryBuilder, InvalidQueryError, Page
from book_query_builder.config import MongoSettings
from book_query_builder.core.models import dump_descriptor

app = FastAPI(
    title="Book Query Builder API",
    description="Build MongoDB find, update, delete, aggregation and index requests for a books collection",
    version="1.0.0",
)

settings = MongoSettings.from_env()

builder = BookQueryBuilder(collection_name=settings.collection_name)


class SortField(BaseModel):
    """Sort field specification."""
    field: str
    order: Literal["asc", "desc"] = "asc"


class FindRequest(BaseModel):
    """Request model for a find descriptor."""
    criteria: Dict[str, Any] = Field(default_factory=dict, description="Field to value, or to {\"$gt\": value}")
    projection: Optional[List[str]] = Field(None, description="Fields to return; _id is excluded")
    sort: List[SortField] = Field(default_factory=list)
    page: Optional[int] = Field(None, ge=1, description="1-based page number")
    per_page: int = Field(5, gt=0)


class ExplainRequest(BaseModel):
    criteria: Dict[str, Any] = Field(default_factory=dict)


class PriceUpdateRequest(BaseModel):
    title: str
    price: float


class DeleteRequest(BaseModel):
    title: str


class IndexRequest(BaseModel):
    """Index keys in priority order; more than one makes a compound index."""
    keys: List[SortField] = Field(..., min_length=1)
    name: Optional[str] = None
    unique: bool = False


AGGREGATIONS = {
    "average-price-by-genre": builder.average_price_by_genre,
    "top-author": builder.top_author_by_book_count,
    "count-by-decade": builder.count_by_decade,
}


def _invalid(error: InvalidQueryError) -> HTTPException:
    return HTTPException(status_code=422, detail=str(error))


@app.post("/queries/find")
async def build_find(request: FindRequest) -> Dict[str, Any]:
    """Build a find descriptor with optional projection, sort and pagination."""
    try:
        descriptor = builder.find_by(
            request.criteria,
            projection=request.projection,
            sort=[(s.field, s.order) for s in request.sort],
            page=Page.number(request.page, request.per_page) if request.page else None,
        )
    except InvalidQueryError as e:
        raise _invalid(e)
    return dump_descriptor(descriptor)


@app.post("/queries/explain")
async def build_explain(request: ExplainRequest) -> Dict[str, Any]:
    try:
        descriptor = builder.explain_find(request.criteria)
    except InvalidQueryError as e:
        raise _invalid(e)
    return dump_descriptor(descriptor)


@app.post("/queries/update-price")
async def build_price_update(request: PriceUpdateRequest) -> Dict[str, Any]:
    return dump_descriptor(builder.update_one_price(request.title, request.price))


@app.post("/queries/delete")
async def build_delete(request: DeleteRequest) -> Dict[str, Any]:
    return dump_descriptor(builder.delete_one_by_title(request.title))


@app.post("/queries/index")
async def build_index(request: IndexRequest) -> Dict[str, Any]:
    try:
        descriptor = builder.ensure_index(
            [(k.field, k.order) for k in request.keys],
            name=request.name,
            unique=request.unique,
        )
    except InvalidQueryError as e:
        raise _invalid(e)
    return dump_descriptor(descriptor)


@app.get("/queries/aggregations/{name}")
async def build_aggregation(name: str) -> Dict[str, Any]:
    """Build one of the predefined aggregation pipelines."""
    build = AGGREGATIONS.get(name)
    if build is None:
        raise HTTPException(
            status_code=404,
            detail=f"Unknown aggregation {name!r}; available: {', '.join(AGGREGATIONS)}",
        )
    return dump_descriptor(build())


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("API_PORT", "8000"))
    host = os.getenv("API_HOST", "0.0.0.0")

    uvicorn.run(app, host=host, port=port)
