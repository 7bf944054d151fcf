"""
Example usage of the book query builder with MongoDB.

Runs the basic CRUD queries, the in-stock listings, the aggregation pipelines
and the index/explain checks against a live ``books`` collection.
"""

import json

from book_query_builder import BookQueryOrchestrator, Page
from book_query_builder.config import MongoSettings
from book_query_builder.query import gt


def show(title, response):
    """Print a descriptor and, if present, its results."""
    print("\n" + "=" * 80)
    print(title)
    print("=" * 80)
    print(json.dumps(response["descriptor"], indent=2))

    if "results" in response:
        result = response["results"]
        if result.documents:
            print(f"\n{result.total_hits} document(s):")
            for doc in result.documents[:10]:
                print(f"  {doc}")
        if result.matched_count is not None:
            print(f"matched={result.matched_count} modified={result.modified_count}")
        if result.deleted_count is not None:
            print(f"deleted={result.deleted_count}")
        if result.index_name:
            print(f"index: {result.index_name}")
        if result.plan is not None:
            print(f"execution stats: {result.metadata}")


def example_1_crud(orchestrator):
    """Basic finds, a price update and a delete."""
    show("Books in a genre", orchestrator.find_by({"genre": "Fiction"}))
    show("Books published after 1950", orchestrator.find_by({"published_year": gt(1950)}))
    show("Books by an author", orchestrator.find_by({"author": "George Orwell"}))
    show("Update a price", orchestrator.update_one_price("1984", 12.99))
    # Descriptor only; deleting from a shared collection is left to the reader
    show("Delete by title", orchestrator.delete_one_by_title("Moby Dick", execute=False))


def example_2_listings(orchestrator):
    """In-stock listings with projection, sorting and 5-per-page pagination."""
    builder = orchestrator.builder

    show(
        "In stock, published after 2010",
        orchestrator.query(builder.find_in_stock(published_after=2010)),
    )
    show("In stock by price (ascending)", orchestrator.query(builder.find_in_stock(sort_direction="asc")))
    show("In stock by price (descending)", orchestrator.query(builder.find_in_stock(sort_direction="desc")))

    for page in (1, 2):
        show(
            f"In stock by price, page {page}",
            orchestrator.query(builder.find_in_stock(sort_direction="asc", page=Page.number(page))),
        )


def example_3_aggregations(orchestrator):
    show("Average price by genre", orchestrator.average_price_by_genre())
    show("Author with the most books", orchestrator.top_author_by_book_count())
    show("Books per decade", orchestrator.count_by_decade())


def example_4_indexes(orchestrator):
    builder = orchestrator.builder

    show("Index on title", orchestrator.query(builder.title_index()))
    show("Compound index on author and published_year", orchestrator.query(builder.author_year_index()))
    show("Explain title lookup", orchestrator.explain_find({"title": "1984"}))
    show(
        "Explain author + year lookup",
        orchestrator.explain_find({"author": "George Orwell", "published_year": gt(1940)}),
    )


def main():
    settings = MongoSettings.from_env()
    print(f"Using {settings.database_name}.{settings.collection_name} at {settings.mongo_uri}")

    orchestrator = BookQueryOrchestrator.from_settings(settings)

    example_1_crud(orchestrator)
    example_2_listings(orchestrator)
    example_3_aggregations(orchestrator)
    example_4_indexes(orchestrator)


if __name__ == "__main__":
    main()
