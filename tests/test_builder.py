"""
BookQueryBuilder tests.

Each descriptor is compared with the request the mongo shell snippets send.
"""

import pytest
from pydantic import ValidationError

from book_query_builder import BookQueryBuilder, InvalidFieldError, InvalidQueryError, Page
from book_query_builder.core.models import (
    AggregateDescriptor,
    DeleteDescriptor,
    ExplainDescriptor,
    FindDescriptor,
    IndexDescriptor,
    UpdateDescriptor,
)
from book_query_builder.query import gt


class TestFindBy:
    def test_empty_criteria_matches_all(self, builder):
        for descriptor in (builder.find_by(), builder.find_by({}), builder.find_by(None)):
            assert isinstance(descriptor, FindDescriptor)
            assert descriptor.criteria == {}
            assert descriptor.find_command()["filter"] == {}

    def test_defaults(self, builder):
        descriptor = builder.find_by({"genre": "Fiction"})

        assert descriptor.kind == "find"
        assert descriptor.collection == "books"
        assert descriptor.criteria == {"genre": "Fiction"}
        assert descriptor.projection_document() is None
        assert descriptor.sort == ()
        assert descriptor.limit is None
        assert descriptor.skip == 0

    def test_projection_excludes_id(self, builder):
        descriptor = builder.find_by(
            {"in_stock": True, "published_year": gt(2010)},
            projection=["title", "author", "price"],
        )

        assert descriptor.criteria == {"in_stock": True, "published_year": {"$gt": 2010}}
        assert descriptor.projection_document() == {"title": 1, "author": 1, "price": 1, "_id": 0}

    def test_projection_can_keep_id(self, builder):
        descriptor = builder.find_by(projection=["title"], include_id=True)

        assert descriptor.projection_document() == {"title": 1}

    def test_sort_and_page(self, builder):
        descriptor = builder.find_by(
            {"in_stock": True}, sort=[("price", 1)], page=Page(limit=5, skip=0)
        )

        assert descriptor.sort == (("price", 1),)
        assert descriptor.limit == 5
        assert descriptor.skip == 0

    @pytest.mark.parametrize(
        "direction, expected",
        [(1, 1), (-1, -1), ("asc", 1), ("desc", -1), ("DESC", -1), ("ascending", 1)],
    )
    def test_sort_directions(self, builder, direction, expected):
        assert builder.find_by(sort=[("price", direction)]).sort == (("price", expected),)

    def test_sort_mapping_keeps_priority(self, builder):
        descriptor = builder.find_by(sort={"author": 1, "published_year": -1})

        assert descriptor.sort == (("author", 1), ("published_year", -1))

    def test_invalid_sort_direction(self, builder):
        with pytest.raises(InvalidQueryError, match="Invalid direction"):
            builder.find_by(sort=[("price", 2)])

    @pytest.mark.parametrize("direction", [True, False, [1], {"asc": 1}, None, 1.0])
    def test_direction_must_be_int_or_keyword(self, builder, direction):
        with pytest.raises(InvalidQueryError, match="Invalid direction"):
            builder.find_by(sort=[("price", direction)])

    def test_unhashable_index_direction(self, builder):
        with pytest.raises(InvalidQueryError):
            builder.ensure_index([("title", [1])])

    def test_unknown_criteria_field(self, builder):
        with pytest.raises(InvalidFieldError):
            builder.find_by({"isbn": "0451524934"})

    def test_unknown_projection_field(self, builder):
        with pytest.raises(InvalidFieldError):
            builder.find_by(projection=["title", "pages"])

    def test_unknown_sort_field(self, builder):
        with pytest.raises(InvalidFieldError):
            builder.find_by(sort=[("rating", -1)])

    def test_unsupported_operator(self, builder):
        with pytest.raises(InvalidQueryError):
            builder.find_by({"price": {"$lt": 10}})

    def test_find_command(self, builder):
        descriptor = builder.find_by(
            {"in_stock": True},
            projection=["title"],
            sort=[("price", -1)],
            page=Page.number(3),
        )

        assert descriptor.find_command() == {
            "find": "books",
            "filter": {"in_stock": True},
            "projection": {"title": 1, "_id": 0},
            "sort": {"price": -1},
            "skip": 10,
            "limit": 5,
        }

    def test_descriptor_is_immutable(self, builder):
        descriptor = builder.find_by({"genre": "Fiction"})

        with pytest.raises(ValidationError):
            descriptor.limit = 10


class TestConvenienceFinders:
    def test_by_genre(self, builder):
        assert builder.find_by_genre("Fantasy").criteria == {"genre": "Fantasy"}

    def test_by_author(self, builder):
        assert builder.find_by_author("Jane Austen").criteria == {"author": "Jane Austen"}

    def test_published_after(self, builder):
        assert builder.find_published_after(1950).criteria == {"published_year": {"$gt": 1950}}

    def test_finder_options_pass_through(self, builder):
        descriptor = builder.find_by_genre("Fantasy", projection=["title"])

        assert descriptor.projection == ("title",)

    def test_in_stock_listing(self, builder):
        descriptor = builder.find_in_stock(published_after=2010)

        assert descriptor.criteria == {"in_stock": True, "published_year": {"$gt": 2010}}
        assert descriptor.projection_document() == {"title": 1, "author": 1, "price": 1, "_id": 0}
        assert descriptor.sort == ()

    def test_in_stock_listing_sorted_and_paged(self, builder):
        descriptor = builder.find_in_stock(sort_direction="desc", page=Page.number(2))

        assert descriptor.criteria == {"in_stock": True}
        assert descriptor.sort == (("price", -1),)
        assert (descriptor.limit, descriptor.skip) == (5, 5)


class TestWrites:
    def test_update_one_price(self, builder):
        descriptor = builder.update_one_price("1984", 12.49)

        assert isinstance(descriptor, UpdateDescriptor)
        assert descriptor.criteria == {"title": "1984"}
        assert descriptor.update == {"$set": {"price": 12.49}}

    @pytest.mark.parametrize("price", ["12.49", True, None])
    def test_price_must_be_a_number(self, builder, price):
        with pytest.raises(InvalidQueryError, match="Price must be a number"):
            builder.update_one_price("1984", price)

    def test_delete_one_by_title(self, builder):
        descriptor = builder.delete_one_by_title("Animal Farm")

        assert isinstance(descriptor, DeleteDescriptor)
        assert descriptor.criteria == {"title": "Animal Farm"}


class TestAggregations:
    def test_average_price_by_genre(self, builder):
        descriptor = builder.average_price_by_genre()

        assert isinstance(descriptor, AggregateDescriptor)
        assert list(descriptor.pipeline) == [
            {"$group": {"_id": "$genre", "averagePrice": {"$avg": "$price"}}}
        ]

    def test_top_author_by_book_count(self, builder):
        assert list(builder.top_author_by_book_count().pipeline) == [
            {"$group": {"_id": "$author", "bookCount": {"$sum": 1}}},
            {"$sort": {"bookCount": -1}},
            {"$limit": 1},
        ]

    def test_count_by_decade(self, builder):
        assert list(builder.count_by_decade().pipeline) == [
            {
                "$addFields": {
                    "decade": {
                        "$subtract": ["$published_year", {"$mod": ["$published_year", 10]}]
                    }
                }
            },
            {"$group": {"_id": "$decade", "bookCount": {"$sum": 1}}},
            {"$sort": {"_id": 1}},
        ]


class TestIndexes:
    def test_single_field(self, builder):
        descriptor = builder.ensure_index({"title": 1})

        assert isinstance(descriptor, IndexDescriptor)
        assert descriptor.keys == (("title", 1),)
        assert not descriptor.is_compound

    def test_compound(self, builder):
        descriptor = builder.ensure_index({"author": 1, "published_year": 1})

        assert descriptor.keys == (("author", 1), ("published_year", 1))
        assert descriptor.is_compound

    def test_single_and_compound_are_distinct(self, builder):
        assert builder.title_index() != builder.author_year_index()
        assert builder.title_index() == builder.ensure_index({"title": 1})
        assert builder.author_year_index() == builder.ensure_index(
            {"author": 1, "published_year": 1}
        )

    def test_options(self, builder):
        descriptor = builder.ensure_index([("title", "asc")], name="title_lookup", unique=True)

        assert descriptor.index_options() == {"name": "title_lookup", "unique": True}

    def test_no_options_by_default(self, builder):
        assert builder.title_index().index_options() == {}

    def test_needs_a_field(self, builder):
        with pytest.raises(InvalidQueryError):
            builder.ensure_index({})

    def test_unknown_field(self, builder):
        with pytest.raises(InvalidFieldError):
            builder.ensure_index({"isbn": 1})


class TestExplain:
    def test_explain_find(self, builder):
        descriptor = builder.explain_find({"author": "George Orwell", "published_year": gt(1940)})

        assert isinstance(descriptor, ExplainDescriptor)
        assert descriptor.verbosity == "executionStats"
        assert descriptor.query.criteria == {
            "author": "George Orwell",
            "published_year": {"$gt": 1940},
        }

    def test_other_verbosity(self, builder):
        assert builder.explain_find({"title": "1984"}, verbosity="queryPlanner").verbosity == "queryPlanner"

    def test_invalid_verbosity(self, builder):
        with pytest.raises(InvalidQueryError, match="Invalid explain verbosity"):
            builder.explain_find({"title": "1984"}, verbosity="everything")


class TestCustomCollection:
    def test_collection_name_flows_to_descriptors(self):
        builder = BookQueryBuilder(collection_name="archive")

        assert builder.find_by().collection == "archive"
        assert builder.count_by_decade().collection == "archive"
        assert builder.title_index().collection == "archive"
        assert builder.explain_find().query.find_command()["find"] == "archive"
