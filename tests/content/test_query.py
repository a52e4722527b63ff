"""Tests for the query engine: filtering, search and ordering."""

from datetime import UTC, datetime, timedelta

import pytest
from randpick.content.models import Category, ContentItem, QuerySpec, SortDirection, SortKey
from randpick.content.query import QueryEngine, collation_key, run_query
from randpick.content.storage import MemoryStorage
from randpick.content.store import ContentStore

BASE = datetime(2025, 1, 1, 12, 0, tzinfo=UTC)


def _item(item_id: int, text: str, category: Category, minutes: int = 0) -> ContentItem:
    return ContentItem(
        id=item_id,
        text=text,
        category=category,
        created_at=BASE + timedelta(minutes=minutes),
        display_label="",
    )


@pytest.fixture
def collection() -> list[ContentItem]:
    return [
        _item(1, "3BR house near lake", Category.HOUSE, minutes=0),
        _item(2, "Studio flat downtown", Category.APARTMENT, minutes=5),
        _item(3, "Plot with river access", Category.LAND, minutes=2),
        _item(4, "Farmhouse with barn", Category.HOUSE, minutes=9),
        _item(5, "Land next to the lake", Category.LAND, minutes=7),
    ]


def _ids(items: list[ContentItem]) -> list[int]:
    return [i.id for i in items]


class TestFiltering:
    def test_empty_collection(self):
        assert run_query([], QuerySpec()) == []

    def test_all_keeps_everything(self, collection):
        assert sorted(_ids(run_query(collection, QuerySpec(category="all")))) == [1, 2, 3, 4, 5]

    @pytest.mark.parametrize("category", list(Category))
    def test_category_filter(self, collection, category: Category):
        results = run_query(collection, QuerySpec(category=category))
        expected = {i.id for i in collection if i.category is category}
        assert {i.id for i in results} == expected
        assert all(i.category is category for i in results)

    def test_filter_without_matches(self):
        items = [_item(1, "Loft", Category.APARTMENT)]
        assert run_query(items, QuerySpec(category=Category.LAND)) == []

    def test_search_substring(self, collection):
        results = run_query(collection, QuerySpec(search="lake"))
        assert sorted(_ids(results)) == [1, 5]

    def test_search_is_case_insensitive(self, collection):
        upper = run_query(collection, QuerySpec(search="HOUSE"))
        lower = run_query(collection, QuerySpec(search="house"))
        assert _ids(upper) == _ids(lower)
        assert sorted(_ids(upper)) == [1, 4]

    def test_search_casefolds(self):
        items = [_item(1, "Große Wohnung", Category.APARTMENT)]
        assert _ids(run_query(items, QuerySpec(search="GROSSE"))) == [1]

    def test_search_no_match(self, collection):
        assert run_query(collection, QuerySpec(search="castle")) == []

    def test_category_and_search_combined(self, collection):
        results = run_query(collection, QuerySpec(category="land", search="LAKE"))
        assert _ids(results) == [5]

    def test_filter_excludes_nothing_it_should_keep(self, collection):
        spec = QuerySpec(category=Category.HOUSE, search="house")
        results = run_query(collection, spec)
        matching = [
            i for i in collection
            if i.category is Category.HOUSE and "house" in i.text.casefold()
        ]
        assert {i.id for i in results} == {i.id for i in matching}


class TestOrdering:
    def test_created_ascending(self, collection):
        spec = QuerySpec(sort_key=SortKey.CREATED, direction=SortDirection.ASC)
        assert _ids(run_query(collection, spec)) == [1, 3, 2, 5, 4]

    def test_created_descending(self, collection):
        spec = QuerySpec(sort_key=SortKey.CREATED, direction=SortDirection.DESC)
        assert _ids(run_query(collection, spec)) == [4, 5, 2, 3, 1]

    def test_default_is_newest_first(self, collection):
        assert _ids(run_query(collection)) == [4, 5, 2, 3, 1]

    def test_directions_are_reverses_without_ties(self, collection):
        asc = run_query(collection, QuerySpec(direction=SortDirection.ASC))
        desc = run_query(collection, QuerySpec(direction=SortDirection.DESC))
        assert _ids(asc) == list(reversed(_ids(desc)))

    def test_created_ties_keep_insertion_order_both_directions(self):
        items = [
            _item(1, "a", Category.HOUSE, minutes=1),
            _item(2, "b", Category.HOUSE, minutes=0),
            _item(3, "c", Category.HOUSE, minutes=1),
            _item(4, "d", Category.HOUSE, minutes=0),
        ]
        asc = run_query(items, QuerySpec(direction=SortDirection.ASC))
        desc = run_query(items, QuerySpec(direction=SortDirection.DESC))
        assert _ids(asc) == [2, 4, 1, 3]
        assert _ids(desc) == [1, 3, 2, 4]

    def test_alphabetical_ascending(self, collection):
        spec = QuerySpec(sort_key=SortKey.ALPHABETICAL, direction=SortDirection.ASC)
        texts = [i.text for i in run_query(collection, spec)]
        assert texts == [
            "3BR house near lake",
            "Farmhouse with barn",
            "Land next to the lake",
            "Plot with river access",
            "Studio flat downtown",
        ]

    def test_alphabetical_descending(self, collection):
        spec = QuerySpec(sort_key=SortKey.ALPHABETICAL, direction=SortDirection.DESC)
        texts = [i.text for i in run_query(collection, spec)]
        assert texts[0] == "Studio flat downtown"
        assert texts[-1] == "3BR house near lake"

    def test_alphabetical_ignores_case(self):
        items = [
            _item(1, "banana", Category.LAND),
            _item(2, "Apple", Category.LAND),
            _item(3, "cherry", Category.LAND),
        ]
        spec = QuerySpec(sort_key=SortKey.ALPHABETICAL, direction=SortDirection.ASC)
        assert _ids(run_query(items, spec)) == [2, 1, 3]

    def test_alphabetical_ignores_accents(self):
        items = [
            _item(1, "eagle", Category.LAND),
            _item(2, "école", Category.LAND),
            _item(3, "fern", Category.LAND),
        ]
        spec = QuerySpec(sort_key=SortKey.ALPHABETICAL, direction=SortDirection.ASC)
        assert _ids(run_query(items, spec)) == [1, 2, 3]

    def test_alphabetical_ties_keep_insertion_order_both_directions(self):
        items = [
            _item(1, "same", Category.LAND, minutes=3),
            _item(2, "other", Category.LAND),
            _item(3, "same", Category.LAND, minutes=1),
        ]
        asc = run_query(items, QuerySpec(sort_key=SortKey.ALPHABETICAL, direction=SortDirection.ASC))
        desc = run_query(items, QuerySpec(sort_key=SortKey.ALPHABETICAL, direction=SortDirection.DESC))
        assert _ids(asc) == [2, 1, 3]
        assert _ids(desc) == [1, 3, 2]


class TestPurity:
    def test_input_not_mutated(self, collection):
        before = list(collection)
        run_query(collection, QuerySpec(sort_key=SortKey.ALPHABETICAL))
        assert collection == before

    def test_returns_new_list(self, collection):
        result = run_query(collection, QuerySpec(direction=SortDirection.ASC))
        assert result is not collection

    def test_accepts_tuple(self, collection):
        assert len(run_query(tuple(collection))) == 5


class TestCollationKey:
    def test_case_groups_before_raw(self):
        assert collation_key("apple") < collation_key("Banana")

    def test_total_order_on_case_variants(self):
        assert collation_key("Apple") != collation_key("apple")


class TestQueryEngine:
    def test_runs_against_store_snapshot(self):
        store = ContentStore(MemoryStorage())
        store.initialize()
        first = store.add("3BR house near lake", Category.HOUSE)
        store.add("Studio flat downtown", Category.APARTMENT)

        engine = QueryEngine(store)
        assert engine.run(QuerySpec(category="house")) == [first]

    def test_sees_later_mutations(self):
        store = ContentStore(MemoryStorage())
        store.initialize()
        engine = QueryEngine(store)
        assert engine.count() == 0
        store.add("Plot", Category.LAND)
        assert engine.count() == 1
