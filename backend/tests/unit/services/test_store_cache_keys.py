"""Cache keys for store listings are pure functions of the logical query."""

from __future__ import annotations

import pytest

from storerate.services.stores.cache import build_cache_key, namespace_prefix, normalize_sort


def test_same_logical_query_same_key():
    a = build_cache_key("stores", version=2, requester_id=7, search=" Pizza ", sort_by="rating", order="DESC")
    b = build_cache_key("stores", version=2, requester_id=7, search="pizza", sort_by="Rating", order="desc")
    assert a == b == "stores:v2:7:~pizza:rating:desc"


def test_anonymous_and_empty_search_sentinels():
    key = build_cache_key("stores", requester_id=None, search="  ", sort_by=None, order=None)
    assert key == "stores:v0:anon:all:name:asc"


@pytest.mark.parametrize(
    "other",
    [
        {"requester_id": 8, "search": "pizza", "sort_by": "rating", "order": "desc"},
        {"requester_id": 7, "search": "burger", "sort_by": "rating", "order": "desc"},
        {"requester_id": 7, "search": "pizza", "sort_by": "name", "order": "desc"},
        {"requester_id": 7, "search": "pizza", "sort_by": "rating", "order": "asc"},
        {"requester_id": 7, "search": None, "sort_by": "rating", "order": "desc"},
    ],
)
def test_distinct_queries_never_collide(other):
    base = build_cache_key("stores", requester_id=7, search="pizza", sort_by="rating", order="desc")
    assert build_cache_key("stores", **other) != base


def test_separator_in_search_is_escaped():
    tricky = build_cache_key("stores", requester_id=1, search="a:name", sort_by="rating", order="asc")
    assert tricky.count(":") == 5
    assert tricky != build_cache_key("stores", requester_id=1, search="a", sort_by="name", order="asc")


def test_search_for_the_word_all_does_not_alias_no_search():
    literal = build_cache_key("stores", requester_id=1, search="all", sort_by="name", order="asc")
    unfiltered = build_cache_key("stores", requester_id=1, search=None, sort_by="name", order="asc")
    assert literal != unfiltered


def test_version_separates_otherwise_identical_queries():
    query = {"requester_id": 7, "search": "pizza", "sort_by": "rating", "order": "desc"}
    assert build_cache_key("stores", version=1, **query) != build_cache_key("stores", version=2, **query)


def test_unknown_sort_inputs_collapse_to_defaults():
    assert normalize_sort("price", "sideways") == ("name", "asc")
    assert normalize_sort("rating", "desc") == ("rating", "desc")


def test_every_key_lives_under_the_namespace_prefix():
    key = build_cache_key("stores", requester_id=3, search="x", sort_by="name", order="asc")
    assert key.startswith(namespace_prefix("stores"))
