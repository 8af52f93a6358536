"""Per-store aggregation query: mean, count, requester's own rating, filters and order."""

from __future__ import annotations

import pytest

from storerate.repositories import StoreRepository
from storerate.services.stores.dto import StoreAggregateOut
from tests.factories.store import RatingFactory, StoreFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def repo(session):
    return StoreRepository(session=session)


def _by_id(rows):
    return {row["id"]: row for row in rows}


def test_mean_and_count_for_rated_and_unrated_stores(repo, session):
    rated = StoreFactory(name="Pizza Hut")
    empty = StoreFactory(name="Quiet Corner")
    for value in (5, 4, 5):
        RatingFactory(store=rated, value=value)
    session.flush()

    rows = _by_id(repo.aggregate())

    assert rows[rated.id]["total_ratings"] == 3
    assert rows[rated.id]["average_rating"] == pytest.approx(14 / 3)
    assert StoreAggregateOut.from_row(rows[rated.id]).average_rating == 4.7
    assert rows[empty.id]["average_rating"] == 0
    assert rows[empty.id]["total_ratings"] == 0


def test_my_rating_is_projected_for_the_requester_only(repo, session):
    me = UserFactory()
    someone = UserFactory()
    store = StoreFactory()
    RatingFactory(user=me, store=store, value=2)
    RatingFactory(user=someone, store=store, value=5)
    session.flush()

    (mine,) = repo.aggregate(requester_id=me.id)
    (anonymous,) = repo.aggregate()

    assert mine["my_rating"] == 2
    assert mine["total_ratings"] == 2
    assert anonymous["my_rating"] is None


def test_search_matches_name_address_and_email_case_insensitively(repo, session):
    by_name = StoreFactory(name="Domino's Pizza", address="1 Road", email="d@example.com")
    by_address = StoreFactory(name="Corner Shop", address="9 PIZZA Plaza", email="c@example.com")
    by_email = StoreFactory(name="Bakery", address="3 Lane", email="pizzalover@example.com")
    StoreFactory(name="Burger Barn", address="5 Way", email="b@example.com")
    session.flush()

    ids = {row["id"] for row in repo.aggregate(search="pIzZa")}

    assert ids == {by_name.id, by_address.id, by_email.id}


def test_search_wildcards_are_literal(repo, session):
    StoreFactory(name="Fifty Percent Off")
    StoreFactory(name="100% Organic")
    session.flush()

    names = [row["name"] for row in repo.aggregate(search="%")]

    assert names == ["100% Organic"]


def test_sort_by_rating_descending(repo, session):
    low = StoreFactory(name="A Low")
    high = StoreFactory(name="B High")
    unrated = StoreFactory(name="C None")
    RatingFactory(store=low, value=2)
    RatingFactory(store=high, value=5)
    session.flush()

    order = [row["id"] for row in repo.aggregate(sort_by="rating", descending=True)]

    assert order.index(high.id) < order.index(low.id) < order.index(unrated.id)


def test_sort_by_name_ascending_is_default(repo, session):
    StoreFactory(name="Zeta Store")
    StoreFactory(name="Alpha Store")
    session.flush()

    names = [row["name"] for row in repo.aggregate()]

    assert names == sorted(names)
