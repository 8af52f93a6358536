"""A visitor registers, rates a store, re-rates it and watches the aggregates follow."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select

from storerate.models.rating import Rating
from tests.factories.store import RatingFactory, StoreFactory
from tests.helpers.http import build_url, json_headers


@pytest.fixture()
def rated_store(session):
    store = StoreFactory(name="Pizza Hut")
    for value in (4, 4):
        RatingFactory(store=store, value=value)
    session.commit()
    return store.id


def test_rating_lifecycle(client, session, admin, rated_store):
    stats_before = client.get(build_url("/stats"), headers=admin.headers).get_json()["data"]

    register = client.post(
        build_url("/register"),
        json={"name": "Jordan Smith Two", "email": "jordan@example.com", "password": "Secret@123"},
    )
    assert register.status_code == 200

    login = client.post(build_url("/login"), json={"email": "jordan@example.com", "password": "Secret@123"})
    data = login.get_json()["data"]
    user_id = data["user"]["id"]
    headers = json_headers(data["access_token"])

    first = client.post(
        build_url("/ratings"),
        json={"user_id": user_id, "store_id": rated_store, "rating": 5, "comment": "Great"},
        headers=headers,
    )
    assert first.get_json()["message"] == "Rating submitted successfully"

    stats_after = client.get(build_url("/stats"), headers=admin.headers).get_json()["data"]
    assert stats_after["total_users"] == stats_before["total_users"] + 1
    assert stats_after["total_ratings"] == stats_before["total_ratings"] + 1

    (store,) = client.get(build_url("/stores", search="pizza"), headers=headers).get_json()["data"]
    assert store["total_ratings"] == 3
    assert store["average_rating"] == 4.3  # (4 + 4 + 5) / 3
    assert store["my_rating"] == 5

    second = client.post(
        build_url("/ratings"),
        json={"user_id": user_id, "store_id": rated_store, "rating": 3},
        headers=headers,
    )
    assert second.get_json()["message"] == "Rating updated successfully"

    (store,) = client.get(build_url("/stores", search="pizza"), headers=headers).get_json()["data"]
    assert store["total_ratings"] == 3
    assert store["average_rating"] == 3.7  # (4 + 4 + 3) / 3
    assert store["my_rating"] == 3

    count = session.execute(
        select(func.count(Rating.id)).where(Rating.user_id == user_id, Rating.store_id == rated_store)
    ).scalar_one()
    assert count == 1

    mine = client.get(build_url(f"/users/{user_id}/ratings"), headers=headers).get_json()["data"]
    assert [(r["store_name"], r["rating"], r["comment"]) for r in mine] == [("Pizza Hut", 3, None)]
