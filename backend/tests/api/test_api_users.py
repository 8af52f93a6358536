"""Endpoint tests for user administration and per-user/per-owner rating views."""

from __future__ import annotations

from storerate.models.user import User
from tests.factories.store import RatingFactory, StoreFactory
from tests.factories.user import OwnerFactory
from tests.helpers.assertions import assert_problem
from tests.helpers.http import build_url

USERS = build_url("/users")


class TestUserAdministration:
    def test_admin_lists_with_search_and_sort(self, client, admin, member, owner):
        resp = client.get(build_url("/users", sortBy="name", order="desc"), headers=admin.headers)

        assert resp.status_code == 200
        names = [u["name"] for u in resp.get_json()["data"]]
        assert names == ["Olivia Store Owner", "Bob Regular Member", "Alice Administrator"]

        owners = client.get(build_url("/users", search="store_owner"), headers=admin.headers)
        assert [u["id"] for u in owners.get_json()["data"]] == [owner.id]

    def test_listing_never_exposes_password_hash(self, client, admin):
        (user,) = client.get(USERS, headers=admin.headers).get_json()["data"]

        assert set(user) == {"id", "name", "email", "address", "role"}

    def test_invalid_sort_field_is_rejected(self, client, admin):
        resp = client.get(build_url("/users", sortBy="password_hash"), headers=admin.headers)

        assert_problem(resp, 400, code="validation_error")

    def test_non_admin_is_forbidden(self, client, member, owner):
        assert_problem(client.get(USERS, headers=member.headers), 403, "Access denied")
        assert_problem(client.get(USERS, headers=owner.headers), 403, "Access denied")

    def test_admin_creates_user_of_any_role(self, client, admin):
        resp = client.post(
            USERS,
            json={
                "name": "Second Administrator",
                "email": "second@example.com",
                "password": "Secret@123",
                "role": "admin",
            },
            headers=admin.headers,
        )

        assert resp.status_code == 201
        assert resp.get_json()["data"]["role"] == "admin"

    def test_create_duplicate_email(self, client, admin, member):
        resp = client.post(
            USERS,
            json={"name": "Bob Copy Member", "email": member.email, "password": "Secret@123"},
            headers=admin.headers,
        )

        assert_problem(resp, 400, "Email already exists", code="conflict")

    def test_create_with_dotless_email_domain_is_400(self, client, admin):
        resp = client.post(
            USERS,
            json={"name": "Local Host User", "email": "someone@localhost", "password": "Secret@123"},
            headers=admin.headers,
        )

        assert_problem(resp, 400, "Email format looks invalid")

    def test_non_admin_cannot_create(self, client, member):
        resp = client.post(
            USERS,
            json={"name": "Some New Person", "email": "new@example.com", "password": "Secret@123"},
            headers=member.headers,
        )

        assert_problem(resp, 403)


class TestRatingViews:
    def test_user_sees_own_ratings_with_store_details(self, client, session, member):
        store = StoreFactory(name="Pizza Hut", address="12 Main Street")
        RatingFactory(user=session.get(User, member.id), store=store, value=5, comment="Great")
        session.commit()

        resp = client.get(build_url(f"/users/{member.id}/ratings"), headers=member.headers)

        assert resp.status_code == 200
        (row,) = resp.get_json()["data"]
        assert (row["store_name"], row["store_address"], row["rating"], row["comment"]) == (
            "Pizza Hut",
            "12 Main Street",
            5,
            "Great",
        )

    def test_other_users_ratings_need_admin(self, client, member, admin):
        assert_problem(client.get(build_url(f"/users/{admin.id}/ratings"), headers=member.headers), 403)
        assert client.get(build_url(f"/users/{member.id}/ratings"), headers=admin.headers).status_code == 200

    def test_owner_dashboard_lists_ratings_on_own_stores(self, client, session, owner, member):
        mine = StoreFactory(owner=session.get(User, owner.id), name="Owner Store")
        RatingFactory(user=session.get(User, member.id), store=mine, value=4, comment="Nice")
        RatingFactory(store=StoreFactory(owner=OwnerFactory()), value=1)
        session.commit()

        resp = client.get(build_url(f"/owners/{owner.id}/ratings"), headers=owner.headers)

        assert resp.status_code == 200
        (row,) = resp.get_json()["data"]
        assert (row["store_name"], row["user_name"], row["user_email"], row["rating"]) == (
            "Owner Store",
            "Bob Regular Member",
            member.email,
            4,
        )

    def test_owner_dashboard_of_someone_else_is_forbidden(self, client, owner, member):
        assert_problem(client.get(build_url(f"/owners/{owner.id}/ratings"), headers=member.headers), 403)
