"""User listing: search over name/email/address/role and whitelisted sorting."""

from __future__ import annotations

import pytest

from storerate.models.user import Role
from storerate.repositories import UserRepository
from tests.factories.user import AdminFactory, OwnerFactory, UserFactory


@pytest.fixture()
def repo(session):
    return UserRepository(session=session)


def test_search_by_role_and_address(repo, session):
    owner = OwnerFactory(address="1 Harbour Road")
    UserFactory(address="2 Hill Street")
    session.flush()

    assert [u.id for u in repo.search(search="store_owner")] == [owner.id]
    assert [u.id for u in repo.search(search="HARBOUR")] == [owner.id]


def test_sort_by_email_descending(repo, session):
    UserFactory(email="aa@example.com")
    UserFactory(email="zz@example.com")
    session.flush()

    emails = [u.email for u in repo.search(sort_by="email", descending=True)]

    assert emails == sorted(emails, reverse=True)


def test_authenticate_and_lookup_are_case_insensitive(repo, session):
    user = UserFactory(email="mixed@example.com", password="Secret@123")
    session.flush()

    assert repo.get_by_email("  MIXED@example.com ") is user
    assert repo.exists_by_email("mixed@EXAMPLE.com") is True
    assert repo.authenticate("mixed@example.com", "Secret@123") is user
    assert repo.authenticate("mixed@example.com", "wrong") is None
    assert repo.authenticate("nobody@example.com", "Secret@123") is None


def test_update_password_rehashes(repo, session):
    user = AdminFactory(password="Old@Pass1")
    session.flush()

    repo.update_password(user, "New@Pass1")

    assert user.verify_password("New@Pass1")
    assert not user.verify_password("Old@Pass1")
    assert user.role == Role.ADMIN
